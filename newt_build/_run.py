"""Blocking child-process execution for build steps.

Every external tool the orchestrator touches goes through :func:`run`, so a
spawn failure or a non-zero exit always surfaces as a
:class:`~newt_build.errors.ToolFailureError` naming the step and package.
Nothing is retried.
"""

import subprocess

from newt_build.errors import ToolFailureError


def _describe(cmd):
    return " ".join(str(part) for part in cmd)


def run(cmd, *, step, package=None, cwd=None, env=None, capture=False,
        stdin=None):
    """Run *cmd* to completion and return the CompletedProcess.

    With *capture* the output is collected as text; otherwise the child
    inherits stdout/stderr so configure and make output stays visible.
    """
    cmd = [str(part) for part in cmd]
    try:
        result = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd is not None else None,
            env=dict(env) if env is not None else None,
            stdin=stdin,
            capture_output=capture,
            text=True,
        )
    except OSError as exc:
        raise ToolFailureError(
            f"unable to run {cmd[0]}: {exc}", step=step, package=package,
        ) from exc
    if result.returncode != 0:
        detail = ""
        if capture and result.stderr:
            detail = f"\n{result.stderr.rstrip()}"
        raise ToolFailureError(
            f"{_describe(cmd)} failed with exit code {result.returncode}{detail}",
            step=step, package=package, returncode=result.returncode,
        )
    return result

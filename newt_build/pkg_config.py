"""pkg-config probing and the library descriptor it produces."""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field

from newt_build._run import run
from newt_build.errors import DependencyError, ToolFailureError


@dataclass(slots=True)
class LibraryDescriptor:
    """Compile/link facts for one library as reported by pkg-config."""

    name: str
    include_paths: list[str] = field(default_factory=list)
    link_paths: list[str] = field(default_factory=list)
    libs: list[str] = field(default_factory=list)
    version: str | None = None
    static: bool = False

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "include_paths": list(self.include_paths),
            "link_paths": list(self.link_paths),
            "libs": list(self.libs),
            "version": self.version,
            "static": self.static,
        }


def parse_flags(output: str, descriptor: LibraryDescriptor) -> LibraryDescriptor:
    """Fill *descriptor* from ``--cflags --libs`` output, keeping order."""
    for token in shlex.split(output):
        if token.startswith("-I") and len(token) > 2:
            descriptor.include_paths.append(token[2:])
        elif token.startswith("-L") and len(token) > 2:
            descriptor.link_paths.append(token[2:])
        elif token.startswith("-l") and len(token) > 2:
            descriptor.libs.append(token[2:])
    return descriptor


def _pkg_config(env) -> str:
    return env.get("PKG_CONFIG") or "pkg-config"


def probe(module, min_version, build_env, *, static=False, package=None,
          step="probe") -> LibraryDescriptor:
    """Query pkg-config for *module* at *min_version* or newer.

    Raises DependencyError when the module is missing or too old, and
    ToolFailureError when pkg-config itself cannot be run.
    """
    env = build_env.environ
    tool = _pkg_config(env)
    try:
        run([tool, f"--atleast-version={min_version}", module],
            step=step, package=package, env=env, capture=True)
    except ToolFailureError as exc:
        if exc.returncode is None:
            raise
        raise DependencyError(
            f"pkg-config could not find {module} >= {min_version}",
            step=step, package=package,
            hint=f"PKG_CONFIG_PATH={env.get('PKG_CONFIG_PATH', '')}",
        ) from exc

    cmd = [tool]
    if static:
        cmd.append("--static")
    cmd += ["--cflags", "--libs", module]
    flags = run(cmd, step=step, package=package, env=env, capture=True)
    version = run([tool, "--modversion", module], step=step, package=package,
                  env=env, capture=True)

    descriptor = LibraryDescriptor(name=module, static=static,
                                   version=version.stdout.strip() or None)
    return parse_flags(flags.stdout, descriptor)

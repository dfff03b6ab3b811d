"""Compile the C glue that exposes ``NEWT_COLORSET_CUSTOM`` to callers.

The macro cannot be bound directly, so a one-function C file is compiled
against the resolved newt headers and archived as ``libnewt-rs.a`` in the
output root.
"""

import os
import shlex

from newt_build._run import run
from newt_build.errors import MissingInputError, ToolFailureError

GLUE_SOURCE = os.path.join("csrc", "colorset_custom.c")
GLUE_LIBRARY = "newt-rs"


def archiver(env, target, host):
    """``AR`` if set, ``<target>-ar`` when cross-compiling, else ``ar``."""
    if env.get("AR"):
        return env["AR"]
    if host and target != host:
        return f"{target}-ar"
    return "ar"


def compile_command(compiler, source, obj, include_paths, cflags=""):
    cmd = shlex.split(compiler)
    cmd += ["-c", "-O2", "-fPIC"]
    cmd += shlex.split(cflags)
    cmd += [f"-I{path}" for path in include_paths]
    cmd += [source, "-o", obj]
    return cmd


def compile_glue(build_env, descriptor, *, project_root, out_dir, target, host):
    """Compile and archive the glue; return the path of the static library."""
    source = os.path.join(project_root, GLUE_SOURCE)
    if not os.path.isfile(source):
        raise MissingInputError(f"glue source not found: {source}", step="compile-glue")

    compiler = build_env.get("CC") or "cc"
    obj = os.path.join(out_dir, "colorset_custom.o")
    lib = os.path.join(out_dir, f"lib{GLUE_LIBRARY}.a")
    try:
        os.makedirs(out_dir, exist_ok=True)
    except OSError as exc:
        raise ToolFailureError(f"unable to create {out_dir}: {exc}",
                               step="compile-glue") from exc

    cmd = compile_command(compiler, source, obj, descriptor.include_paths,
                          build_env.get("CFLAGS", ""))
    run(cmd, step="compile-glue", env=build_env.environ)

    try:
        if os.path.exists(lib):
            os.unlink(lib)
    except OSError as exc:
        raise ToolFailureError(f"unable to remove stale {lib}: {exc}",
                               step="archive-glue") from exc
    run([archiver(build_env.environ, target, host), "crs", lib, obj],
        step="archive-glue", env=build_env.environ)
    print(f"compiled: {os.path.basename(lib)}")
    return lib

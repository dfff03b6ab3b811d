"""Host tool discovery: GNU Make and the C compiler.

The vendored makefiles use GNU-specific syntax, so a make that is not GNU
Make is as good as none.  The compiler chosen here is published as ``CC`` in
the build context so configure, make and the glue compile all agree.
"""

import re
import subprocess

from newt_build.errors import MissingToolError

MAKE_CANDIDATES = ("make", "gmake")

_GNU_MAKE_RE = re.compile(r"\AGNU Make")


def is_gnu_make(output):
    """True if *output* starts with the ``GNU Make`` version banner."""
    return bool(output) and _GNU_MAKE_RE.match(output) is not None


def check_make(make, env=None):
    """Run ``<make> -f - --version`` with empty stdin and test its banner."""
    try:
        result = subprocess.run(
            [make, "-f", "-", "--version"],
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            env=env,
        )
    except OSError:
        return False
    return is_gnu_make(result.stdout)


def find_gnu_make(env=None, candidates=MAKE_CANDIDATES):
    for make in candidates:
        if check_make(make, env):
            return make
    raise MissingToolError(
        "GNU Make is required for building this package.",
        step="find-make",
        hint=f"tried: {', '.join(candidates)}",
    )


def default_compiler(env, target, host):
    """Pick a C compiler the way the build tool's toolchain discovery does.

    Checks ``CC_<target>``, ``CC_<target_with_underscores>``, then
    ``TARGET_CC`` (cross) or ``HOST_CC`` (native), then ``CC``; falls back
    to ``<target>-gcc`` when cross-compiling and ``cc`` otherwise.
    """
    cross = bool(host) and target != host
    keys = [f"CC_{target}", f"CC_{target.replace('-', '_')}",
            "TARGET_CC" if cross else "HOST_CC", "CC"]
    for key in keys:
        value = env.get(key)
        if value:
            return value
    if cross:
        return f"{target}-gcc"
    return "cc"


def is_invocable(compiler, env=None):
    """True if a shell lookup finds *compiler*."""
    try:
        result = subprocess.run(
            ["sh", "-c", f'command -v "{compiler}"'],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            env=env,
        )
    except OSError:
        return False
    return result.returncode == 0


def resolve_compiler(env, target, host):
    """Return the discovered compiler if it can be invoked, else None."""
    compiler = default_compiler(env, target, host)
    if is_invocable(compiler, env):
        return compiler
    return None


def publish_compiler(build_env, target, host):
    """Set ``CC`` in *build_env* unless an override is already present.

    Returns the compiler the build context will use, or None.
    """
    compiler = resolve_compiler(build_env.environ, target, host)
    if compiler and not build_env.get("CC"):
        build_env.set("CC", compiler)
    return build_env.get("CC") or None

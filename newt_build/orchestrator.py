"""Top-level orchestration: system probe or from-source chain, then glue.

If a system ``libnewt`` new enough is visible to pkg-config and static
linking was not requested, it is used as-is.  Otherwise popt, slang and newt
are built in that order from the vendored archives, newt receiving the
include/link paths of the other two.  Builds are strictly sequential.
"""

import json
import os
import sys
from dataclasses import dataclass, field

from newt_build._env import BuildEnv
from newt_build.errors import NativeBuildError, ToolFailureError
from newt_build.glue import GLUE_LIBRARY, compile_glue
from newt_build.pkg_config import probe
from newt_build.recipes import NEWT_VERSION, build_package
from newt_build.settings import BuildSettings
from newt_build.toolchain import find_gnu_make, publish_compiler

MANIFEST_NAME = "newt-build.json"


@dataclass
class BuildResult:
    descriptor: object
    static: bool
    from_source: bool
    glue_library: str | None = None
    dependencies: list = field(default_factory=list)


def probe_system(build_env):
    """Return the system libnewt descriptor, or None if pkg-config fails."""
    try:
        return probe("libnewt", NEWT_VERSION, build_env, step="system-probe")
    except NativeBuildError as exc:
        print(f"system libnewt unavailable: {exc}")
        return None


def build_libs(settings, build_env, make):
    """Build popt, slang, then newt; return (newt descriptor, [dep descriptors])."""
    common = dict(
        make=make,
        out_dir=settings.out_dir,
        target=settings.target,
        vendor_dir=settings.vendor_dir,
        gnuconfig_dir=settings.gnuconfig_dir,
    )
    deps = []
    for package in ("popt", "slang"):
        deps.append(build_package(package, build_env, **common).descriptor)
    newt = build_package("newt", build_env, deps=deps, **common)
    return newt.descriptor, deps


def _link_kind(descriptor, lib):
    if not descriptor.static:
        return ""
    for path in descriptor.link_paths:
        if os.path.isfile(os.path.join(path, f"lib{lib}.a")):
            return "static="
    return ""


def link_directives(result, out_dir):
    """Lines telling the invoking build tool how to link the result."""
    lines = []

    def emit(line):
        if line not in lines:
            lines.append(line)

    for descriptor in [*result.dependencies, result.descriptor]:
        for path in descriptor.link_paths:
            emit(f"cargo:rustc-link-search=native={path}")
        for lib in descriptor.libs:
            emit(f"cargo:rustc-link-lib={_link_kind(descriptor, lib)}{lib}")
    if result.glue_library:
        emit(f"cargo:rustc-link-search=native={out_dir}")
        emit(f"cargo:rustc-link-lib=static={GLUE_LIBRARY}")
    if result.static:
        emit("cargo:rustc-link-lib=static=newt")
    return lines


def write_manifest(result, out_dir):
    path = os.path.join(out_dir, MANIFEST_NAME)
    payload = {
        "descriptor": result.descriptor.to_dict(),
        "dependencies": [dep.to_dict() for dep in result.dependencies],
        "static": result.static,
        "from_source": result.from_source,
        "glue_library": result.glue_library,
    }
    try:
        with open(path, "w") as f:
            json.dump(payload, f, indent=2, sort_keys=True)
            f.write("\n")
    except OSError as exc:
        raise ToolFailureError(f"unable to write {path}: {exc}",
                               step="write-manifest") from exc
    return path


def run(settings, environ):
    """Run one orchestration and return the BuildResult.

    *environ* is the host environment; it is copied into a BuildEnv and
    never modified.
    """
    build_env = BuildEnv.from_host(environ)
    try:
        os.makedirs(settings.out_dir, exist_ok=True)
    except OSError as exc:
        raise ToolFailureError(f"unable to create {settings.out_dir}: {exc}",
                               step="settings") from exc

    system = probe_system(build_env)
    if system is not None and not settings.static:
        publish_compiler(build_env, settings.target, settings.host)
        result = BuildResult(descriptor=system, static=False, from_source=False)
    else:
        make = find_gnu_make(build_env.environ)
        publish_compiler(build_env, settings.target, settings.host)
        descriptor, deps = build_libs(settings, build_env, make)
        result = BuildResult(descriptor=descriptor, static=settings.static,
                             from_source=True, dependencies=deps)

    result.glue_library = compile_glue(
        build_env, result.descriptor,
        project_root=settings.project_root,
        out_dir=settings.out_dir,
        target=settings.target,
        host=settings.host,
    )
    write_manifest(result, settings.out_dir)
    return result


def main(environ=None):
    environ = os.environ if environ is None else environ
    try:
        settings = BuildSettings.from_environ(environ)
        result = run(settings, environ)
    except NativeBuildError as exc:
        print(f"error: {exc}", file=sys.stderr)
        sys.exit(1)
    for line in link_directives(result, settings.out_dir):
        print(line)


if __name__ == "__main__":
    main()

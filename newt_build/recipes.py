"""Per-package build recipes for popt, slang and newt.

Each package goes through the same stages::

    NOT_EXTRACTED -> EXTRACTED -> PATCHED (popt, slang) -> CONFIGURED
                  -> INSTALLED -> PROBED

Reaching PROBED yields a :class:`~newt_build.pkg_config.LibraryDescriptor`.
Any failed transition raises and aborts the whole orchestration; there is
no resumable partial state and nothing is skipped on a re-run.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import StrEnum

from newt_build._run import run
from newt_build.build_config import BuildTarget, find_archive
from newt_build.errors import ToolFailureError
from newt_build.extract import extract_archive
from newt_build.gnuconfig import update_gnuconfig_files
from newt_build.pkg_config import LibraryDescriptor, probe

NEWT_VERSION = "0.52.25"
POPT_VERSION = "1.19"
SLANG_VERSION = "2.3.3"


class Stage(StrEnum):
    NOT_EXTRACTED = "not-extracted"
    EXTRACTED = "extracted"
    PATCHED = "patched"
    CONFIGURED = "configured"
    INSTALLED = "installed"
    PROBED = "probed"


@dataclass(frozen=True, slots=True)
class Recipe:
    package: str
    version: str
    module: str
    archive_suffix: str = ".tar.gz"
    aux_dir: str | None = None
    configure_args: tuple[str, ...] = ()
    install_target: str = "install"
    force_pic: bool = False


RECIPES: dict[str, Recipe] = {
    "popt": Recipe(
        package="popt",
        version=POPT_VERSION,
        module="popt",
        aux_dir="build-aux",
        configure_args=("--disable-nls", "--disable-rpath"),
    ),
    # install-static skips docs and shared objects.  The static archive
    # ends up inside a shared object later, hence -fPIC.
    "slang": Recipe(
        package="slang",
        version=SLANG_VERSION,
        module="slang",
        archive_suffix=".tar.bz2",
        aux_dir="autoconf",
        install_target="install-static",
        force_pic=True,
    ),
    "newt": Recipe(
        package="newt",
        version=NEWT_VERSION,
        module="libnewt",
        configure_args=("--disable-nls", "--without-python", "--without-tcl"),
    ),
}

BUILD_ORDER = ("popt", "slang", "newt")


def get_recipe(package):
    try:
        return RECIPES[package]
    except KeyError:
        raise ValueError(f"Unexpected package requested to be built: {package}") from None


def build_target_for(recipe, out_dir, target, vendor_dir):
    return BuildTarget(
        package=recipe.package,
        version=recipe.version,
        out_dir=out_dir,
        target=target,
        vendor_dir=vendor_dir,
        archive_suffix=recipe.archive_suffix,
        aux_dir=recipe.aux_dir,
    )


@dataclass(slots=True)
class PackageBuild:
    """One package's walk through the recipe stages."""

    recipe: Recipe
    target: BuildTarget
    stage: Stage = Stage.NOT_EXTRACTED
    descriptor: LibraryDescriptor | None = None
    history: list[Stage] = field(default_factory=list)

    def advance(self, stage: Stage) -> None:
        self.stage = stage
        self.history.append(stage)

    def archive(self) -> str:
        """The conventional archive path, or whichever compression is vendored."""
        path = self.target.archive_path
        if os.path.isfile(path):
            return path
        return find_archive(self.target.vendor_dir, self.target.version_name) or path

    def extract(self) -> None:
        try:
            os.makedirs(self.target.build_prefix, exist_ok=True)
        except OSError as exc:
            raise ToolFailureError(
                f"unable to create {self.target.build_prefix}: {exc}",
                step="extract", package=self.recipe.package,
            ) from exc
        extract_archive(self.archive(), self.target.build_prefix,
                        package=self.recipe.package)
        self.advance(Stage.EXTRACTED)

    def patch(self, gnuconfig_dir) -> None:
        aux_path = self.target.autoconf_aux_path
        if aux_path is None:
            return
        update_gnuconfig_files(aux_path, gnuconfig_dir, package=self.recipe.package)
        self.advance(Stage.PATCHED)

    def configure(self, build_env) -> None:
        src = self.target.src_path
        if not os.path.isdir(src):
            raise ToolFailureError(
                f"source directory not found after extraction: {src}",
                step="configure", package=self.recipe.package,
            )
        cmd = [
            "./configure",
            f"--prefix={self.target.install_prefix}",
            f"--host={self.target.host}",
            *self.recipe.configure_args,
        ]
        run(cmd, step="configure", package=self.recipe.package, cwd=src,
            env=build_env.environ)
        self.advance(Stage.CONFIGURED)

    def install(self, build_env, make) -> None:
        run([make, self.recipe.install_target], step="install",
            package=self.recipe.package, cwd=self.target.src_path,
            env=build_env.environ)
        print(f"installed: {self.target.version_name}")
        self.advance(Stage.INSTALLED)

    def probe(self, build_env) -> LibraryDescriptor:
        build_env.append_pkg_config_path(self.target.pkg_config_path)
        self.descriptor = probe(self.recipe.module, self.recipe.version, build_env,
                                static=True, package=self.recipe.package)
        self.advance(Stage.PROBED)
        return self.descriptor


def build_package(package, build_env, *, make, out_dir, target, vendor_dir,
                  gnuconfig_dir, deps=()):
    """Build *package* from its vendored archive and return the PackageBuild.

    Include/link paths of *deps* are exported as CPPFLAGS/LDFLAGS for the
    duration of the build and cleared afterwards, whatever the outcome.
    """
    recipe = get_recipe(package)
    build = PackageBuild(recipe, build_target_for(recipe, out_dir, target, vendor_dir))
    print(f"building: {build.target.version_name} (host {build.target.host})")

    with build_env.dependency_flags(deps):
        if recipe.force_pic:
            with build_env.pic_forced():
                _compile_stages(build, build_env, make, gnuconfig_dir)
        else:
            _compile_stages(build, build_env, make, gnuconfig_dir)
        build.probe(build_env)
    return build


def _compile_stages(build, build_env, make, gnuconfig_dir):
    build.extract()
    build.patch(gnuconfig_dir)
    build.configure(build_env)
    build.install(build_env, make)

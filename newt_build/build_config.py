"""Deterministic per-package path derivation.

Everything here is a pure function of ``(package, version, out_dir,
target)`` plus the vendor directory fixed at orchestrator start.  Nothing
touches the filesystem except :func:`find_archive`.
"""

import os
from dataclasses import dataclass

# Triples the autotools config.sub does not know, mapped to their canonical
# spelling for --host.
_TARGET_ALIASES = {
    "riscv64gc-unknown-linux-gnu": "riscv64-unknown-linux-gnu",
}

_ARCHIVE_SUFFIXES = (".tar.bz2", ".tar.gz")


def translate_target(triple):
    """Return the autotools-compatible spelling of *triple*."""
    return _TARGET_ALIASES.get(triple, triple)


def find_archive(vendor_dir, version_name):
    """Locate ``<vendor_dir>/<version_name>.tar.bz2`` or ``.tar.gz``.

    Returns None when neither exists.
    """
    for suffix in _ARCHIVE_SUFFIXES:
        candidate = os.path.join(vendor_dir, version_name + suffix)
        if os.path.isfile(candidate):
            return candidate
    return None


@dataclass(frozen=True, slots=True)
class BuildTarget:
    package: str
    version: str
    out_dir: str
    target: str
    vendor_dir: str = "vendor"
    archive_suffix: str = ".tar.gz"
    aux_dir: str | None = None

    @property
    def version_name(self):
        return f"{self.package}-{self.version}"

    @property
    def host(self):
        return translate_target(self.target)

    @property
    def build_prefix(self):
        return os.path.join(self.out_dir, "build")

    @property
    def archive_path(self):
        return os.path.join(self.vendor_dir, self.version_name + self.archive_suffix)

    @property
    def src_path(self):
        return os.path.join(self.build_prefix, self.version_name)

    @property
    def install_prefix(self):
        return os.path.join(self.out_dir, "install", self.version_name)

    @property
    def pkg_config_path(self):
        return os.path.join(self.install_prefix, "lib", "pkgconfig")

    @property
    def autoconf_aux_path(self):
        if self.aux_dir is None:
            return None
        return os.path.join(self.src_path, self.aux_dir)

    def paths(self):
        """All derived values as a dict."""
        return {
            "build_prefix": self.build_prefix,
            "archive_path": self.archive_path,
            "src_path": self.src_path,
            "install_prefix": self.install_prefix,
            "pkg_config_path": self.pkg_config_path,
            "autoconf_aux_path": self.autoconf_aux_path,
            "host": self.host,
        }

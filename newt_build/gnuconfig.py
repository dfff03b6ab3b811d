"""Refresh a package's config.guess/config.sub from the bundled copies.

Vendored releases ship portability scripts older than some target triples
(e.g. riscv64), so their ./configure rejects a --host it would otherwise
build for.  Overwriting the two scripts in the package's autoconf aux
directory with the copies bundled under ``gnuconfig/`` fixes that.
"""

import os
import shutil

from newt_build.errors import MissingInputError, ToolFailureError

GNUCONFIG_SCRIPTS = ("config.guess", "config.sub")


def bundled_scripts(gnuconfig_dir, package=None):
    """Return paths of the bundled scripts, failing if any is missing."""
    paths = []
    for name in GNUCONFIG_SCRIPTS:
        path = os.path.join(gnuconfig_dir, name)
        if not os.path.isfile(path):
            raise MissingInputError(
                f"bundled {name} not found: {path}", step="patch", package=package,
            )
        paths.append(path)
    return paths


def update_gnuconfig_files(aux_path, gnuconfig_dir, package=None):
    """Copy the bundled scripts over those in *aux_path*.

    The copies keep the executable bit so configure can run them.
    """
    sources = bundled_scripts(gnuconfig_dir, package)
    if not os.path.isdir(aux_path):
        raise MissingInputError(
            f"autoconf aux directory not found: {aux_path}",
            step="patch", package=package,
        )
    for src in sources:
        dest = os.path.join(aux_path, os.path.basename(src))
        try:
            shutil.copyfile(src, dest)
            os.chmod(dest, os.stat(dest).st_mode | 0o755)
        except OSError as exc:
            raise ToolFailureError(
                f"unable to update {dest}: {exc}", step="patch", package=package,
            ) from exc
    print(f"patched: {aux_path}")

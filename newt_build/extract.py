"""Vendored source archive extraction.

Supports: .tar.gz, .tgz, .tar.bz2, .tbz2, .tar.xz, .tar

Format is detected from the filename and the archive is unpacked with
Python's tarfile module into the build staging directory.  Extraction is
re-run unconditionally on every build.
"""

import os
import tarfile

from newt_build.errors import MissingInputError, ToolFailureError

# Map of format string -> tarfile mode
_FORMATS = {
    "tar.gz":  "r:gz",
    "tgz":     "r:gz",
    "tar.bz2": "r:bz2",
    "tbz2":    "r:bz2",
    "tar.xz":  "r:xz",
    "tar":     "r:",
}


def detect_format(path):
    """Detect archive format from filename."""
    name = os.path.basename(path).lower()
    # Check multi-part extensions first (longest match)
    for fmt in ("tar.gz", "tar.bz2", "tar.xz"):
        if name.endswith("." + fmt):
            return fmt
    for fmt in ("tgz", "tbz2", "tar"):
        if name.endswith("." + fmt):
            return fmt
    return None


def extract_tar_native(archive, output, mode, package=None):
    """Extract *archive* into *output* using Python's tarfile module."""
    output_abs = os.path.abspath(output)
    with tarfile.open(archive, mode) as tf:
        for member in tf.getmembers():
            member.name = os.path.normpath(member.name)
            # Security: prevent path traversal
            dest = os.path.abspath(os.path.join(output, member.name))
            if dest != output_abs and not dest.startswith(output_abs + os.sep):
                raise ToolFailureError(
                    f"path traversal detected: {member.name}",
                    step="extract", package=package,
                )
            tf.extract(member, output, filter="tar")


def extract_archive(archive, output, package=None):
    """Unpack *archive* into *output*, creating *output* if needed."""
    if not os.path.isfile(archive):
        raise MissingInputError(
            f"archive not found: {archive}", step="extract", package=package,
        )
    fmt = detect_format(archive)
    if fmt is None:
        raise MissingInputError(
            f"cannot detect format of {archive}", step="extract", package=package,
        )
    try:
        os.makedirs(output, exist_ok=True)
        extract_tar_native(archive, output, _FORMATS[fmt], package=package)
    except (tarfile.TarError, OSError, EOFError) as exc:
        raise ToolFailureError(
            f"unable to extract {archive}: {exc}", step="extract", package=package,
        ) from exc
    print(f"extracted: {os.path.basename(archive)}")

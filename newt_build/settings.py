"""Build settings read once from the invoking build tool's environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from newt_build.errors import MissingInputError

# Root of this checkout: holds vendor/, gnuconfig/ and csrc/.
_CHECKOUT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

_STATIC_TOGGLES = ("NEWT_STATIC", "CARGO_FEATURE_STATIC")


def _require(environ: Mapping[str, str], key: str) -> str:
    value = environ.get(key)
    if not value:
        raise MissingInputError(f"{key} is not set", step="settings")
    return value


@dataclass(frozen=True, slots=True)
class BuildSettings:
    out_dir: str
    target: str
    host: str
    project_root: str
    static: bool = False

    @property
    def vendor_dir(self) -> str:
        return os.path.join(self.project_root, "vendor")

    @property
    def gnuconfig_dir(self) -> str:
        return os.path.join(self.project_root, "gnuconfig")

    @classmethod
    def from_environ(cls, environ: Mapping[str, str]) -> "BuildSettings":
        out_dir = os.path.abspath(_require(environ, "OUT_DIR"))
        target = _require(environ, "TARGET")
        host = environ.get("HOST") or target
        project_root = (environ.get("NEWT_BUILD_ROOT")
                        or environ.get("CARGO_MANIFEST_DIR")
                        or _CHECKOUT_ROOT)
        static = any(key in environ for key in _STATIC_TOGGLES)
        return cls(
            out_dir=out_dir,
            target=target,
            host=host,
            project_root=os.path.abspath(project_root),
            static=static,
        )

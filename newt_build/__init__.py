"""Build popt, slang and newt from vendored sources for the newt bindings."""

from newt_build.errors import NativeBuildError
from newt_build.orchestrator import main, run

__all__ = ["NativeBuildError", "main", "run"]

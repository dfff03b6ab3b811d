"""Build-context environment shared by every build step.

The orchestrator never mutates ``os.environ``.  Instead a :class:`BuildEnv`
is created once from the host environment and passed to each step; child
processes receive ``env=build_env.environ``.  Two brackets are maintained on
it:

* dependency flags: ``CPPFLAGS``/``LDFLAGS`` carry ``-I``/``-L`` paths of
  already-built dependencies into the package currently being built and are
  cleared afterwards, so they are empty outside a build step.
* PIC forcing: ``-fPIC`` is appended to ``CFLAGS`` for one package and the
  prior value (or its absence) is restored afterwards.

``PKG_CONFIG_PATH`` only ever grows during a run.
"""

from contextlib import contextmanager
from dataclasses import dataclass

PIC_FLAG = "-fPIC"

# Scoped to a single build step; never inherited from the host.
_DEPENDENCY_VARS = ("CPPFLAGS", "LDFLAGS")

# Vars pinned to fixed values so tool banners and diagnostics are not
# localized.
_DETERMINISM_PINS = {
    "LC_ALL": "C",
    "LANG": "C",
}


def clean_env(environ):
    """Return a build environment dict derived from *environ*.

    Copies the host environment, drops the step-scoped dependency flags,
    then applies determinism pins.
    """
    env = {key: val for key, val in environ.items() if key not in _DEPENDENCY_VARS}
    env.update(_DETERMINISM_PINS)
    return env


def append_search_path(current, path):
    """Append *path* to a colon-separated search path.

    ``"V"`` + ``"P"`` -> ``"V:P"``; an unset or empty value yields ``"P"``.
    """
    path = str(path)
    if current:
        return f"{current}:{path}"
    return path


def include_flags(descriptors):
    return " ".join(f"-I{p}" for desc in descriptors for p in desc.include_paths)


def link_flags(descriptors):
    return " ".join(f"-L{p}" for desc in descriptors for p in desc.link_paths)


@dataclass(frozen=True, slots=True)
class CflagsSnapshot:
    """Prior ``CFLAGS`` value saved while PIC is forced; ``None`` means unset."""

    value: str | None


class BuildEnv:
    """Mutable build context threaded through every build step."""

    def __init__(self, environ=None):
        self.environ = dict(environ or {})
        self.cflags_snapshot = None

    @classmethod
    def from_host(cls, environ):
        return cls(clean_env(environ))

    def get(self, key, default=None):
        return self.environ.get(key, default)

    def set(self, key, value):
        self.environ[key] = str(value)

    def unset(self, key):
        self.environ.pop(key, None)

    # -- dependency flags ------------------------------------------------

    def inject_dependency_flags(self, descriptors):
        """Export include/link paths of *descriptors* for the next build.

        A variable is only set when at least one path contributes to it.
        """
        cppflags = include_flags(descriptors)
        ldflags = link_flags(descriptors)
        if cppflags:
            self.environ["CPPFLAGS"] = cppflags
        if ldflags:
            self.environ["LDFLAGS"] = ldflags

    def clear_dependency_flags(self):
        for key in _DEPENDENCY_VARS:
            self.environ.pop(key, None)

    @contextmanager
    def dependency_flags(self, descriptors=()):
        self.inject_dependency_flags(descriptors)
        try:
            yield self
        finally:
            self.clear_dependency_flags()

    # -- position-independent code ---------------------------------------

    def force_pic(self):
        """Append ``-fPIC`` to ``CFLAGS`` unless already present.

        When the marker is already there nothing is saved and nothing
        changes.
        """
        cflags = self.environ.get("CFLAGS")
        if cflags is not None and PIC_FLAG in cflags:
            return
        self.cflags_snapshot = CflagsSnapshot(cflags)
        self.environ["CFLAGS"] = f"{cflags} {PIC_FLAG}" if cflags else PIC_FLAG

    def restore_cflags(self):
        snapshot = self.cflags_snapshot
        if snapshot is None:
            return
        if snapshot.value is None:
            self.environ.pop("CFLAGS", None)
        else:
            self.environ["CFLAGS"] = snapshot.value
        self.cflags_snapshot = None

    @contextmanager
    def pic_forced(self):
        self.force_pic()
        try:
            yield self
        finally:
            self.restore_cflags()

    # -- pkg-config search path ------------------------------------------

    def append_pkg_config_path(self, path):
        self.environ["PKG_CONFIG_PATH"] = append_search_path(
            self.environ.get("PKG_CONFIG_PATH"), path)
        return self.environ["PKG_CONFIG_PATH"]

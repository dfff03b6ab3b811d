from __future__ import annotations

import os
import subprocess

import pytest

from newt_build import recipes
from newt_build.pkg_config import LibraryDescriptor


class FakeBuild:
    """Stands in for tar, configure, make and pkg-config during recipe runs.

    Every call is appended to ``events`` as ``(kind, package, detail)`` with
    a copy of the environment it saw.
    """

    def __init__(self) -> None:
        self.events: list[tuple[str, str | None, object, dict[str, str]]] = []
        self.fail_on: tuple[str, str] | None = None

    def _maybe_fail(self, step: str, package: str | None) -> None:
        if self.fail_on == (step, package):
            from newt_build.errors import ToolFailureError
            raise ToolFailureError("simulated failure", step=step, package=package,
                                   returncode=2)

    def extract_archive(self, archive, output, package=None):
        self._maybe_fail("extract", package)
        name = os.path.basename(archive)
        for suffix in (".tar.gz", ".tar.bz2"):
            if name.endswith(suffix):
                name = name[: -len(suffix)]
        os.makedirs(os.path.join(output, name), exist_ok=True)
        self.events.append(("extract", package, archive, {}))

    def update_gnuconfig_files(self, aux_path, gnuconfig_dir, package=None):
        self._maybe_fail("patch", package)
        self.events.append(("patch", package, aux_path, {}))

    def run(self, cmd, *, step, package=None, cwd=None, env=None, capture=False,
            stdin=None):
        self.events.append((step, package, list(cmd), dict(env or {})))
        self._maybe_fail(step, package)
        return subprocess.CompletedProcess(cmd, 0, "", "")

    def probe(self, module, min_version, build_env, *, static=False, package=None,
              step="probe"):
        self._maybe_fail(step, package)
        env = dict(build_env.environ)
        self.events.append(("probe", package, module, env))
        pkgconfig = env["PKG_CONFIG_PATH"].split(":")[-1]
        prefix = os.path.dirname(os.path.dirname(pkgconfig))
        return LibraryDescriptor(
            name=module,
            include_paths=[os.path.join(prefix, "include")],
            link_paths=[os.path.join(prefix, "lib")],
            libs=[module.removeprefix("lib")],
            version=min_version,
            static=static,
        )

    def steps(self, kind: str) -> list[tuple[str, str | None, object, dict[str, str]]]:
        return [event for event in self.events if event[0] == kind]

    def index(self, kind: str, package: str) -> int:
        for i, event in enumerate(self.events):
            if event[0] == kind and event[1] == package:
                return i
        raise AssertionError(f"no {kind} event for {package}")


@pytest.fixture
def fake_build(monkeypatch) -> FakeBuild:
    fake = FakeBuild()
    monkeypatch.setattr(recipes, "extract_archive", fake.extract_archive)
    monkeypatch.setattr(recipes, "update_gnuconfig_files", fake.update_gnuconfig_files)
    monkeypatch.setattr(recipes, "run", fake.run)
    monkeypatch.setattr(recipes, "probe", fake.probe)
    return fake


@pytest.fixture
def completed():
    """Factory for CompletedProcess results returned by a patched subprocess.run."""

    def _make(stdout: str = "", returncode: int = 0, stderr: str = ""):
        return subprocess.CompletedProcess([], returncode, stdout, stderr)

    return _make

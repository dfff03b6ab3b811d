"""Unit tests for per-package path derivation and target translation."""
from __future__ import annotations

import dataclasses

import pytest

from newt_build.build_config import BuildTarget, find_archive, translate_target
from newt_build.recipes import RECIPES, build_target_for


def _popt(**overrides) -> BuildTarget:
    fields = dict(package="popt", version="1.19", out_dir="/tmp/x",
                  target="x86_64-unknown-linux-gnu", vendor_dir="/src/vendor")
    fields.update(overrides)
    return BuildTarget(**fields)


def test_popt_paths_example():
    target = _popt()
    assert target.build_prefix == "/tmp/x/build"
    assert target.src_path == "/tmp/x/build/popt-1.19"
    assert target.install_prefix == "/tmp/x/install/popt-1.19"
    assert target.pkg_config_path == "/tmp/x/install/popt-1.19/lib/pkgconfig"
    assert target.archive_path == "/src/vendor/popt-1.19.tar.gz"


def test_derivation_is_pure():
    assert _popt().paths() == _popt().paths()


@pytest.mark.parametrize("field, value", [
    ("package", "newt"),
    ("version", "1.18"),
    ("out_dir", "/tmp/y"),
    ("target", "aarch64-unknown-linux-gnu"),
])
def test_changing_an_input_changes_a_derived_value(field, value):
    base = _popt()
    changed = dataclasses.replace(base, **{field: value})
    assert changed.paths() != base.paths()


def test_autoconf_aux_paths_per_package():
    popt = build_target_for(RECIPES["popt"], "/o", "t", "/v")
    slang = build_target_for(RECIPES["slang"], "/o", "t", "/v")
    newt = build_target_for(RECIPES["newt"], "/o", "t", "/v")
    assert popt.autoconf_aux_path == "/o/build/popt-1.19/build-aux"
    assert slang.autoconf_aux_path == "/o/build/slang-2.3.3/autoconf"
    assert newt.autoconf_aux_path is None


def test_slang_archive_is_bzip2():
    slang = build_target_for(RECIPES["slang"], "/o", "t", "/v")
    assert slang.archive_path == "/v/slang-2.3.3.tar.bz2"


def test_riscv64gc_is_translated():
    assert translate_target("riscv64gc-unknown-linux-gnu") == "riscv64-unknown-linux-gnu"


@pytest.mark.parametrize("triple", [
    "x86_64-unknown-linux-gnu",
    "riscv64-unknown-linux-gnu",
    "riscv64gc-unknown-linux-musl",
    "",
    "not a triple",
])
def test_other_triples_pass_through(triple):
    assert translate_target(triple) == triple


def test_host_uses_translated_target():
    assert _popt(target="riscv64gc-unknown-linux-gnu").host == "riscv64-unknown-linux-gnu"


def test_find_archive_prefers_bzip2(tmp_path):
    (tmp_path / "slang-2.3.3.tar.gz").write_bytes(b"")
    (tmp_path / "slang-2.3.3.tar.bz2").write_bytes(b"")
    assert find_archive(str(tmp_path), "slang-2.3.3") == str(tmp_path / "slang-2.3.3.tar.bz2")


def test_find_archive_missing(tmp_path):
    assert find_archive(str(tmp_path), "popt-1.19") is None

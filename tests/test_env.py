"""Unit tests for the build-context environment brackets."""
from __future__ import annotations

import pytest

from newt_build._env import BuildEnv, CflagsSnapshot, append_search_path, clean_env
from newt_build.pkg_config import LibraryDescriptor


def _desc(name: str, inc: list[str], lib: list[str]) -> LibraryDescriptor:
    return LibraryDescriptor(name=name, include_paths=inc, link_paths=lib)


# -- search path ----------------------------------------------------------

def test_append_to_existing_value():
    assert append_search_path("/a/pkgconfig", "/b/pkgconfig") == "/a/pkgconfig:/b/pkgconfig"


def test_append_to_unset_value():
    assert append_search_path(None, "/b/pkgconfig") == "/b/pkgconfig"


def test_append_to_empty_value():
    assert append_search_path("", "/b/pkgconfig") == "/b/pkgconfig"


def test_pkg_config_path_grows_monotonically():
    env = BuildEnv({})
    env.append_pkg_config_path("/p1")
    env.append_pkg_config_path("/p2")
    assert env.get("PKG_CONFIG_PATH") == "/p1:/p2"


# -- dependency flags -----------------------------------------------------

def test_inject_formats_flags_in_order():
    env = BuildEnv({})
    env.inject_dependency_flags([
        _desc("popt", ["/i/popt"], ["/l/popt"]),
        _desc("slang", ["/i/slang"], ["/l/slang"]),
    ])
    assert env.get("CPPFLAGS") == "-I/i/popt -I/i/slang"
    assert env.get("LDFLAGS") == "-L/l/popt -L/l/slang"


def test_inject_without_paths_sets_nothing():
    env = BuildEnv({})
    env.inject_dependency_flags([_desc("empty", [], [])])
    assert "CPPFLAGS" not in env.environ
    assert "LDFLAGS" not in env.environ


def test_bracket_clears_after_success():
    env = BuildEnv({})
    with env.dependency_flags([_desc("popt", ["/i"], ["/l"])]):
        assert env.get("CPPFLAGS") == "-I/i"
    assert "CPPFLAGS" not in env.environ
    assert "LDFLAGS" not in env.environ


def test_bracket_clears_after_failure():
    env = BuildEnv({})
    with pytest.raises(RuntimeError):
        with env.dependency_flags([_desc("popt", ["/i"], ["/l"])]):
            raise RuntimeError("configure failed")
    assert "CPPFLAGS" not in env.environ
    assert "LDFLAGS" not in env.environ


def test_bracket_clears_values_set_inside_step():
    env = BuildEnv({})
    with env.dependency_flags():
        env.set("CPPFLAGS", "-DLEAK")
    assert "CPPFLAGS" not in env.environ


def test_clean_env_drops_step_scoped_flags():
    env = clean_env({"CPPFLAGS": "-I/host", "LDFLAGS": "-L/host", "PATH": "/bin"})
    assert "CPPFLAGS" not in env
    assert "LDFLAGS" not in env
    assert env["PATH"] == "/bin"
    assert env["LC_ALL"] == "C"


def test_from_host_does_not_alias_environ():
    host = {"CFLAGS": "-O2"}
    env = BuildEnv.from_host(host)
    env.set("CFLAGS", "-O0")
    assert host == {"CFLAGS": "-O2"}


# -- position-independent code --------------------------------------------

def test_force_pic_is_noop_when_present():
    env = BuildEnv({"CFLAGS": "-O2 -fPIC"})
    env.force_pic()
    assert env.get("CFLAGS") == "-O2 -fPIC"
    assert env.cflags_snapshot is None


def test_force_pic_appends_and_snapshots():
    env = BuildEnv({"CFLAGS": "-O2"})
    env.force_pic()
    assert env.get("CFLAGS") == "-O2 -fPIC"
    assert env.cflags_snapshot == CflagsSnapshot("-O2")


def test_restore_reproduces_prior_value():
    env = BuildEnv({"CFLAGS": "-O2 -g"})
    env.force_pic()
    env.restore_cflags()
    assert env.get("CFLAGS") == "-O2 -g"
    assert env.cflags_snapshot is None


def test_restore_reproduces_absence():
    env = BuildEnv({})
    env.force_pic()
    assert env.get("CFLAGS") == "-fPIC"
    env.restore_cflags()
    assert "CFLAGS" not in env.environ


def test_restore_without_snapshot_is_noop():
    env = BuildEnv({"CFLAGS": "-O3 -fPIC"})
    env.restore_cflags()
    assert env.get("CFLAGS") == "-O3 -fPIC"


def test_pic_bracket_restores_after_failure():
    env = BuildEnv({"CFLAGS": "-O2"})
    with pytest.raises(RuntimeError):
        with env.pic_forced():
            assert "-fPIC" in env.get("CFLAGS")
            raise RuntimeError("make failed")
    assert env.get("CFLAGS") == "-O2"
    assert env.cflags_snapshot is None

import pytest

from replout.replout_nodes import SourceFileNode
from replout.replout_output import source as facade_source
from replout.replout_source import find_module_source, source


@pytest.fixture
def search_root(tmp_path):
    pkg = tmp_path / "pkg"
    pkg.mkdir()
    (pkg / "__init__.py").write_text("", encoding="utf-8")
    (pkg / "mod.py").write_text("X = 1\n", encoding="utf-8")
    (tmp_path / "single.py").write_text("Y = 2\n", encoding="utf-8")
    return tmp_path


def test_resolves_module_in_search_paths(search_root):
    node = source("single", [str(search_root)])
    assert node == SourceFileNode(str(search_root / "single.py"), "single")


def test_resolves_submodule(search_root):
    assert find_module_source("pkg.mod", [str(search_root)]) == str(search_root / "pkg" / "mod.py")


def test_package_resolves_to_init(search_root):
    assert find_module_source("pkg", [str(search_root)]) == str(search_root / "pkg" / "__init__.py")


@pytest.mark.parametrize("name", ["missing", "pkg.missing", "", "pkg..mod"])
def test_unresolved_has_no_location(search_root, name):
    node = source(name, [str(search_root)])
    assert node.location is None
    assert node.name == name


def test_search_paths_default_to_sys_path():
    node = facade_source("json")
    assert node.location is not None
    assert node.location.endswith("__init__.py")


def test_resolver_failure_is_contained():
    def broken(module, paths):
        raise ImportError("nope")

    assert source("x", [], resolver=broken) == SourceFileNode(None, "x")

"""
Test the namespace behavior of the bounteous packages.
src/bounteous has no __init__.py, so bounteous.data must be importable as a
regular package living inside an implicit namespace package, and the MySQL
extension must be reachable beneath it.
"""

import sys
from pathlib import Path

# Add src to Python path to allow imports without installation
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


def test_bounteous_is_namespace_package():
    """bounteous carries no __init__.py and therefore no __file__"""
    import bounteous
    assert getattr(bounteous, '__file__', None) is None
    assert len(list(bounteous.__path__)) >= 1


def test_can_import_data_package():
    import bounteous.data
    assert bounteous.data.__file__.endswith('__init__.py')


def test_mysql_extension_is_in_same_namespace():
    import bounteous.data
    import bounteous.data.mysql

    assert hasattr(bounteous.data, 'mysql')
    assert bounteous.data.mysql.__name__ == 'bounteous.data.mysql'


def test_can_access_public_classes():
    from bounteous.data import DbContext, DbContextFactory, DbContextOptionsBuilder
    from bounteous.data.mysql import MySQLDbContextFactory, use_mysql

    for cls in (DbContext, DbContextFactory, DbContextOptionsBuilder, MySQLDbContextFactory):
        assert isinstance(cls, type)
    assert issubclass(MySQLDbContextFactory, DbContextFactory)
    assert callable(use_mysql)


def test_exports_match_all():
    import bounteous.data
    import bounteous.data.mysql

    for module in (bounteous.data, bounteous.data.mysql):
        for name in module.__all__:
            assert hasattr(module, name), f"{module.__name__} is missing {name}"


def test_version_attributes():
    """Both packages expose a non-empty version string"""
    import bounteous.data
    import bounteous.data.mysql

    for module in (bounteous.data, bounteous.data.mysql):
        assert isinstance(module.__version__, str)
        assert len(module.__version__) > 0


def test_library_modules_carry_path_header_and_docstring():
    """Each library module opens with its source path and documents itself"""
    import importlib

    src = Path(__file__).parent.parent / "src"
    for path in sorted((src / "bounteous").rglob("*.py")):
        relative = path.relative_to(src)
        assert path.read_text(encoding="utf-8").startswith(f"# src/{relative.as_posix()}\n"), relative
        if path.name == "__main__.py":
            continue
        module_name = ".".join(relative.with_suffix("").parts)
        if module_name.endswith(".__init__"):
            module_name = module_name[:-len(".__init__")]
        assert importlib.import_module(module_name).__doc__, module_name

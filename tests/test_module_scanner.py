"""Tests for the module scanner."""

import pytest

from pathsuite.core.descriptors import TypeDescriptor
from pathsuite.core.errors import ScanFailure
from pathsuite.core.module_scanner import ModuleBoundary, ModuleScanner


def scan_names(boundary):
    return [d.name for d in ModuleScanner(boundary).scan()]


class TestModuleScanner:
    """Tests for ModuleScanner class."""

    def test_scan_empty_root(self, tmp_path):
        """Test scanning a root without sources."""
        assert scan_names(ModuleBoundary([tmp_path])) == []

    def test_top_level_classes_only(self, source_tree):
        """Test that nested classes and functions are not listed."""
        source_tree.write("models.py", """
            class Outer:
                class Inner:
                    pass

            def factory():
                class Local:
                    pass
                return Local

            class Second:
                pass
        """)

        names = scan_names(ModuleBoundary([source_tree.root]))

        pkg = source_tree.package
        assert names == [f"{pkg}.models.Outer", f"{pkg}.models.Second"]

    def test_scan_does_not_import(self, source_tree):
        """Test that scanning never imports the scanned modules."""
        source_tree.write("explosive.py", """
            raise RuntimeError("imported")

            class Found:
                pass
        """)

        names = scan_names(ModuleBoundary([source_tree.root]))

        assert names == [f"{source_tree.package}.explosive.Found"]
        assert not source_tree.imported("explosive")

    def test_package_init_classes(self, source_tree):
        """Test that classes in __init__.py belong to the package."""
        source_tree.write("sub/__init__.py", "class InPackage:\n    pass\n")

        names = scan_names(ModuleBoundary([source_tree.root]))

        assert names == [f"{source_tree.package}.sub.InPackage"]

    def test_order_is_sorted_and_stable(self, source_tree):
        """Test that two scans of the same boundary agree."""
        source_tree.write_all({
            "zeta.py": "class Z:\n    pass\n",
            "alpha.py": "class A2:\n    pass\nclass A1:\n    pass\n",
            "mid/beta.py": "class B:\n    pass\n",
        })
        boundary = ModuleBoundary([source_tree.root])

        first = scan_names(boundary)
        second = scan_names(boundary)

        pkg = source_tree.package
        assert first == second
        assert first == [
            f"{pkg}.alpha.A2",
            f"{pkg}.alpha.A1",
            f"{pkg}.zeta.Z",
            f"{pkg}.mid.beta.B",
        ]

    def test_deduplicates_by_name(self, tmp_path):
        """Test that the first root wins when two roots define the same class."""
        for root_name in ("first", "second"):
            module = tmp_path / root_name / "dup_pkg" / "mod.py"
            module.parent.mkdir(parents=True)
            (module.parent / "__init__.py").write_text("")
            module.write_text("class Same:\n    pass\n")

        descriptors = list(ModuleScanner(ModuleBoundary([tmp_path / "first", tmp_path / "second"])).scan())

        assert [d.name for d in descriptors] == ["dup_pkg.mod.Same"]
        assert descriptors[0].source_path == tmp_path / "first" / "dup_pkg" / "mod.py"

    def test_nested_root_named_once(self, tmp_path):
        """Test that a src layout listed with its parent is not scanned twice."""
        module = tmp_path / "src" / "layout_pkg" / "mod.py"
        module.parent.mkdir(parents=True)
        (module.parent / "__init__.py").write_text("")
        module.write_text("class OnlyOnce:\n    pass\n")

        names = scan_names(ModuleBoundary([tmp_path, tmp_path / "src"]))

        assert names == ["layout_pkg.mod.OnlyOnce"]

    def test_same_root_twice(self, source_tree):
        source_tree.write("kept.py", "class Kept:\n    pass\n")

        names = scan_names(ModuleBoundary([source_tree.root, source_tree.root]))

        assert names == [f"{source_tree.package}.kept.Kept"]

    def test_excluded_directories_skipped(self, source_tree):
        """Test that cache and virtualenv directories are skipped."""
        source_tree.write_all({
            "__pycache__/cached.py": "class Cached:\n    pass\n",
            "build.egg-info/meta.py": "class Meta:\n    pass\n",
            "fixtures/data.py": "class Data:\n    pass\n",
            "kept.py": "class Kept:\n    pass\n",
        })

        boundary = ModuleBoundary([source_tree.root], exclude_dirs={"fixtures"})
        names = scan_names(boundary)

        assert names == [f"{source_tree.package}.kept.Kept"]

    def test_non_identifier_files_skipped(self, source_tree):
        """Test that files that cannot be imported by name are ignored."""
        source_tree.write_all({
            "not-a-module.py": "class Hidden:\n    pass\n",
            "notes.txt": "class Text:\n",
        })

        assert scan_names(ModuleBoundary([source_tree.root])) == []

    def test_scan_is_lazy(self, tmp_path):
        """Test that a missing root only fails once the scan is consumed."""
        scan = ModuleScanner(ModuleBoundary([tmp_path / "missing"])).scan()

        with pytest.raises(ScanFailure):
            next(scan)

    def test_unparseable_source_fails(self, source_tree):
        """Test that a syntax error aborts the scan with the cause chained."""
        source_tree.write("broken.py", "class Broken(:\n")

        with pytest.raises(ScanFailure) as excinfo:
            scan_names(ModuleBoundary([source_tree.root]))

        assert isinstance(excinfo.value.__cause__, SyntaxError)


class TestModuleBoundary:
    """Tests for ModuleBoundary class."""

    def test_from_package(self, source_tree):
        """Test restricting the boundary to one package."""
        source_tree.write_all({
            "inside/mod.py": "class Inside:\n    pass\n",
            "outside.py": "class Outside:\n    pass\n",
        })

        boundary = ModuleBoundary.from_package(f"{source_tree.package}.inside")

        assert boundary.roots == [source_tree.root]
        assert scan_names(boundary) == [f"{source_tree.package}.inside.mod.Inside"]

    def test_from_package_unknown(self):
        """Test that an unknown package is a scan failure."""
        with pytest.raises(ScanFailure):
            ModuleBoundary.from_package("no_such_package_for_pathsuite")

    def test_exclusion_patterns(self):
        """Test exact names and glob patterns."""
        boundary = ModuleBoundary([], exclude_dirs={"generated_*"})

        assert boundary.is_excluded("__pycache__")
        assert boundary.is_excluded("pathsuite.egg-info")
        assert boundary.is_excluded("generated_v2")
        assert not boundary.is_excluded("tests")


class TestTypeDescriptor:
    """Tests for TypeDescriptor class."""

    def test_names(self):
        """Test derived names."""
        descriptor = TypeDescriptor(module_name="app.tests.test_io", simple_name="ReaderTest")

        assert descriptor.name == "app.tests.test_io.ReaderTest"
        assert str(descriptor) == descriptor.name

    def test_load(self):
        """Test loading a class from its module."""
        descriptor = TypeDescriptor(module_name="pathsuite.core.module_scanner", simple_name="ModuleScanner")

        assert descriptor.load() is ModuleScanner

    def test_load_missing_attribute(self):
        """Test that a vanished class raises AttributeError."""
        descriptor = TypeDescriptor(module_name="pathsuite.core.module_scanner", simple_name="Gone")

        with pytest.raises(AttributeError):
            descriptor.load()

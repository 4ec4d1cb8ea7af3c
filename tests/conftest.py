"""Shared fixtures: throwaway source trees importable for one test."""

import sys
import textwrap
import uuid
from pathlib import Path
from typing import Dict

import pytest


class SourceTree:
    """A temporary source root holding one uniquely named package."""

    def __init__(self, root: Path, package: str):
        self.root = root
        self.package = package

    def write(self, relative: str, content: str = "") -> Path:
        """Write a file below the package; ``{pkg}`` expands to the package name."""
        path = self.root / self.package / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        for parent in path.relative_to(self.root).parents:
            if str(parent) != ".":
                init = self.root / parent / "__init__.py"
                if not init.exists():
                    init.write_text("")
        path.write_text(textwrap.dedent(content).replace("{pkg}", self.package))
        return path

    def write_all(self, files: Dict[str, str]):
        for relative, content in files.items():
            self.write(relative, content)

    def imported(self, module: str = "") -> bool:
        """Whether a module of the package has been imported."""
        name = f"{self.package}.{module}" if module else self.package
        return name in sys.modules


@pytest.fixture
def source_tree(tmp_path, monkeypatch):
    package = f"sample_{uuid.uuid4().hex[:8]}"
    monkeypatch.syspath_prepend(str(tmp_path))
    tree = SourceTree(tmp_path, package)
    yield tree
    for name in list(sys.modules):
        if name == package or name.startswith(package + "."):
            del sys.modules[name]


SCENARIO_MODULE = '''
import abc
import unittest

from pathsuite import test


class Marker:
    pass


class A(unittest.TestCase):
    def test_one(self):
        pass


class B(Marker):
    @test
    def checks_something(self):
        pass


class C(abc.ABC):
    @abc.abstractmethod
    def helper(self):
        pass

    @test
    def checks(self):
        pass


class D:
    def helper(self):
        pass
'''


@pytest.fixture
def scenario_tree(source_tree):
    """Module with a legacy test (A), a marked test (B), an abstract class (C)
    and a plain class (D)."""
    source_tree.write("scenario.py", SCENARIO_MODULE)
    return source_tree

"""Module Scanner - Enumerates top-level classes visible on a set of source roots."""

import ast
import fnmatch
import importlib.util
import logging
import os
import sys
import sysconfig
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Set

from .descriptors import TypeDescriptor
from .errors import ScanFailure

logger = logging.getLogger(__name__)


class ModuleBoundary:
    """The source roots a scan is allowed to see.

    Each root is a directory laid out like a ``sys.path`` entry: a file
    ``<root>/pkg/mod.py`` defines module ``pkg.mod``.
    """

    # Directories never descended into
    EXCLUDE_DIRS: Set[str] = {
        ".git",
        ".svn",
        ".hg",
        "node_modules",
        "venv",
        ".venv",
        "__pycache__",
        ".pytest_cache",
        ".mypy_cache",
        ".tox",
        ".nox",
        ".eggs",
        "*.egg-info",
        "site-packages",
        "dist-packages",
        ".idea",
        ".vscode",
    }

    def __init__(
        self,
        roots: Iterable[str | Path],
        exclude_dirs: Optional[Set[str]] = None,
        package: Optional[str] = None,
    ):
        """Initialize the boundary.

        Args:
            roots: Source root directories
            exclude_dirs: Additional directory names or patterns to skip
            package: Restrict the scan to this dotted package
        """
        self.roots: List[Path] = [Path(r) for r in roots]
        self.exclude_dirs = self.EXCLUDE_DIRS.copy()
        if exclude_dirs:
            self.exclude_dirs.update(exclude_dirs)
        self.package = package

    @classmethod
    def from_sys_path(cls, exclude_dirs: Optional[Set[str]] = None) -> "ModuleBoundary":
        """Boundary covering the project directories of ``sys.path``.

        The standard library and installed packages are left out.
        """
        installed = {Path(p).resolve() for p in sysconfig.get_paths().values()}
        roots: List[Path] = []
        for entry in sys.path:
            root = Path(entry or os.getcwd()).resolve()
            if not root.is_dir() or root in roots:
                continue
            if any(root == p or p in root.parents for p in installed):
                continue
            roots.append(root)
        return cls(roots, exclude_dirs=exclude_dirs)

    @classmethod
    def from_package(cls, package: str, exclude_dirs: Optional[Set[str]] = None) -> "ModuleBoundary":
        """Boundary restricted to one importable package.

        Raises:
            ScanFailure: If the package cannot be located
        """
        try:
            spec = importlib.util.find_spec(package)
        except (ImportError, ValueError) as e:
            raise ScanFailure(f"Cannot locate package {package}: {e}") from e
        if spec is None or not spec.submodule_search_locations:
            raise ScanFailure(f"Not a package: {package}")

        depth = package.count(".") + 1
        roots = []
        for location in spec.submodule_search_locations:
            root = Path(location)
            for _ in range(depth):
                root = root.parent
            if root not in roots:
                roots.append(root)
        return cls(roots, exclude_dirs=exclude_dirs, package=package)

    def is_excluded(self, dirname: str) -> bool:
        """Check whether a directory name is excluded."""
        if dirname in self.exclude_dirs:
            return True
        return any(fnmatch.fnmatch(dirname, pattern) for pattern in self.exclude_dirs)

    def __repr__(self) -> str:
        roots = ", ".join(str(r) for r in self.roots)
        suffix = f", package={self.package!r}" if self.package else ""
        return f"ModuleBoundary([{roots}]{suffix})"


class ModuleScanner:
    """Lists every top-level class statement on a boundary without importing."""

    def __init__(self, boundary: ModuleBoundary):
        self.boundary = boundary

    def scan(self) -> Iterator[TypeDescriptor]:
        """Yield one descriptor per top-level class, deduplicated by name.

        The walk is sorted, so the order is stable between invocations.
        A root nested inside another is only walked as itself, so each
        file is named once.
        The returned generator can be consumed only once.

        Raises:
            ScanFailure: If a root is missing or a source file cannot be read
        """
        seen: Set[str] = set()
        seen_files: Set[Path] = set()
        roots = {r.resolve() for r in self.boundary.roots}
        for root in self.boundary.roots:
            if not root.is_dir():
                raise ScanFailure(f"Source root is not a directory: {root}")
            nested = roots - {root.resolve()}
            for module_name, path in self._walk_modules(root, nested):
                resolved = path.resolve()
                if resolved in seen_files:
                    continue
                seen_files.add(resolved)
                for descriptor in self._scan_module(module_name, path):
                    if descriptor.name in seen:
                        continue
                    seen.add(descriptor.name)
                    yield descriptor

    def _walk_modules(self, root: Path, nested: Set[Path]) -> Iterator[tuple[str, Path]]:
        """Walk a root, yielding (module name, file path) pairs.

        Directories listed in ``nested`` are other roots and are skipped.
        """
        package = self.boundary.package
        start = root.joinpath(*package.split(".")) if package else root

        def on_error(error: OSError):
            raise ScanFailure(f"Cannot enumerate {error.filename}: {error}") from error

        for dirpath, dirnames, filenames in os.walk(start, onerror=on_error):
            dirnames[:] = sorted(
                d for d in dirnames
                if d.isidentifier()
                and not self.boundary.is_excluded(d)
                and Path(dirpath, d).resolve() not in nested
            )
            relative = Path(dirpath).relative_to(root)
            parts = [p for p in relative.parts if p]

            for filename in sorted(filenames):
                if not filename.endswith(".py"):
                    continue
                stem = filename[:-3]
                if stem == "__init__":
                    if not parts:
                        continue
                    yield ".".join(parts), Path(dirpath) / filename
                elif stem.isidentifier():
                    yield ".".join(parts + [stem]), Path(dirpath) / filename

    def _scan_module(self, module_name: str, path: Path) -> List[TypeDescriptor]:
        """Parse one source file and list its top-level classes."""
        try:
            source = path.read_bytes()
            tree = ast.parse(source, filename=str(path))
        except OSError as e:
            raise ScanFailure(f"Cannot read {path}: {e}") from e
        except (SyntaxError, ValueError) as e:
            raise ScanFailure(f"Cannot parse {path}: {e}") from e

        classes = [
            TypeDescriptor(module_name=module_name, simple_name=node.name, source_path=path)
            for node in tree.body
            if isinstance(node, ast.ClassDef)
        ]
        if classes:
            logger.debug("Found %d class(es) in %s", len(classes), module_name)
        return classes

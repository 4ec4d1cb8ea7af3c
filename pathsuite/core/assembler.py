"""Suite Assembler - Hands the selected classes to a runner builder."""

import logging
import unittest
from abc import ABC, abstractmethod
from typing import Iterable, Optional, Sequence, Tuple

from .descriptors import RootDescriptor
from .detector import public_test_methods

logger = logging.getLogger(__name__)


class ClassPathSuite(unittest.TestSuite):
    """Composite suite holding one child suite per selected class."""

    def __init__(
        self,
        root: RootDescriptor,
        classes: Tuple[type, ...],
        children: Iterable[unittest.TestSuite] = (),
    ):
        super().__init__(children)
        self.root = root
        self.classes = classes

    def __repr__(self) -> str:
        return f"<ClassPathSuite {self.root.name} classes={len(self.classes)} tests={self.countTestCases()}>"


class MarkedMethodCase(unittest.TestCase):
    """Runs one marked method of a plain (non-TestCase) class.

    A fresh instance is created for every method. ``setUp`` and
    ``tearDown`` methods on the test class are honoured when present.
    """

    __test__ = False

    def __init__(self, test_class: type, method_name: str):
        super().__init__("runTest")
        self.test_class = test_class
        self.method_name = method_name
        self.instance = None

    def setUp(self):
        self.instance = self.test_class()
        hook = getattr(self.instance, "setUp", None)
        if callable(hook):
            hook()

    def tearDown(self):
        hook = getattr(self.instance, "tearDown", None)
        if callable(hook):
            hook()
        self.instance = None

    def runTest(self):
        getattr(self.instance, self.method_name)()

    def id(self) -> str:
        return f"{self.test_class.__module__}.{self.test_class.__qualname__}.{self.method_name}"

    def shortDescription(self) -> Optional[str]:
        doc = getattr(getattr(self.test_class, self.method_name, None), "__doc__", None)
        return doc.strip().splitlines()[0] if doc and doc.strip() else None

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self.test_class is other.test_class and self.method_name == other.method_name

    def __hash__(self):
        return hash((type(self), self.test_class, self.method_name))

    def __str__(self) -> str:
        return f"{self.method_name} ({self.test_class.__module__}.{self.test_class.__qualname__})"

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id()}>"


class RunnerBuilder(ABC):
    """Builds the composite suite from the selected classes."""

    @abstractmethod
    def suite_for_class(self, cls: type) -> unittest.TestSuite:
        """Build the child suite of one class."""
        pass

    def build(self, root: RootDescriptor, classes: Tuple[type, ...]) -> ClassPathSuite:
        """Build the composite suite, one child per class, in order."""
        return ClassPathSuite(root, classes, [self.suite_for_class(c) for c in classes])


class UnittestRunnerBuilder(RunnerBuilder):
    """Default builder targeting the standard unittest runner."""

    def __init__(self, loader: Optional[unittest.TestLoader] = None):
        self.loader = loader or unittest.TestLoader()

    def suite_for_class(self, cls: type) -> unittest.TestSuite:
        if issubclass(cls, unittest.TestCase):
            return self.loader.loadTestsFromTestCase(cls)
        return unittest.TestSuite(MarkedMethodCase(cls, name) for name in public_test_methods(cls))


class SuiteAssembler:
    """Final pipeline stage; performs no execution."""

    def __init__(self, builder: Optional[RunnerBuilder] = None):
        self.builder = builder or UnittestRunnerBuilder()

    def assemble(self, root: RootDescriptor, classes: Sequence[type]) -> ClassPathSuite:
        """Freeze the selected classes and delegate to the runner builder."""
        selected = tuple(classes)
        logger.debug("Assembling %d class(es) for %s", len(selected), root.name)
        return self.builder.build(root, selected)

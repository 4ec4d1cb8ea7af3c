"""Test Detector - Decides whether a loaded class is a runnable test unit.

Detection runs an ordered list of strategies. Each strategy answers True
(a test), False (not a test) or None (no opinion); the first decisive
answer wins and a class nobody claims is not a test.
"""

import inspect
import logging
import unittest
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence

from .errors import TypeResolutionAnomaly
from .markers import is_test_method

logger = logging.getLogger(__name__)

# Errors raised when a member refers to something that cannot be resolved.
LINKAGE_ERRORS = (ImportError, NameError)


class LinkageError(Exception):
    """Internal signal: a class's members could not be resolved."""

    def __init__(self, cause: BaseException):
        super().__init__(str(cause))
        self.cause = cause


class DetectionStrategy(ABC):
    """One way of recognizing (or rejecting) a test class."""

    name: str = "strategy"

    @abstractmethod
    def classify(self, cls: Any) -> Optional[bool]:
        """Return True, False, or None when undecided."""
        pass


class ConcreteClassStrategy(DetectionStrategy):
    """Rejects anything that cannot be instantiated to run."""

    name = "concrete"

    def classify(self, cls: Any) -> Optional[bool]:
        if cls is None or not inspect.isclass(cls):
            return False
        if inspect.isabstract(cls):
            return False
        return None


class OptOutStrategy(DetectionStrategy):
    """Rejects classes that set ``__test__ = False`` in their own body.

    Only the class's own namespace is consulted, so helpers such as
    adapter TestCase subclasses opt out without hiding their subclasses.
    """

    name = "opt-out"

    def classify(self, cls: Any) -> Optional[bool]:
        if vars(cls).get("__test__", True) is False:
            return False
        return None


class LegacyTestCaseStrategy(DetectionStrategy):
    """Accepts subclasses of the legacy marker base (unittest.TestCase)."""

    name = "legacy"

    def __init__(self, base: type = unittest.TestCase):
        self.base = base

    def classify(self, cls: Any) -> Optional[bool]:
        if issubclass(cls, self.base):
            return True
        return None


class MarkedMethodStrategy(DetectionStrategy):
    """Accepts classes with at least one public, marked method.

    Inherited methods count. Methods whose names start with an underscore
    are not inspected.
    """

    name = "marked-method"

    def classify(self, cls: Any) -> Optional[bool]:
        # Every public member is resolved before deciding.
        if public_test_methods(cls):
            return True
        return None


def resolve_member(cls: type, name: str) -> Any:
    """Look up a class member without running ordinary descriptor code.

    Functions, static methods and class methods are unwrapped statically.
    Only custom descriptors are resolved, since they may produce the
    method on access.

    Raises:
        LinkageError: If resolving the member hits an unresolvable reference
    """
    member = inspect.getattr_static(cls, name, None)
    if isinstance(member, (staticmethod, classmethod)):
        return member.__func__
    if inspect.isfunction(member) or not hasattr(type(member), "__get__"):
        return member
    try:
        return getattr(cls, name)
    except AttributeError:
        return None
    except LINKAGE_ERRORS as e:
        raise LinkageError(e) from e


def public_test_methods(cls: type) -> List[str]:
    """Names of the public marked methods of a class, in definition order.

    Methods are listed base classes first, following the reversed MRO. An
    override without the marker hides the inherited marked method.

    Raises:
        LinkageError: If a public member cannot be resolved
    """
    names: List[str] = []
    for klass in reversed(cls.__mro__):
        for attr in vars(klass):
            if not attr.startswith("_") and attr not in names:
                names.append(attr)
    return [n for n in names if is_test_method(resolve_member(cls, n))]


class TestDetector:
    """Pure classifier over loaded classes.

    Anomalies met while inspecting members are collected in ``anomalies``
    so callers can report them; they never propagate.
    """

    __test__ = False

    DEFAULT_STRATEGIES: Sequence[DetectionStrategy] = (
        ConcreteClassStrategy(),
        OptOutStrategy(),
        LegacyTestCaseStrategy(),
        MarkedMethodStrategy(),
    )

    def __init__(self, strategies: Optional[Sequence[DetectionStrategy]] = None):
        self.strategies = list(strategies) if strategies is not None else list(self.DEFAULT_STRATEGIES)
        self.anomalies: List[TypeResolutionAnomaly] = []

    def is_test(self, cls: Any) -> bool:
        """Classify one class."""
        for strategy in self.strategies:
            try:
                verdict = strategy.classify(cls)
            except LinkageError as e:
                name = getattr(cls, "__qualname__", repr(cls))
                module = getattr(cls, "__module__", None)
                if module:
                    name = f"{module}.{name}"
                anomaly = TypeResolutionAnomaly(name=name, error=e.cause)
                self.anomalies.append(anomaly)
                logger.debug("Excluding %s: cannot inspect members (%s)", name, e.cause)
                return False
            if verdict is not None:
                return verdict
        return False

    __call__ = is_test

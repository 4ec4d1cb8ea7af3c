"""Suite Construction - Runs the discovery pipeline once and builds the suite.

Stages run in a fixed order:

    scan -> filter by name -> load -> detect tests -> filter by type -> assemble

Every fatal failure is wrapped in a single InitializationError; a class
whose members cannot be inspected is only excluded.
"""

import logging
import unittest
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .assembler import ClassPathSuite, RunnerBuilder, SuiteAssembler, UnittestRunnerBuilder
from .descriptors import RootDescriptor
from .detector import TestDetector
from .errors import InitializationError, PredicateInstantiationFailure, TypeResolutionAnomaly
from .filters import filter_by_name, filter_by_type, instantiate_predicate, load_types
from .module_scanner import ModuleBoundary, ModuleScanner

logger = logging.getLogger(__name__)


class ConstructionState(Enum):
    """States of one construction attempt."""
    PENDING = "pending"
    SCANNING = "scanning"
    NAME_FILTERING = "name_filtering"
    LOADING = "loading"
    DETECTING = "detecting"
    TYPE_FILTERING = "type_filtering"
    ASSEMBLING = "assembling"
    READY = "ready"
    FAILED = "failed"


@dataclass
class ConstructionReport:
    """What happened during one construction attempt."""
    root_name: str
    state: ConstructionState = ConstructionState.PENDING
    scanned: int = 0
    name_matched: int = 0
    loaded: int = 0
    detected: int = 0
    selected: List[str] = field(default_factory=list)
    anomalies: List[TypeResolutionAnomaly] = field(default_factory=list)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    duration_ms: int = 0
    failed_stage: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def success(self) -> bool:
        """Whether the construction reached READY."""
        return self.state == ConstructionState.READY

    def to_dict(self) -> Dict[str, Any]:
        """Convert report to dictionary."""
        return {
            "root": self.root_name,
            "state": self.state.value,
            "counts": {
                "scanned": self.scanned,
                "name_matched": self.name_matched,
                "loaded": self.loaded,
                "detected": self.detected,
                "selected": len(self.selected),
            },
            "selected": list(self.selected),
            "anomalies": [a.to_dict() for a in self.anomalies],
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_ms": self.duration_ms,
            "failed_stage": self.failed_stage,
            "error_message": self.error_message,
        }


class SuiteConstruction:
    """A single, non-retryable attempt at building a class path suite."""

    def __init__(
        self,
        root: RootDescriptor,
        boundary: Optional[ModuleBoundary] = None,
        builder: Optional[RunnerBuilder] = None,
        detector: Optional[TestDetector] = None,
    ):
        """Initialize the construction.

        Args:
            root: Root descriptor carrying the predicate slots
            boundary: Source roots to scan (default: project directories on sys.path)
            builder: Runner builder for the final suite
            detector: Test detector (default: TestCase or marked methods)
        """
        self.root = root
        self.boundary = boundary or ModuleBoundary.from_sys_path()
        self.assembler = SuiteAssembler(builder)
        self.detector = detector or TestDetector()
        self.report = ConstructionReport(root_name=root.name)
        self.suite: Optional[ClassPathSuite] = None

    @property
    def state(self) -> ConstructionState:
        return self.report.state

    def _enter(self, state: ConstructionState):
        logger.debug("%s: %s", self.root.name, state.value)
        self.report.state = state

    def run(self) -> ClassPathSuite:
        """Run the pipeline.

        Returns:
            The assembled suite

        Raises:
            InitializationError: On any fatal failure, wrapping its cause
        """
        if self.report.state != ConstructionState.PENDING:
            raise RuntimeError(f"Construction already {self.report.state.value}")

        self.report.started_at = datetime.now()
        try:
            self.suite = self._run_stages()
        except Exception as e:
            self._fail(e)
            raise InitializationError([e], stage=self.report.failed_stage) from e
        finally:
            completed_at = datetime.now()
            self.report.completed_at = completed_at
            self.report.duration_ms = int(
                (completed_at - self.report.started_at).total_seconds() * 1000
            )

        self._enter(ConstructionState.READY)
        logger.info(
            "%s: selected %d test class(es) out of %d scanned",
            self.root.name, len(self.report.selected), self.report.scanned,
        )
        return self.suite

    def _run_stages(self) -> ClassPathSuite:
        report = self.report

        # Both slots are read once, before anything is scanned or loaded.
        name_predicate = self._instantiate(ConstructionState.NAME_FILTERING, self.root.name_predicate)
        type_predicate = self._instantiate(ConstructionState.TYPE_FILTERING, self.root.type_predicate)

        self._enter(ConstructionState.SCANNING)
        descriptors = tuple(ModuleScanner(self.boundary).scan())
        report.scanned = len(descriptors)

        self._enter(ConstructionState.NAME_FILTERING)
        descriptors = tuple(filter_by_name(descriptors, name_predicate))
        report.name_matched = len(descriptors)

        self._enter(ConstructionState.LOADING)
        classes = tuple(load_types(descriptors))
        report.loaded = len(classes)

        self._enter(ConstructionState.DETECTING)
        tests = tuple(c for c in classes if self.detector.is_test(c))
        report.detected = len(tests)
        report.anomalies = list(self.detector.anomalies)

        self._enter(ConstructionState.TYPE_FILTERING)
        selected: Tuple[type, ...] = tuple(filter_by_type(tests, type_predicate))
        report.selected = [f"{c.__module__}.{c.__qualname__}" for c in selected]

        self._enter(ConstructionState.ASSEMBLING)
        return self.assembler.assemble(self.root, selected)

    def _instantiate(self, stage: ConstructionState, reference: Any):
        try:
            return instantiate_predicate(reference)
        except PredicateInstantiationFailure:
            self.report.state = stage
            raise

    def _fail(self, error: Exception):
        self.report.failed_stage = self.report.state.value
        self.report.error_message = str(error)
        logger.error("%s: construction failed during %s: %s",
                     self.root.name, self.report.failed_stage, error)
        self.report.state = ConstructionState.FAILED


def build_suite(
    root: RootDescriptor | type,
    boundary: Optional[ModuleBoundary] = None,
    builder: Optional[RunnerBuilder] = None,
    detector: Optional[TestDetector] = None,
) -> ClassPathSuite:
    """Build a suite of every test class visible on the boundary.

    Args:
        root: Root descriptor, or a root class decorated with
            ``class_name_predicate`` / ``class_predicate``
        boundary: Source roots to scan (default: project directories on sys.path)
        builder: Runner builder (default: UnittestRunnerBuilder)
        detector: Test detector

    Raises:
        InitializationError: If construction fails
    """
    if not isinstance(root, RootDescriptor):
        root = RootDescriptor.from_class(root)
    return SuiteConstruction(root, boundary, builder, detector).run()


def make_load_tests(root: RootDescriptor | type, boundary: Optional[ModuleBoundary] = None):
    """Create a ``load_tests`` hook exposing a class path suite to unittest.

    Example:
        # tests/test_all.py
        load_tests = make_load_tests(RootDescriptor(name_predicate=NamePrefixPredicate("myapp")))
    """
    def load_tests(loader: unittest.TestLoader, tests: unittest.TestSuite, pattern: Optional[str]):
        return build_suite(root, boundary=boundary, builder=UnittestRunnerBuilder(loader))
    return load_tests


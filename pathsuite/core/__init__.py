"""Core modules for pathsuite."""

from .assembler import ClassPathSuite, MarkedMethodCase, RunnerBuilder, SuiteAssembler, UnittestRunnerBuilder
from .descriptors import RootDescriptor, TypeDescriptor, class_name_predicate, class_predicate
from .detector import DetectionStrategy, TestDetector
from .errors import (
    InitializationError,
    PredicateInstantiationFailure,
    ScanFailure,
    SuiteError,
    TypeLoadFailure,
    TypeResolutionAnomaly,
)
from .filters import (
    NamePatternPredicate,
    NamePredicate,
    NamePrefixPredicate,
    SubclassPredicate,
    TypePredicate,
    all_of,
)
from .markers import test
from .module_scanner import ModuleBoundary, ModuleScanner
from .suite import ConstructionReport, ConstructionState, SuiteConstruction, build_suite, make_load_tests

__all__ = [
    "ClassPathSuite",
    "MarkedMethodCase",
    "RunnerBuilder",
    "SuiteAssembler",
    "UnittestRunnerBuilder",
    "RootDescriptor",
    "TypeDescriptor",
    "class_name_predicate",
    "class_predicate",
    "DetectionStrategy",
    "TestDetector",
    "InitializationError",
    "PredicateInstantiationFailure",
    "ScanFailure",
    "SuiteError",
    "TypeLoadFailure",
    "TypeResolutionAnomaly",
    "NamePatternPredicate",
    "NamePredicate",
    "NamePrefixPredicate",
    "SubclassPredicate",
    "TypePredicate",
    "all_of",
    "test",
    "ModuleBoundary",
    "ModuleScanner",
    "ConstructionReport",
    "ConstructionState",
    "SuiteConstruction",
    "build_suite",
    "make_load_tests",
]

"""pathsuite - Build unittest suites from every test class on a set of source roots."""

from .core import (
    ClassPathSuite,
    InitializationError,
    ModuleBoundary,
    NamePatternPredicate,
    NamePredicate,
    NamePrefixPredicate,
    RootDescriptor,
    SubclassPredicate,
    TypePredicate,
    build_suite,
    class_name_predicate,
    class_predicate,
    make_load_tests,
    test,
)

__version__ = "1.0.0"

__all__ = [
    "ClassPathSuite",
    "InitializationError",
    "ModuleBoundary",
    "NamePatternPredicate",
    "NamePredicate",
    "NamePrefixPredicate",
    "RootDescriptor",
    "SubclassPredicate",
    "TypePredicate",
    "build_suite",
    "class_name_predicate",
    "class_predicate",
    "make_load_tests",
    "test",
]

"""Descriptor Module - Values flowing through the discovery pipeline."""

import importlib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

# Attribute names written on a root class by the configuration decorators.
NAME_PREDICATE_ATTR = "__pathsuite_name_predicate__"
TYPE_PREDICATE_ATTR = "__pathsuite_type_predicate__"


@dataclass(frozen=True)
class TypeDescriptor:
    """A top-level class found by the scanner, not yet imported."""
    module_name: str
    simple_name: str
    source_path: Optional[Path] = None

    @property
    def name(self) -> str:
        """Fully-qualified class name."""
        return f"{self.module_name}.{self.simple_name}"

    def load(self) -> Any:
        """Import the defining module and return the class object.

        Raises:
            ImportError: If the module cannot be imported
            AttributeError: If the module no longer defines the class
        """
        module = importlib.import_module(self.module_name)
        return getattr(module, self.simple_name)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class RootDescriptor:
    """Entry point of one suite construction.

    Both slots are optional predicate references; see
    :func:`pathsuite.core.filters.instantiate_predicate` for accepted forms.
    """
    name: str = "pathsuite"
    name_predicate: Any = None
    type_predicate: Any = None

    @classmethod
    def from_class(cls, root: type) -> "RootDescriptor":
        """Read the predicate slots declared on a decorated root class."""
        return cls(
            name=f"{root.__module__}.{root.__qualname__}",
            name_predicate=root.__dict__.get(NAME_PREDICATE_ATTR),
            type_predicate=root.__dict__.get(TYPE_PREDICATE_ATTR),
        )


def class_name_predicate(predicate: Any):
    """Declare the name predicate of a root class.

    Example:
        @class_name_predicate(NamePrefixPredicate("myapp.tests"))
        class AllTests:
            pass
    """
    def decorator(root: type) -> type:
        setattr(root, NAME_PREDICATE_ATTR, predicate)
        return root
    return decorator


def class_predicate(predicate: Any):
    """Declare the type predicate of a root class."""
    def decorator(root: type) -> type:
        setattr(root, TYPE_PREDICATE_ATTR, predicate)
        return root
    return decorator

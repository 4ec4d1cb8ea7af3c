"""Filter Module - Name and type predicate stages plus the type loader."""

import fnmatch
import importlib
import inspect
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Iterator, Optional

from .descriptors import TypeDescriptor
from .errors import PredicateInstantiationFailure, TypeLoadFailure

logger = logging.getLogger(__name__)

Predicate = Callable[[Any], bool]


class NamePredicate(ABC):
    """Predicate over a fully-qualified class name, applied before import."""

    @abstractmethod
    def apply(self, name: str) -> bool:
        """Return True to keep the class."""
        pass

    def __call__(self, name: str) -> bool:
        return self.apply(name)


class TypePredicate(ABC):
    """Predicate over a loaded test class."""

    @abstractmethod
    def apply(self, cls: type) -> bool:
        """Return True to keep the class."""
        pass

    def __call__(self, cls: type) -> bool:
        return self.apply(cls)


class NamePrefixPredicate(NamePredicate):
    """Keep classes whose package starts with one of the given prefixes."""

    def __init__(self, *prefixes: str):
        self.prefixes = tuple(prefixes)

    def apply(self, name: str) -> bool:
        package = name.rpartition(".")[0]
        return any(
            package == prefix or package.startswith(prefix.rstrip(".") + ".")
            for prefix in self.prefixes
        )

    def __repr__(self) -> str:
        return f"NamePrefixPredicate{self.prefixes!r}"


class NamePatternPredicate(NamePredicate):
    """Keep classes whose fully-qualified name matches a glob pattern."""

    def __init__(self, *patterns: str):
        self.patterns = tuple(patterns)

    def apply(self, name: str) -> bool:
        return any(fnmatch.fnmatchcase(name, pattern) for pattern in self.patterns)

    def __repr__(self) -> str:
        return f"NamePatternPredicate{self.patterns!r}"


class SubclassPredicate(TypePredicate):
    """Keep classes that subclass one of the given bases."""

    def __init__(self, *bases: type):
        self.bases = tuple(bases)

    def apply(self, cls: type) -> bool:
        return isinstance(cls, type) and issubclass(cls, self.bases)

    def __repr__(self) -> str:
        names = ", ".join(b.__name__ for b in self.bases)
        return f"SubclassPredicate({names})"


def all_of(*predicates: Predicate) -> Predicate:
    """Compose predicates; a value is kept only if every predicate keeps it."""
    def combined(value: Any) -> bool:
        return all(p(value) for p in predicates)
    return combined


def resolve_reference(reference: str) -> Any:
    """Import an object named ``package.module:Name`` or ``package.module.Name``.

    Raises:
        PredicateInstantiationFailure: If the reference cannot be imported
    """
    if ":" in reference:
        module_name, _, attr_path = reference.partition(":")
    else:
        module_name, _, attr_path = reference.rpartition(".")
    if not module_name or not attr_path:
        raise PredicateInstantiationFailure(reference, "expected 'module:Name' or 'module.Name'")

    try:
        target = importlib.import_module(module_name)
        for attr in attr_path.split("."):
            target = getattr(target, attr)
    except (ImportError, AttributeError) as e:
        raise PredicateInstantiationFailure(reference, str(e)) from e
    return target


def instantiate_predicate(reference: Any) -> Optional[Predicate]:
    """Turn a configured predicate reference into a callable predicate.

    Accepted references:
        - None: no predicate, the stage passes everything through
        - a class constructible with no arguments
        - a string import reference naming such a class (or a callable)
        - a callable or an object with an ``apply`` method, used as-is

    Raises:
        PredicateInstantiationFailure: If the predicate cannot be built
    """
    if reference is None:
        return None

    target = resolve_reference(reference) if isinstance(reference, str) else reference

    if inspect.isclass(target):
        if inspect.isabstract(target):
            raise PredicateInstantiationFailure(reference, "predicate class is abstract")
        try:
            signature = inspect.signature(target)
        except (TypeError, ValueError):
            signature = None
        if signature is not None:
            required = [
                p for p in signature.parameters.values()
                if p.default is p.empty and p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD, p.KEYWORD_ONLY)
            ]
            if required:
                names = ", ".join(p.name for p in required)
                raise PredicateInstantiationFailure(
                    reference, f"no zero-argument constructor (requires {names})"
                )
        try:
            target = target()
        except Exception as e:
            raise PredicateInstantiationFailure(reference, f"{type(e).__name__}: {e}") from e

    if callable(target):
        return target
    apply = getattr(target, "apply", None)
    if callable(apply):
        return apply
    raise PredicateInstantiationFailure(reference, "predicate is not callable")


def filter_by_name(
    descriptors: Iterable[TypeDescriptor],
    predicate: Optional[Predicate],
) -> Iterable[TypeDescriptor]:
    """Name filter stage.

    A missing predicate passes the sequence through unchanged. Otherwise
    only descriptors whose fully-qualified name is accepted are kept, in
    the incoming order.
    """
    if predicate is None:
        return descriptors
    logger.debug("Filtering class names with %r", predicate)
    return (d for d in descriptors if d is not None and predicate(d.name))


def filter_by_type(classes: Iterable[type], predicate: Optional[Predicate]) -> Iterable[type]:
    """Type filter stage, same contract as :func:`filter_by_name`."""
    if predicate is None:
        return classes
    logger.debug("Filtering test classes with %r", predicate)
    return (c for c in classes if predicate(c))


def load_types(descriptors: Iterable[Optional[TypeDescriptor]]) -> Iterator[Any]:
    """Type loader stage: import each descriptor in turn.

    Raises:
        TypeLoadFailure: If a descriptor cannot be loaded
    """
    for descriptor in descriptors:
        if descriptor is None:
            yield None
            continue
        try:
            loaded = descriptor.load()
        except Exception as e:
            raise TypeLoadFailure(descriptor.name, f"{type(e).__name__}: {e}") from e
        logger.debug("Loaded %s", descriptor.name)
        yield loaded

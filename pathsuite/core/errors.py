"""Errors Module - Failures raised while building a class path suite."""

from dataclasses import dataclass
from typing import List, Optional, Sequence


class SuiteError(Exception):
    """Base exception for suite construction errors."""
    pass


class ScanFailure(SuiteError):
    """Raised when the module boundary cannot be enumerated."""
    pass


class PredicateInstantiationFailure(SuiteError):
    """Raised when a configured filter predicate cannot be built."""

    def __init__(self, reference: object, reason: str):
        self.reference = reference
        self.reason = reason
        super().__init__(f"Cannot instantiate predicate {reference!r}: {reason}")


class TypeLoadFailure(SuiteError):
    """Raised when a discovered class cannot be imported."""

    def __init__(self, name: str, reason: str):
        self.name = name
        super().__init__(f"Failed to load {name}: {reason}")


class InitializationError(SuiteError):
    """Single aggregated failure for one suite construction attempt."""

    def __init__(self, causes: Sequence[BaseException], stage: Optional[str] = None):
        self.causes: List[BaseException] = list(causes)
        self.stage = stage
        details = "; ".join(f"{type(c).__name__}: {c}" for c in self.causes)
        where = f" during {stage}" if stage else ""
        super().__init__(f"Suite construction failed{where}: {details}")


@dataclass(frozen=True)
class TypeResolutionAnomaly:
    """A class whose members could not be inspected during detection.

    Never raised; the detector records it and classifies the class as
    not a test.
    """
    name: str
    error: BaseException

    def to_dict(self) -> dict:
        """Convert anomaly to dictionary."""
        return {
            "name": self.name,
            "error_type": type(self.error).__name__,
            "error": str(self.error),
        }

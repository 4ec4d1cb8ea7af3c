"""Configuration Module - Suite settings from YAML files and environment variables."""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from .core.descriptors import RootDescriptor
from .core.errors import SuiteError
from .core.filters import NamePrefixPredicate
from .core.module_scanner import ModuleBoundary

DEFAULT_CONFIG_FILES = ("pathsuite.yaml", "pathsuite.yml", ".pathsuite.yaml")

# Environment variable -> config field
ENV_VARS: Dict[str, str] = {
    "PATHSUITE_ROOTS": "roots",
    "PATHSUITE_EXCLUDE_DIRS": "exclude_dirs",
    "PATHSUITE_NAME_PREDICATE": "name_predicate",
    "PATHSUITE_TYPE_PREDICATE": "type_predicate",
    "PATHSUITE_PREFIXES": "prefixes",
    "PATHSUITE_LOG_LEVEL": "log_level",
}

_LIST_FIELDS = {"roots", "exclude_dirs", "prefixes"}


class ConfigError(SuiteError):
    """Raised when a configuration source is malformed."""
    pass


@dataclass
class SuiteConfig:
    """Settings for one suite construction.

    Attributes:
        roots: Source root directories to scan
        exclude_dirs: Extra directory names or patterns to skip
        name_predicate: Import reference of the name predicate class
        type_predicate: Import reference of the type predicate class
        prefixes: Package prefixes; shorthand for a NamePrefixPredicate
        log_level: Logging level name
    """
    roots: List[str] = field(default_factory=list)
    exclude_dirs: List[str] = field(default_factory=list)
    name_predicate: Optional[str] = None
    type_predicate: Optional[str] = None
    prefixes: List[str] = field(default_factory=list)
    log_level: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SuiteConfig":
        """Build a config from a mapping, validating value shapes."""
        if "pathsuite" in data and isinstance(data["pathsuite"], Mapping):
            data = data["pathsuite"]

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

        values: Dict[str, Any] = {}
        for key, value in data.items():
            if value is None:
                continue
            if key in _LIST_FIELDS:
                if isinstance(value, str):
                    value = [value]
                if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                    raise ConfigError(f"'{key}' must be a list of strings")
            elif not isinstance(value, str):
                raise ConfigError(f"'{key}' must be a string")
            values[key] = value
        return cls(**values)

    @classmethod
    def from_file(cls, path: str | Path) -> "SuiteConfig":
        """Load a YAML configuration file.

        Relative roots are resolved against the file's directory.

        Raises:
            ConfigError: If the file cannot be read or parsed
        """
        path = Path(path)
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise ConfigError(f"Config file {path} must contain a mapping")

        config = cls.from_dict(data)
        config.roots = [str((path.parent / r).resolve()) for r in config.roots]
        return config

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SuiteConfig":
        """Read PATHSUITE_* environment variables.

        List values are separated by ``os.pathsep``.
        """
        environ = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        for var, key in ENV_VARS.items():
            raw = environ.get(var)
            if not raw:
                continue
            if key in _LIST_FIELDS:
                values[key] = [v for v in raw.split(os.pathsep) if v]
            else:
                values[key] = raw
        return cls(**values)

    @classmethod
    def discover(cls, directory: str | Path = ".") -> Optional[Path]:
        """Find a default config file in a directory."""
        for name in DEFAULT_CONFIG_FILES:
            candidate = Path(directory) / name
            if candidate.is_file():
                return candidate
        return None

    def merge(self, other: "SuiteConfig") -> "SuiteConfig":
        """Return a copy with every value set in ``other`` taking precedence."""
        merged = {}
        for f in fields(self):
            mine, theirs = getattr(self, f.name), getattr(other, f.name)
            merged[f.name] = theirs if theirs else mine
        return SuiteConfig(**merged)

    def to_root(self, name: str = "pathsuite") -> RootDescriptor:
        """Build the root descriptor for this configuration.

        Raises:
            ConfigError: If both prefixes and a name predicate are set
        """
        name_predicate: Any = self.name_predicate
        if self.prefixes:
            if name_predicate:
                raise ConfigError("'prefixes' and 'name_predicate' are mutually exclusive")
            name_predicate = NamePrefixPredicate(*self.prefixes)
        return RootDescriptor(
            name=name,
            name_predicate=name_predicate,
            type_predicate=self.type_predicate,
        )

    def to_boundary(self) -> ModuleBoundary:
        """Build the module boundary; defaults to the current directory."""
        roots = self.roots or [os.getcwd()]
        return ModuleBoundary(roots, exclude_dirs=set(self.exclude_dirs))

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

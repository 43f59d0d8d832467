"""
Configuration for the RAML conversion pipeline.

Plain dataclasses that can be loaded from (and dumped to) a JSON config file.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

JSON_SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"


class NamingConvention(str, Enum):
    """Naming convention applied to output file names and references."""

    KEBAB_CASE = "kebab-case"
    CAMEL_CASE = "camelCase"
    PASCAL_CASE = "PascalCase"
    SNAKE_CASE = "snake_case"

    @classmethod
    def default_for_parser(cls) -> NamingConvention:
        """Convention used by a parser constructed without configuration."""
        return cls.CAMEL_CASE


class OutputMode(str, Enum):
    """Output mode for schema files.

    Controls behavior when an output file already exists.
    """

    FORCE = "force"  # Default: overwrite existing files
    ERROR_IF_EXISTS = "error"  # Raise error if a file exists


@dataclass
class OutputConfig:
    """Configuration for output file handling.

    Attributes:
        mode: How to handle existing output files
        atomic_write: Whether to use atomic file writes
    """

    mode: OutputMode = OutputMode.FORCE
    atomic_write: bool = True


@dataclass
class ConverterConfig:
    """Configuration options for RAML conversion."""

    # Naming convention for output files and $ref paths
    naming_convention: NamingConvention = NamingConvention.PASCAL_CASE

    # Source files in the input root that are never converted
    excluded_files: list[str] = field(default_factory=lambda: ["cdm.raml"])

    # Extension of source files
    source_extension: str = ".raml"

    # Subdirectory of the input root holding enum definitions
    enums_subdirectory: str = "enums"

    # $schema URI written into every generated document
    schema_dialect: str = JSON_SCHEMA_DIALECT

    # Parallel workers for per-file parse+emit (1 = sequential)
    max_workers: int = 1

    # Write message/metadata/aggregator scaffold documents
    write_scaffold: bool = True

    # Reference resolution batching
    reference_batch_size: int = 50
    reference_max_workers: int = 4

    # Output configuration
    output: OutputConfig = field(default_factory=OutputConfig)

    @staticmethod
    def from_dict(d: dict) -> ConverterConfig:
        """Create a config from a dictionary."""
        config = ConverterConfig()
        for k, v in d.items():
            if k == "naming_convention":
                config.naming_convention = NamingConvention(v)
            elif k == "output" and isinstance(v, dict):
                mode = v.get("mode", OutputMode.FORCE)
                if isinstance(mode, str):
                    mode = OutputMode(mode)
                config.output = OutputConfig(
                    mode=mode,
                    atomic_write=v.get("atomic_write", True),
                )
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "naming_convention": self.naming_convention.value,
            "excluded_files": self.excluded_files,
            "source_extension": self.source_extension,
            "enums_subdirectory": self.enums_subdirectory,
            "schema_dialect": self.schema_dialect,
            "max_workers": self.max_workers,
            "write_scaffold": self.write_scaffold,
            "reference_batch_size": self.reference_batch_size,
            "reference_max_workers": self.reference_max_workers,
            "output": {
                "mode": self.output.mode.value,
                "atomic_write": self.output.atomic_write,
            },
        }

"""
Exceptions raised by the conversion pipeline.
"""

from __future__ import annotations

from pathlib import Path


class ConversionError(Exception):
    """Base class for conversion failures."""

    pass


class RamlParseError(ConversionError):
    """Raised when a RAML source file cannot be read or parsed.

    This can happen when:
    - The file cannot be read or is not valid UTF-8
    - A line is indented with tabs (reported with its line number)
    """

    def __init__(self, message: str, source_path: Path | str | None = None, line_number: int | None = None):
        self.source_path = str(source_path) if source_path is not None else None
        self.line_number = line_number
        location = ""
        if self.source_path:
            location = self.source_path if line_number is None else f"{self.source_path}:{line_number}"
        super().__init__(f"{location}: {message}" if location else message)


class SchemaWriteError(ConversionError):
    """Raised when a generated schema document cannot be written.

    This can happen when:
    - The serialized document does not round-trip as JSON
    - The output file exists and the output mode forbids overwriting
    """

    pass

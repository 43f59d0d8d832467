"""
Source format detection and header parsing.
"""

from __future__ import annotations

from .nodes import SourceFormat

LIBRARY_MARKER = "#%RAML 1.0 Library"
DATA_TYPE_MARKER = "#%RAML 1.0 DataType"

HEADER_SCAN_LINES = 20
HEADER_FIELDS = ("title", "version", "description")


def detect_format(content: str) -> SourceFormat:
    """
    Classify a source file as a Library or a DataType file.

    A file is a DataType file only if it carries the DataType marker and not
    the Library marker; anything else, including unrecognized files, is a
    Library.
    """
    if DATA_TYPE_MARKER in content and LIBRARY_MARKER not in content:
        return SourceFormat.DATA_TYPE
    return SourceFormat.LIBRARY


def parse_header(lines: list[str]) -> dict[str, str]:
    """Read title/version/description from the first lines, stopping at types:."""
    header: dict[str, str] = {}
    for line in lines[:HEADER_SCAN_LINES]:
        trimmed = line.strip()
        for name in HEADER_FIELDS:
            prefix = f"{name}:"
            if trimmed.startswith(prefix):
                header[name] = trimmed[len(prefix) :].strip()
                break
        if trimmed == "types:":
            break
    return header

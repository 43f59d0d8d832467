"""
Indentation-sensitive RAML parser.

Phase 1 of the pipeline: walk the lines of a source file and produce a flat
list of IntermediateType records. Two state machines share the property
resolver: one for Library files (types under a types: section) and one for
DataType files (a single root type).

Indentation levels are fixed character counts, not nesting depths:

    Library                     DataType
    types:          (0)         description:   (0)
      Name:         (2)         properties:    (0)
        enum:       (4)           prop:        (2)
          - VALUE   (6)             type: ...  (4)
          prop:     (6)
            type:   (8)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from ...utils import to_pascal_case
from ..config import NamingConvention
from ..errors import RamlParseError
from ..mapper.type_mapper import TypeMapper
from ..report import FileReport
from .detector import detect_format, parse_header
from .nodes import IntermediateType, ParserState, SourceFormat
from .property_resolver import (
    LIST_MARKER,
    PropertyContext,
    PropertyResolution,
    indentation,
    is_skippable,
    list_item_value,
    marker_value,
    resolve_property,
)

logger = logging.getLogger(__name__)

LIBRARY_TYPE_INDENT = 2
LIBRARY_FACET_INDENT = 4
LIBRARY_MEMBER_INDENT = 6

DATA_TYPE_ROOT_INDENT = 0
DATA_TYPE_MEMBER_INDENT = 2


@dataclass
class ParseResult:
    """Output of parsing one file: declared types followed by lifted enums."""

    types: list[IntermediateType] = field(default_factory=list)
    source_format: SourceFormat = SourceFormat.LIBRARY


def _split_property_name(declaration: str) -> tuple[str, bool]:
    """Strip the trailing ":" and an optional "?" marker from a property line."""
    name = declaration[:-1].strip()
    if name.endswith("?"):
        return name[:-1], True
    return name, False


def _check_indentation(lines: list[str], source_path: Path | str | None) -> None:
    """Indentation levels are space counts; a tab makes them ambiguous."""
    for i, line in enumerate(lines):
        if is_skippable(line.strip()):
            continue
        if "\t" in line[: indentation(line)]:
            raise RamlParseError("Tab character in indentation", source_path, i + 1)


def _new_type(name: str) -> IntermediateType:
    return IntermediateType(name=name)


class RamlParser:
    """Parses RAML source files into IntermediateType records."""

    def __init__(self, naming_convention: NamingConvention | str = NamingConvention.default_for_parser()):
        """
        Initialize the parser.

        Args:
            naming_convention: Convention applied to referenced file names
        """
        self.mapper = TypeMapper(naming_convention)

    def parse_file(self, path: Path | str, report: FileReport | None = None) -> ParseResult:
        """
        Read and parse a RAML file.

        Args:
            path: Source file path
            report: Optional report to fill with diagnostics

        Returns:
            ParseResult with declared types and lifted inline enums
        """
        path = Path(path)
        try:
            raw = path.read_bytes()
            content = raw.decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise RamlParseError(f"Cannot read source file: {e}", path) from e

        if report is not None:
            report.input_size = len(raw)
            report.original_content = content
        return self.parse(content, path.stem, report, source_path=path)

    def parse(
        self,
        content: str,
        file_stem: str,
        report: FileReport | None = None,
        source_path: Path | str | None = None,
    ) -> ParseResult:
        """
        Parse RAML text.

        Args:
            content: The source text
            file_stem: Base name of the source file without extension, used
                as the type name of DataType files
            report: Optional report to fill with diagnostics
            source_path: Source file path, used in error messages

        Returns:
            ParseResult with declared types and lifted inline enums

        Raises:
            RamlParseError: If a line is indented with tabs
        """
        lines = content.splitlines()
        _check_indentation(lines, source_path)
        if report is not None:
            report.raml_header = parse_header(lines)

        source_format = detect_format(content)
        if source_format == SourceFormat.DATA_TYPE:
            types = self._parse_data_type(lines, file_stem, report)
        else:
            types = self._parse_library(lines, report)
        return ParseResult(types=types, source_format=source_format)

    def _parse_library(self, lines: list[str], report: FileReport | None) -> list[IntermediateType]:
        """Parse a Library file: any number of named types under types:."""
        types: list[IntermediateType] = []
        inline_enums: list[IntermediateType] = []
        state = ParserState.IDLE
        current: IntermediateType | None = None

        for i, line in enumerate(lines):
            trimmed = line.strip()
            if is_skippable(trimmed):
                continue
            indent = indentation(line)

            if indent == 0:
                if trimmed == "types:":
                    state = ParserState.IN_TYPES_LIST
                elif state != ParserState.IDLE:
                    # Another root-level section ends the type list
                    if current is not None:
                        types.append(current)
                        current = None
                    state = ParserState.IDLE
                continue

            if state == ParserState.IDLE:
                continue

            if indent == LIBRARY_TYPE_INDENT and trimmed.endswith(":"):
                if current is not None:
                    types.append(current)
                current = _new_type(trimmed[:-1].strip())
                state = ParserState.IN_TYPE
                continue

            if current is None:
                continue

            if indent == LIBRARY_FACET_INDENT:
                if trimmed.startswith("description:"):
                    current.description = marker_value(trimmed, "description:")
                elif trimmed.startswith("enum:"):
                    current.is_enum = True
                    state = ParserState.IN_ENUM
                elif trimmed == "properties:":
                    state = ParserState.IN_PROPERTIES
                continue

            if indent != LIBRARY_MEMBER_INDENT:
                continue

            if trimmed.startswith(LIST_MARKER) and current.is_enum:
                current.enum_values.append(list_item_value(trimmed))
            elif trimmed.endswith(":") and not current.is_enum:
                self._add_property(lines, i, LIBRARY_MEMBER_INDENT, current, inline_enums, report)

        if current is not None:
            types.append(current)
        return types + inline_enums

    def _parse_data_type(self, lines: list[str], file_stem: str, report: FileReport | None) -> list[IntermediateType]:
        """Parse a DataType file: exactly one type named after the file."""
        current = _new_type(to_pascal_case(file_stem))
        inline_enums: list[IntermediateType] = []
        state = ParserState.IN_TYPE

        for i, line in enumerate(lines):
            trimmed = line.strip()
            if is_skippable(trimmed):
                continue
            indent = indentation(line)

            if indent == DATA_TYPE_ROOT_INDENT:
                if trimmed.startswith("description:"):
                    current.description = marker_value(trimmed, "description:")
                elif trimmed == "enum:":
                    current.is_enum = True
                    state = ParserState.IN_ENUM
                elif trimmed == "properties:":
                    state = ParserState.IN_PROPERTIES
                continue

            if indent != DATA_TYPE_MEMBER_INDENT:
                continue

            if state == ParserState.IN_ENUM and trimmed.startswith(LIST_MARKER):
                current.enum_values.append(list_item_value(trimmed))
            elif state == ParserState.IN_PROPERTIES and trimmed.endswith(":"):
                self._add_property(lines, i, DATA_TYPE_MEMBER_INDENT, current, inline_enums, report)

        return [current] + inline_enums

    def _add_property(
        self,
        lines: list[str],
        index: int,
        base_indent: int,
        current: IntermediateType,
        inline_enums: list[IntermediateType],
        report: FileReport | None,
    ) -> None:
        """Resolve the property declared on `lines[index]` and attach it."""
        name, optional = _split_property_name(lines[index].strip())
        context = PropertyContext(
            parent_type=current.name,
            property_name=name,
            mapper=self.mapper,
            is_optional=optional,
        )
        resolution = resolve_property(lines, index + 1, base_indent, context)
        current.add_property(name, resolution.detail, optional)
        if resolution.inline_enum is not None:
            inline_enums.append(resolution.inline_enum)
        if report is not None:
            _record(report, resolution)


def _record(report: FileReport, resolution: PropertyResolution) -> None:
    """Copy the report records of a resolved property into the file report."""
    if resolution.transformation is not None:
        report.property_transformations.append(resolution.transformation)
    if resolution.union is not None:
        report.union_conversions.append(resolution.union)
    if resolution.format_inference is not None:
        report.format_inferences.append(resolution.format_inference)
    if resolution.inline_enum_extraction is not None:
        report.inline_enum_extractions.append(resolution.inline_enum_extraction)

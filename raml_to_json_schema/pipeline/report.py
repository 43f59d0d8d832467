"""
Conversion reports.

Purely diagnostic records: one FileReport per converted source file plus a
batch-level summary. Nothing downstream reads them; they are surfaced to the
caller and rendered by the command-line tool.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jinja2

CURRENT_DIR = Path(__file__).parent.parent.resolve().absolute()


@dataclass
class WrittenSchema:
    """A type routed to an output file."""

    name: str = ""
    file: str = ""

    def to_dict(self) -> dict:
        return {"name": self.name, "file": self.file}


@dataclass
class UnionConversion:
    parent_type: str = ""
    property: str = ""
    original: str = ""
    converted: list[str] = field(default_factory=list)
    strategy: str = "type-array"
    line_number: int | None = None

    def to_dict(self) -> dict:
        d = {
            "parentType": self.parent_type,
            "property": self.property,
            "original": self.original,
            "converted": self.converted,
            "strategy": self.strategy,
        }
        if self.line_number is not None:
            d["lineNumber"] = self.line_number
        return d


@dataclass
class InlineEnumExtraction:
    parent_type: str = ""
    property: str = ""
    new_enum_name: str = ""
    file: str = ""
    values: list[str] = field(default_factory=list)
    line_range: tuple[int, int] | None = None

    def to_dict(self) -> dict:
        d = {
            "parentType": self.parent_type,
            "property": self.property,
            "newEnumName": self.new_enum_name,
            "file": self.file,
            "values": self.values,
        }
        if self.line_range is not None:
            d["lineRange"] = {"start": self.line_range[0], "end": self.line_range[1]}
        return d


@dataclass
class NamingChange:
    original: str = ""
    converted: str = ""
    scope: str = "type"  # "type", "property", "enum" or "file"
    context: str | None = None

    def to_dict(self) -> dict:
        d = {"original": self.original, "converted": self.converted, "scope": self.scope}
        if self.context is not None:
            d["context"] = self.context
        return d


@dataclass
class PropertyTransformation:
    parent_type: str = ""
    property_name: str = ""
    original_lines: str = ""
    original_type: str | None = None
    original_description: str = ""
    is_optional: bool = False
    line_number: int | None = None
    converted_type: str | list[str] | None = None
    format: str | None = None
    ref: str | None = None
    items: dict | None = None
    format_reason: str | None = None
    type_reason: str | None = None
    note: str | None = None

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "parentType": self.parent_type,
            "propertyName": self.property_name,
            "originalRamlLine": self.original_lines,
            "originalType": self.original_type,
            "originalDescription": self.original_description,
            "isOptional": self.is_optional,
            "lineNumber": self.line_number,
            "convertedType": self.converted_type,
            "format": self.format,
            "$ref": self.ref,
            "items": self.items,
        }
        for key, value in (("formatReason", self.format_reason), ("typeReason", self.type_reason), ("note", self.note)):
            if value is not None:
                d[key] = value
        return d


@dataclass
class FormatInferenceRecord:
    property: str = ""
    parent_type: str = ""
    original_type: str = ""
    format: str | None = None
    reason: str = ""
    confidence: str = "low"

    def to_dict(self) -> dict:
        return {
            "property": self.property,
            "parentType": self.parent_type,
            "originalType": self.original_type,
            "format": self.format,
            "reason": self.reason,
            "confidence": self.confidence,
        }


@dataclass
class GeneratedSchema:
    """Snapshot of a document produced from one source file."""

    file_name: str = ""
    content: str = ""
    kind: str = "business-object"  # or "enum"

    def to_dict(self) -> dict:
        return {"fileName": self.file_name, "content": self.content, "type": self.kind}


@dataclass
class FileReport:
    """Diagnostics collected while converting one source file."""

    input_file: str = ""
    input_size: int | None = None
    raml_header: dict[str, str] = field(default_factory=dict)
    original_content: str | None = None
    enums_written: list[WrittenSchema] = field(default_factory=list)
    business_objects_written: list[WrittenSchema] = field(default_factory=list)
    union_conversions: list[UnionConversion] = field(default_factory=list)
    inline_enum_extractions: list[InlineEnumExtraction] = field(default_factory=list)
    naming_changes: list[NamingChange] = field(default_factory=list)
    property_transformations: list[PropertyTransformation] = field(default_factory=list)
    format_inferences: list[FormatInferenceRecord] = field(default_factory=list)
    generated_schemas: list[GeneratedSchema] = field(default_factory=list)
    duration_ms: float = 0.0
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def inferred_formats(self) -> list[str]:
        return sorted({record.format for record in self.format_inferences if record.format})

    def to_dict(self, include_content: bool = True) -> dict:
        d: dict[str, Any] = {
            "inputFile": self.input_file,
            "enumsWritten": [e.to_dict() for e in self.enums_written],
            "businessObjectsWritten": [b.to_dict() for b in self.business_objects_written],
            "inferredFormats": self.inferred_formats,
            "unionsCount": len(self.union_conversions),
            "inlineEnumsExtracted": [x.new_enum_name for x in self.inline_enum_extractions],
            "warnings": self.warnings,
            "errors": self.errors,
            "durationMs": self.duration_ms,
            "fileMapping": {
                "inputFile": self.input_file,
                "inputSize": self.input_size,
                "ramlHeader": self.raml_header,
                "outputFiles": [{"file": e.file, "type": "enum", "name": e.name} for e in self.enums_written]
                + [{"file": b.file, "type": "business-object", "name": b.name} for b in self.business_objects_written],
            },
            "propertyTransformations": [t.to_dict() for t in self.property_transformations],
            "unionConversions": [u.to_dict() for u in self.union_conversions],
            "inlineEnumExtractions": [x.to_dict() for x in self.inline_enum_extractions],
            "namingChanges": [n.to_dict() for n in self.naming_changes],
            "formatInferences": [f.to_dict() for f in self.format_inferences],
        }
        if include_content:
            d["generatedSchemas"] = [g.to_dict() for g in self.generated_schemas]
            if self.original_content is not None:
                d["originalRamlContent"] = self.original_content
        return d


@dataclass
class FileFailure:
    """A source file skipped because parsing or emitting failed."""

    input_file: str = ""
    error: str = ""

    def to_dict(self) -> dict:
        return {"inputFile": self.input_file, "error": self.error}


@dataclass
class ConversionSummary:
    files_processed: int = 0
    enums_created: int = 0
    business_objects_created: int = 0
    unions_count: int = 0
    inline_enums_extracted: int = 0
    collisions_count: int = 0
    warnings_count: int = 0
    errors_count: int = 0
    duration_ms: float = 0.0
    output_directory: str = ""

    @staticmethod
    def from_reports(
        reports: list[FileReport],
        failures: list[FileFailure],
        files_processed: int,
        enums_created: int,
        business_objects_created: int,
        collisions_count: int,
        output_directory: str,
    ) -> ConversionSummary:
        return ConversionSummary(
            files_processed=files_processed,
            enums_created=enums_created,
            business_objects_created=business_objects_created,
            unions_count=sum(len(r.union_conversions) for r in reports),
            inline_enums_extracted=sum(len(r.inline_enum_extractions) for r in reports),
            collisions_count=collisions_count,
            warnings_count=sum(len(r.warnings) for r in reports),
            errors_count=sum(len(r.errors) for r in reports) + len(failures),
            duration_ms=sum(r.duration_ms for r in reports),
            output_directory=output_directory,
        )

    def to_dict(self) -> dict:
        return {
            "filesProcessed": self.files_processed,
            "enumsCreated": self.enums_created,
            "businessObjectsCreated": self.business_objects_created,
            "unionsCount": self.unions_count,
            "inlineEnumsExtracted": self.inline_enums_extracted,
            "collisionsCount": self.collisions_count,
            "warningsCount": self.warnings_count,
            "errorsCount": self.errors_count,
            "durationMs": self.duration_ms,
            "outputDirectory": self.output_directory,
        }


def render_text_report(run: Any, command_line: str = "") -> str:
    """Render a conversion run as plain text using the report template."""
    jinja_env = jinja2.Environment(lstrip_blocks=True, trim_blocks=True)
    template = jinja_env.from_string((CURRENT_DIR / "templates" / "report.txt.jinja2").read_text(encoding="utf-8"))
    return template.render(run=run, summary=run.summary, command_line=command_line)

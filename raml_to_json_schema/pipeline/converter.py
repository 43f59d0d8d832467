"""
Directory-level RAML to JSON Schema conversion.

Discovers source files, parses and emits each one, merges the results into
one ConversionState keyed by type name and writes everything out under a
fixed directory layout:

    <output>/business-objects/<Name>.schema.json
    <output>/common/enums/<Name>Enum.schema.json
    <output>/message.schema.json
    <output>/metadata.schema.json
    <output>/datamodelObjects.schema.json

A file that fails to parse or emit is logged and skipped; the batch
continues. When two files define the same type name, the later file wins.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..utils import apply_naming_convention
from .config import ConverterConfig
from .emitter.schema_emitter import (
    AGGREGATOR_FILE,
    BUSINESS_OBJECTS_DIR,
    MESSAGE_FILE,
    METADATA_FILE,
    SchemaEmitter,
)
from .mapper.type_mapper import business_object_file_name, enum_file_name
from .raml_ast.nodes import IntermediateType
from .raml_ast.parser import RamlParser
from .report import (
    ConversionSummary,
    FileFailure,
    FileReport,
    GeneratedSchema,
    NamingChange,
    WrittenSchema,
)
from .writer.atomic_writer import AtomicWriter, serialize_schema

logger = logging.getLogger(__name__)

COMMON_DIR = "common"
ENUMS_OUTPUT_DIR = f"{COMMON_DIR}/enums"


@dataclass
class NameCollision:
    """A type name defined again by a later file (the later one wins)."""

    name: str = ""
    kind: str = "business-object"
    previous_file: str = ""
    file: str = ""

    def to_dict(self) -> dict:
        return {"name": self.name, "kind": self.kind, "previousFile": self.previous_file, "file": self.file}


@dataclass
class ConversionState:
    """Schemas accumulated over one conversion run, keyed by type name."""

    enum_schemas: dict[str, dict[str, Any]] = field(default_factory=dict)
    business_object_schemas: dict[str, dict[str, Any]] = field(default_factory=dict)
    origins: dict[tuple[str, str], str] = field(default_factory=dict)
    collisions: list[NameCollision] = field(default_factory=list)

    def register(self, type_def: IntermediateType, schema: dict[str, Any], source_file: str) -> NameCollision | None:
        """Store a schema, overwriting any earlier one with the same name."""
        kind = "enum" if type_def.is_enum else "business-object"
        target = self.enum_schemas if type_def.is_enum else self.business_object_schemas

        collision = None
        previous = self.origins.get((kind, type_def.name))
        if previous is not None:
            collision = NameCollision(name=type_def.name, kind=kind, previous_file=previous, file=source_file)
            self.collisions.append(collision)

        target[type_def.name] = schema
        self.origins[(kind, type_def.name)] = source_file
        return collision


@dataclass
class FileOutcome:
    """Result of parsing and emitting one source file."""

    source_file: str = ""
    report: FileReport | None = None
    records: list[tuple[IntermediateType, dict[str, Any]]] = field(default_factory=list)
    failure: FileFailure | None = None


@dataclass
class ConversionRun:
    """Result of a full directory conversion."""

    enum_names: list[str] = field(default_factory=list)
    business_object_names: list[str] = field(default_factory=list)
    output_directory: str = ""
    reports: list[FileReport] = field(default_factory=list)
    failures: list[FileFailure] = field(default_factory=list)
    collisions: list[NameCollision] = field(default_factory=list)
    summary: ConversionSummary = field(default_factory=ConversionSummary)

    def to_dict(self, include_content: bool = False) -> dict:
        return {
            "enumNames": self.enum_names,
            "businessObjectNames": self.business_object_names,
            "outputDirectory": self.output_directory,
            "reports": [r.to_dict(include_content=include_content) for r in self.reports],
            "failures": [f.to_dict() for f in self.failures],
            "collisions": [c.to_dict() for c in self.collisions],
            "summary": self.summary.to_dict(),
        }


@dataclass
class FileConversionResult:
    """Result of converting a single file into a single document."""

    success: bool = False
    input_file: str = ""
    output_file: str = ""
    schema: dict[str, Any] | None = None
    error: str | None = None


class RamlConverter:
    """Converts a directory of RAML files into a tree of JSON Schema files."""

    def __init__(self, config: ConverterConfig | None = None):
        """
        Initialize the converter.

        Args:
            config: Conversion options (defaults to ConverterConfig())
        """
        self.config = config or ConverterConfig()
        self.parser = RamlParser(self.config.naming_convention)
        self.emitter = SchemaEmitter(self.config.schema_dialect)
        self.writer = AtomicWriter(self.config.output)

    def discover_sources(self, input_dir: Path) -> list[Path]:
        """List source files of the root directory, then of the enums subdirectory."""
        extension = self.config.source_extension
        excluded = set(self.config.excluded_files)
        sources = sorted(p for p in input_dir.iterdir() if p.is_file() and p.name.endswith(extension) and p.name not in excluded)

        enums_dir = input_dir / self.config.enums_subdirectory
        if enums_dir.is_dir():
            sources.extend(sorted(p for p in enums_dir.iterdir() if p.is_file() and p.name.endswith(extension)))
        return sources

    def convert_directory(self, input_dir: Path | str, output_dir: Path | str) -> ConversionRun:
        """
        Convert every source file of a directory.

        Args:
            input_dir: Directory holding RAML files (and an enums/ subdirectory)
            output_dir: Root of the generated schema tree

        Returns:
            ConversionRun with names, per-file reports and a summary
        """
        input_dir = Path(input_dir)
        output_dir = Path(output_dir)
        convention = self.config.naming_convention

        sources = self.discover_sources(input_dir)
        logger.info("Converting %d RAML files from %s to %s", len(sources), input_dir, output_dir)

        outcomes = self._process_files(sources, output_dir)

        state = ConversionState()
        run = ConversionRun(output_directory=str(output_dir))
        for outcome in outcomes:
            if outcome.failure is not None:
                run.failures.append(outcome.failure)
                continue
            for type_def, schema in outcome.records:
                collision = state.register(type_def, schema, outcome.source_file)
                if collision is not None:
                    message = (
                        f"{collision.kind} '{collision.name}' from {collision.previous_file} "
                        f"is overwritten by {collision.file}"
                    )
                    logger.warning("Name collision: %s", message)
                    outcome.report.warnings.append(message)
            run.reports.append(outcome.report)

        enums_dir = output_dir / ENUMS_OUTPUT_DIR
        business_objects_dir = output_dir / BUSINESS_OBJECTS_DIR
        output_dir.mkdir(parents=True, exist_ok=True)
        enums_dir.mkdir(parents=True, exist_ok=True)
        business_objects_dir.mkdir(parents=True, exist_ok=True)

        for name, schema in state.enum_schemas.items():
            self.writer.write_json(enums_dir / enum_file_name(name, convention), schema)
        for name, schema in state.business_object_schemas.items():
            self.writer.write_json(business_objects_dir / business_object_file_name(name, convention), schema)

        if self.config.write_scaffold:
            self.writer.write_json(output_dir / MESSAGE_FILE, self.emitter.message_schema())
            self.writer.write_json(output_dir / METADATA_FILE, self.emitter.metadata_schema())
            self.writer.write_json(
                output_dir / AGGREGATOR_FILE,
                self.emitter.aggregator_schema(list(state.business_object_schemas), convention),
            )

        run.enum_names = list(state.enum_schemas)
        run.business_object_names = list(state.business_object_schemas)
        run.collisions = state.collisions
        run.summary = ConversionSummary.from_reports(
            run.reports,
            run.failures,
            files_processed=len(sources),
            enums_created=len(state.enum_schemas),
            business_objects_created=len(state.business_object_schemas),
            collisions_count=len(state.collisions),
            output_directory=str(output_dir),
        )
        logger.info(
            "Conversion finished: %d enums, %d business objects, %d files skipped",
            run.summary.enums_created,
            run.summary.business_objects_created,
            len(run.failures),
        )
        return run

    def _process_files(self, sources: list[Path], output_dir: Path) -> list[FileOutcome]:
        """Parse and emit every file; outcomes keep discovery order."""
        if self.config.max_workers <= 1 or len(sources) <= 1:
            return [self._convert_source(source, output_dir) for source in sources]

        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            futures = [executor.submit(self._convert_source, source, output_dir) for source in sources]
            return [future.result() for future in futures]

    def _convert_source(self, source: Path, output_dir: Path) -> FileOutcome:
        """Parse and emit one file. Never raises: failures are captured."""
        source_file = str(source)
        start = time.perf_counter()
        report = FileReport(input_file=source_file)
        try:
            parsed = self.parser.parse_file(source, report)
            records = [(type_def, self.emitter.emit(type_def)) for type_def in parsed.types]
            self._fill_report(report, records, output_dir)
        except Exception as e:  # noqa: BLE001 - any failure skips the file
            logger.exception("Failed to convert %s, skipping file", source_file)
            return FileOutcome(source_file=source_file, failure=FileFailure(input_file=source_file, error=str(e)))

        report.duration_ms = (time.perf_counter() - start) * 1000
        logger.debug(
            "Created file report for %s: %d property transformations, %d unions, %d format inferences, "
            "%d naming changes, %d inline enums",
            source_file,
            len(report.property_transformations),
            len(report.union_conversions),
            len(report.format_inferences),
            len(report.naming_changes),
            len(report.inline_enum_extractions),
        )
        return FileOutcome(source_file=source_file, report=report, records=records)

    def _fill_report(
        self,
        report: FileReport,
        records: list[tuple[IntermediateType, dict[str, Any]]],
        output_dir: Path,
    ) -> None:
        convention = self.config.naming_convention
        for type_def, schema in records:
            base = apply_naming_convention(type_def.name, convention)
            if type_def.is_enum:
                file_name = enum_file_name(type_def.name, convention)
                out = output_dir / ENUMS_OUTPUT_DIR / file_name
                report.enums_written.append(WrittenSchema(name=type_def.name, file=str(out)))
                kind = "enum"
            else:
                file_name = business_object_file_name(type_def.name, convention)
                out = output_dir / BUSINESS_OBJECTS_DIR / file_name
                report.business_objects_written.append(WrittenSchema(name=type_def.name, file=str(out)))
                kind = "business-object"

            report.generated_schemas.append(GeneratedSchema(file_name=file_name, content=serialize_schema(schema), kind=kind))
            if base != type_def.name:
                report.naming_changes.append(
                    NamingChange(original=type_def.name, converted=base, scope="enum" if type_def.is_enum else "type")
                )

    def convert_file(self, source_path: Path | str, destination_dir: Path | str) -> FileConversionResult:
        """
        Convert a single RAML file into a single JSON document.

        A file producing one record is written as that schema; several records
        are wrapped as definitions keyed by title.

        Args:
            source_path: The RAML file
            destination_dir: Directory receiving <name>.json

        Returns:
            FileConversionResult (failures are reported, not raised)
        """
        source_path = Path(source_path)
        destination_dir = Path(destination_dir)
        logger.info("Converting file %s into %s", source_path, destination_dir)
        try:
            parsed = self.parser.parse_file(source_path)
            if not parsed.types:
                return FileConversionResult(
                    success=False,
                    input_file=str(source_path),
                    output_file=str(destination_dir),
                    error="No types found in RAML file",
                )

            schemas = [self.emitter.emit(type_def) for type_def in parsed.types]
            if len(schemas) == 1:
                document = schemas[0]
            else:
                document = {
                    "$schema": self.config.schema_dialect,
                    "title": source_path.stem,
                    "type": "object",
                    "properties": {},
                    "definitions": {schema["title"]: schema for schema in schemas if schema.get("title")},
                }

            output_name = apply_naming_convention(source_path.stem, self.config.naming_convention)
            output_path = destination_dir / f"{output_name}.json"
            self.writer.write_json(output_path, document)
        except Exception as e:  # noqa: BLE001 - reported to the caller
            logger.error("File conversion failed for %s: %s", source_path, e)
            return FileConversionResult(
                success=False,
                input_file=str(source_path),
                output_file=str(destination_dir),
                error=str(e),
            )

        logger.info("File conversion completed: %s", output_path)
        return FileConversionResult(success=True, input_file=str(source_path), output_file=str(output_path), schema=document)

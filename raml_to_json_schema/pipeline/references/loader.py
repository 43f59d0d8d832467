"""
Loading schema documents for reference resolution.

Reads JSON files from disk into LoadedSchema records and extracts the
$ref strings each document contains. The resolver only consumes these
records; it never touches the file system.
"""

from __future__ import annotations

import base64
import json
import logging
import posixpath
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

COMPOUND_SUFFIX = ".schema.json"
_NON_ALPHANUMERIC = re.compile(r"[^a-zA-Z0-9]")


@dataclass
class SchemaReference:
    """One $ref found in a document."""

    ref: str = ""
    schema_name: str = ""

    def to_dict(self) -> dict:
        return {"$ref": self.ref, "schemaName": self.schema_name}


@dataclass
class LoadedSchema:
    """A schema document loaded from disk.

    `referenced_by` is owned by the reference resolver and recomputed on
    every resolution pass.
    """

    id: str = ""
    name: str = ""
    relative_path: str = ""
    content: Any = None
    path: str = ""
    references: list[SchemaReference] = field(default_factory=list)
    referenced_by: set[str] = field(default_factory=set)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "relativePath": self.relative_path,
            "references": [r.to_dict() for r in self.references],
            "referencedBy": sorted(self.referenced_by),
        }


def schema_id(path: Path | str) -> str:
    """Stable identifier derived from a file path."""
    encoded = base64.b64encode(str(path).encode("utf-8")).decode("ascii")
    return _NON_ALPHANUMERIC.sub("", encoded)


def extract_references(data: Any) -> list[str]:
    """Every $ref string in a JSON document, in document order."""
    references: list[str] = []
    if isinstance(data, dict):
        ref = data.get("$ref")
        if isinstance(ref, str):
            references.append(ref)
        for value in data.values():
            references.extend(extract_references(value))
    elif isinstance(data, list):
        for value in data:
            references.extend(extract_references(value))
    return references


def reference_schema_name(ref: str) -> str:
    """Declared target name of a $ref: its file name without schema suffixes."""
    path_part = ref.split("#", 1)[0]
    if not path_part:
        return ref.rsplit("/", 1)[-1]
    base = posixpath.basename(path_part)
    if base.endswith(COMPOUND_SUFFIX):
        return base[: -len(COMPOUND_SUFFIX)]
    if base.endswith(".json"):
        return base[: -len(".json")]
    return base


def build_loaded_schema(path: Path, root: Path, content: Any) -> LoadedSchema:
    """Wrap a parsed document in a LoadedSchema."""
    name = path.name[: -len(".json")] if path.name.endswith(".json") else path.name
    return LoadedSchema(
        id=schema_id(path),
        name=name,
        relative_path=path.relative_to(root).as_posix(),
        content=content,
        path=str(path),
        references=[SchemaReference(ref=ref, schema_name=reference_schema_name(ref)) for ref in extract_references(content)],
    )


def load_schemas(root: Path | str) -> list[LoadedSchema]:
    """
    Load every JSON file under a directory.

    Unreadable or invalid files are skipped with a warning.

    Args:
        root: Directory to scan recursively

    Returns:
        LoadedSchema records in sorted path order
    """
    root = Path(root)
    schemas: list[LoadedSchema] = []
    for path in sorted(root.rglob("*.json")):
        if not path.is_file():
            continue
        try:
            content = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Failed to read schema file %s: %s", path, e)
            continue
        schemas.append(build_loaded_schema(path, root, content))
    logger.info("Loaded %d schema files from %s", len(schemas), root)
    return schemas

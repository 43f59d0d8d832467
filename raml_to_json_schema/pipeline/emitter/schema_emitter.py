"""
JSON Schema emission.

Phase 2 of the pipeline: render IntermediateType records as JSON Schema
documents, and build the fixed scaffold documents that tie a converted
project together.
"""

from __future__ import annotations

from typing import Any

from ...utils import apply_naming_convention
from ..config import JSON_SCHEMA_DIALECT, NamingConvention
from ..mapper.type_mapper import business_object_file_name
from ..raml_ast.nodes import IntermediateType, PropertyDetail

# Source types whose format is fixed, checked in this order before the
# inferred format
FIXED_FORMATS: tuple[tuple[str, str], ...] = (
    ("date-only", "date"),
    ("datetime", "date-time"),
    ("time", "time"),
    ("time-only", "time"),
    ("datetime-only", "date-time"),
    ("datetime-with-timezone", "date-time"),
)

BUSINESS_OBJECTS_DIR = "business-objects"
AGGREGATOR_FILE = "datamodelObjects.schema.json"
MESSAGE_FILE = "message.schema.json"
METADATA_FILE = "metadata.schema.json"


class SchemaEmitter:
    """Renders intermediate types as JSON Schema documents."""

    def __init__(self, schema_dialect: str = JSON_SCHEMA_DIALECT):
        self.schema_dialect = schema_dialect

    def emit(self, type_def: IntermediateType) -> dict[str, Any]:
        """
        Render one intermediate type.

        Args:
            type_def: A parsed type or enum

        Returns:
            The JSON Schema document
        """
        if type_def.is_enum:
            return self.emit_enum(type_def)
        return self.emit_object(type_def)

    def emit_enum(self, type_def: IntermediateType) -> dict[str, Any]:
        schema: dict[str, Any] = {
            "$schema": self.schema_dialect,
            "title": type_def.name,
            "type": "string",
            "enum": list(type_def.enum_values),
        }
        if type_def.is_inline_enum:
            schema["description"] = type_def.description
        return schema

    def emit_object(self, type_def: IntermediateType) -> dict[str, Any]:
        schema: dict[str, Any] = {
            "$schema": self.schema_dialect,
            "title": type_def.name,
            "type": "object",
            "properties": {},
            "additionalProperties": False,
        }
        for name, detail in type_def.properties.items():
            prop_schema = self.emit_property(name, detail)
            if prop_schema is not None:
                schema["properties"][name] = prop_schema
        if type_def.required:
            schema["required"] = list(type_def.required)
        return schema

    def emit_property(self, name: str, detail: PropertyDetail) -> dict[str, Any] | None:
        """Render the schema of one property, or None if it has no shape."""
        if detail.ref:
            return {"$ref": detail.ref}

        if detail.type == "array" and detail.items is not None:
            if detail.items.ref:
                items: dict[str, Any] = {"$ref": detail.items.ref}
            elif detail.items.type == "any" or (detail.items.is_union and "any" in detail.items.type):
                items = {}
            else:
                items = {"type": list(detail.items.type) if detail.items.is_union else detail.items.type}
            return {"type": "array", "items": items}

        if detail.type == "any" or detail.original_type == "any" or (detail.is_union and "any" in detail.type):
            # Always-valid schema
            return {}

        if detail.is_union:
            return {"type": list(detail.type)}

        if not detail.type:
            return None

        prop_schema: dict[str, Any] = {"type": detail.type}
        fmt = self._format_for(detail)
        if fmt:
            prop_schema["format"] = fmt
        if detail.type == "string" and "format" not in prop_schema and "email" in name.lower():
            prop_schema["format"] = "email"
        return prop_schema

    @staticmethod
    def _format_for(detail: PropertyDetail) -> str | None:
        for original_type, fmt in FIXED_FORMATS:
            if detail.original_type == original_type:
                return fmt
        return detail.format

    def metadata_schema(self) -> dict[str, Any]:
        """Schema of the metadata block carried by every message."""
        return {
            "$schema": self.schema_dialect,
            "title": "Metadata",
            "type": "object",
            "properties": {
                "berichtId": {"type": "string", "description": "Uniek bericht ID"},
                "tijdstip": {"type": "string", "format": "date-time"},
                "bronsysteem": {"type": "string"},
                "correlatieId": {"type": "string"},
            },
            "required": ["berichtId", "tijdstip", "bronsysteem"],
            "additionalProperties": False,
        }

    def message_schema(self) -> dict[str, Any]:
        """Envelope schema: metadata plus one or many aggregator objects."""
        aggregator_ref = f"./{AGGREGATOR_FILE}"
        return {
            "$schema": self.schema_dialect,
            "title": "Berichten",
            "type": "object",
            "properties": {
                "metadata": {"$ref": f"./{METADATA_FILE}"},
                "payload": {
                    "oneOf": [
                        {"$ref": aggregator_ref},
                        {"type": "array", "items": {"$ref": aggregator_ref}},
                    ]
                },
            },
            "required": ["metadata", "payload"],
            "additionalProperties": False,
        }

    def aggregator_schema(
        self,
        business_object_names: list[str],
        naming_convention: NamingConvention | str,
    ) -> dict[str, Any]:
        """Schema mapping each business object's PascalCase name to its file."""
        properties = {}
        for name in business_object_names:
            key = apply_naming_convention(name, NamingConvention.PASCAL_CASE)
            properties[key] = {"$ref": f"./{BUSINESS_OBJECTS_DIR}/{business_object_file_name(name, naming_convention)}"}
        return {
            "$schema": self.schema_dialect,
            "title": "Datamodel Objecten",
            "type": "object",
            "properties": properties,
            "required": [],
            "additionalProperties": False,
        }

"""
Type and reference mapping from RAML type tokens to JSON Schema.

Scalar tokens map through a fixed table. Anything else is a reference to
another type and becomes an output-relative $ref path, routed either to the
enum namespace or to the business-object namespace.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass

from ...utils import apply_naming_convention
from ..config import NamingConvention

# RAML scalar/structural type -> JSON Schema type
SCALAR_TYPES: dict[str, str] = {
    "string": "string",
    "number": "number",
    "integer": "integer",
    "boolean": "boolean",
    "date": "string",
    "date-only": "string",
    "datetime": "string",
    "datetime-only": "string",
    "datetime-with-timezone": "string",
    "time": "string",
    "time-only": "string",
    "object": "object",
    "array": "array",
    "any": "any",
}

# Tokens accepted as the null member of a union ("string | nil")
NULL_TYPES = {"nil", "null"}

INCLUDE_DIRECTIVE = "!include "
ENUMS_DIRECTORY = "enums"
ENUM_OUTPUT_DIR = "./common/enums"


@dataclass
class FormatInference:
    """Result of inferring a JSON Schema format for a property."""

    format: str | None = None
    reason: str = ""
    confidence: str = "low"  # "high", "medium" or "low"; informational only
    # Property looks like it needs a pattern (phone numbers) but has no format
    pattern_hint: bool = False


def clean_type_token(raml_type: str) -> str:
    """Strip whitespace and a trailing optional marker from a type token."""
    token = raml_type.strip()
    return token[:-1] if token.endswith("?") else token


def is_scalar(raml_type: str) -> bool:
    return clean_type_token(raml_type) in SCALAR_TYPES


def enum_file_name(name: str, convention: NamingConvention | str) -> str:
    return f"{apply_naming_convention(name, convention)}Enum.schema.json"


def business_object_file_name(name: str, convention: NamingConvention | str) -> str:
    return f"{apply_naming_convention(name, convention)}.schema.json"


def infer_format(raml_type: str, property_name: str) -> FormatInference:
    """Infer a JSON Schema format from the RAML type and the property name.

    Date/time types are mapped with high confidence; for plain strings the
    property name drives medium/low confidence guesses.
    """
    clean = clean_type_token(raml_type).lower()
    prop = property_name.lower()

    if clean == "date":
        return FormatInference("date", 'RAML type "date" maps to JSON Schema format "date"', "high")
    if clean in ("datetime", "datetime-only"):
        return FormatInference("date-time", f'RAML type "{clean}" maps to JSON Schema format "date-time"', "high")
    if clean in ("time", "time-only"):
        return FormatInference("time", f'RAML type "{clean}" maps to JSON Schema format "time"', "high")

    if clean == "string":
        if "email" in prop or "mail" in prop:
            return FormatInference("email", f'Property name "{property_name}" suggests email format', "medium")
        if "uri" in prop or "url" in prop or "link" in prop:
            return FormatInference("uri", f'Property name "{property_name}" suggests URI format', "medium")
        if "uuid" in prop or "guid" in prop:
            return FormatInference("uuid", f'Property name "{property_name}" suggests UUID format', "medium")
        if "phone" in prop or "tel" in prop:
            return FormatInference(
                None,
                f'Property name "{property_name}" suggests phone number pattern',
                "low",
                pattern_hint=True,
            )
        if "password" in prop or "secret" in prop:
            return FormatInference("password", f'Property name "{property_name}" suggests password format', "medium")

    return FormatInference(
        None,
        f'No format inference available for RAML type "{raml_type}" and property "{property_name}"',
        "low",
    )


class TypeMapper:
    """Maps RAML type tokens to JSON Schema types and $ref paths."""

    def __init__(self, naming_convention: NamingConvention | str = NamingConvention.default_for_parser()):
        """
        Initialize the mapper.

        Args:
            naming_convention: Convention applied to referenced file names
        """
        self.naming_convention = NamingConvention(naming_convention)

    def map_type(self, raml_type: str | None) -> str | None:
        """
        Map a RAML type token to a JSON Schema type name.

        Returns None for dotted library references, whose shape is carried
        entirely by the $ref. Unknown plain tokens fall back to "string".
        """
        if not raml_type:
            return "string"
        clean = clean_type_token(raml_type)
        if clean in SCALAR_TYPES:
            return SCALAR_TYPES[clean]
        if "." in clean:
            return None
        return "string"

    def map_union_member(self, raml_type: str) -> str:
        """Map one member of a union to a JSON Schema type for a type array."""
        if clean_type_token(raml_type) in NULL_TYPES:
            return "null"
        mapped = self.map_type(raml_type)
        if clean_type_token(raml_type) in SCALAR_TYPES:
            return mapped
        # A referenced type is an enum (string) or a business object (object)
        ref = self.type_reference(raml_type)
        if ref and ref.startswith(ENUM_OUTPUT_DIR + "/"):
            return "string"
        return "object"

    def type_reference(self, raml_type: str | None) -> str | None:
        """
        Resolve a type token to an output-relative $ref path.

        Handles "!include path/to/file.raml" directives and "library.Type"
        tokens; any other non-scalar token is treated as a type of the same
        library. Scalars have no reference.
        """
        if not raml_type:
            return None
        clean = clean_type_token(raml_type)
        if clean in SCALAR_TYPES:
            return None

        if clean.startswith(INCLUDE_DIRECTIVE):
            include_path = clean[len(INCLUDE_DIRECTIVE) :].strip()
            file_name = posixpath.basename(include_path)
            if file_name.endswith(".raml"):
                file_name = file_name[: -len(".raml")]
            if self._is_enum_path(include_path):
                return self.enum_reference(file_name)
            return self.business_object_reference(file_name)

        type_name = clean
        library_name = None
        if "." in clean:
            library_name, type_name = clean.split(".", 1)
        if library_name and library_name.startswith("enum"):
            return self.enum_reference(type_name)
        return self.business_object_reference(type_name)

    def enum_reference(self, name: str) -> str:
        """$ref path of an enum schema."""
        return f"{ENUM_OUTPUT_DIR}/{enum_file_name(name, self.naming_convention)}"

    def business_object_reference(self, name: str) -> str:
        """$ref path of a business-object schema."""
        return f"./{business_object_file_name(name, self.naming_convention)}"

    @staticmethod
    def _is_enum_path(include_path: str) -> bool:
        parts = include_path.replace("\\", "/").split("/")
        return ENUMS_DIRECTORY in parts[:-1]

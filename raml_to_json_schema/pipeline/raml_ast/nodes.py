"""
Intermediate model produced by the RAML parser.

One IntermediateType per parsed type or enum. Inline enums declared inside a
property are lifted into their own top-level records while parsing, so nothing
in this model is nested.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class SourceFormat(str, Enum):
    """Layout of a RAML source file."""

    LIBRARY = "Library"  # named types under a types: section
    DATA_TYPE = "DataType"  # a single root type


class ParserState(Enum):
    """State of the line-oriented parser."""

    IDLE = "idle"
    IN_TYPES_LIST = "in_types_list"
    IN_TYPE = "in_type"
    IN_ENUM = "in_enum"
    IN_PROPERTIES = "in_properties"


@dataclass
class ItemsDetail:
    """Element type of an array property."""

    type: str | list[str] | None = None
    ref: str | None = None

    @property
    def is_union(self) -> bool:
        return isinstance(self.type, list)

    def to_dict(self) -> dict:
        return {"type": self.type, "$ref": self.ref}


@dataclass
class PropertyDetail:
    """Attributes of one property of an IntermediateType."""

    # Mapped type name, None when $ref drives emission, or a list for unions
    type: str | list[str] | None = "string"
    description: str = ""
    format: str | None = None
    items: ItemsDetail | None = None
    ref: str | None = None
    # Raw source type token
    original_type: str | None = None

    @property
    def is_union(self) -> bool:
        return isinstance(self.type, list)

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "description": self.description,
            "format": self.format,
            "items": self.items.to_dict() if self.items else None,
            "$ref": self.ref,
            "originalType": self.original_type,
        }


@dataclass
class IntermediateType:
    """A parsed type or enum, ready for emission."""

    name: str = ""
    properties: dict[str, PropertyDetail] = field(default_factory=dict)
    required: list[str] = field(default_factory=list)
    is_enum: bool = False
    enum_values: list[str] = field(default_factory=list)
    description: str = ""

    # Set for enums synthesized from a property's inline enumeration
    is_inline_enum: bool = False
    original_parent: str | None = None
    original_property: str | None = None

    def add_property(self, name: str, detail: PropertyDetail, optional: bool) -> None:
        """Register a property, keeping declaration order."""
        self.properties[name] = detail
        if not optional and name not in self.required:
            self.required.append(name)

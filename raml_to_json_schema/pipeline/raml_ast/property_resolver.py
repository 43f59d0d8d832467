"""
Property detail resolution shared by both parser variants.

Given the lines of a source file and the index just after a property
declaration, collects the property's description, type, inline enum, array
items and union members. Indentation is measured in raw leading-space
characters relative to the base indentation of the property declaration.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ...utils import to_pascal_case
from ..mapper.type_mapper import TypeMapper, infer_format
from ..report import (
    FormatInferenceRecord,
    InlineEnumExtraction,
    PropertyTransformation,
    UnionConversion,
)
from .nodes import IntermediateType, ItemsDetail, PropertyDetail

logger = logging.getLogger(__name__)

UNION_SEPARATOR = " | "
LIST_MARKER = "- "
COMMENT_MARKER = "#"


def indentation(line: str) -> int:
    """Number of leading whitespace characters."""
    return len(line) - len(line.lstrip())


def is_skippable(trimmed: str) -> bool:
    """Blank lines and comments never change parser state."""
    return not trimmed or trimmed.startswith(COMMENT_MARKER)


def list_item_value(trimmed: str) -> str:
    """Value of a "- value" entry with quotes removed."""
    return trimmed[len(LIST_MARKER) :].strip().replace('"', "").replace("'", "")


def marker_value(trimmed: str, marker: str) -> str:
    return trimmed[len(marker) :].strip()


def inline_enum_name(parent_type: str, property_name: str) -> str:
    """Name of the enum lifted out of a property: parent + property, PascalCase."""
    return f"{to_pascal_case(parent_type)}{to_pascal_case(property_name)}"


@dataclass
class PropertyContext:
    """Where a property is declared and how to map its types."""

    parent_type: str
    property_name: str
    mapper: TypeMapper
    is_optional: bool = False


@dataclass
class PropertyResolution:
    """Everything resolved for one property.

    The caller appends `inline_enum` to its list of lifted enums and the
    report records to its collector; this module holds no state.
    """

    detail: PropertyDetail
    inline_enum: IntermediateType | None = None
    union: UnionConversion | None = None
    format_inference: FormatInferenceRecord | None = None
    inline_enum_extraction: InlineEnumExtraction | None = None
    transformation: PropertyTransformation | None = None
    source_lines: list[str] = field(default_factory=list)


def resolve_property(
    lines: list[str],
    start_index: int,
    base_indent: int,
    context: PropertyContext,
) -> PropertyResolution:
    """
    Resolve the details of a property declared on line `start_index - 1`.

    Args:
        lines: All lines of the source file
        start_index: Index of the first line after the property declaration
        base_indent: Indentation of the property declaration (6 for Library
            files, 2 for DataType files)
        context: Parent type, property name and type mapper

    Returns:
        PropertyResolution with the detail and the report records
    """
    mapper = context.mapper
    detail = PropertyDetail(type="string")
    resolution = PropertyResolution(detail=detail)

    detail_indent = base_indent + 2
    nested_indent = base_indent + 4

    has_inline_enum = False
    enum_values: list[str] = []
    enum_start_line = -1
    declaration_index = start_index - 1
    if 0 <= declaration_index < len(lines):
        resolution.source_lines.append(lines[declaration_index].strip())

    for i in range(start_index, len(lines)):
        line = lines[i]
        trimmed = line.strip()
        if is_skippable(trimmed):
            continue
        indent = indentation(line)
        if indent <= base_indent:
            break

        resolution.source_lines.append(trimmed)

        if indent == detail_indent:
            if trimmed.startswith("description:"):
                detail.description = marker_value(trimmed, "description:")
            elif trimmed.startswith("type:"):
                _resolve_type(marker_value(trimmed, "type:"), i, context, resolution)
            elif trimmed == "enum:":
                has_inline_enum = True
                detail.type = "string"
                enum_start_line = i + 1
            elif trimmed.startswith("items:"):
                detail.items = _resolve_items(lines, i, trimmed, base_indent, mapper)
        elif has_inline_enum and indent == nested_indent and trimmed.startswith(LIST_MARKER):
            enum_values.append(list_item_value(trimmed))

    if detail.items is not None and detail.type != "array":
        logger.debug(
            "Dropping items of non-array property %s.%s (type %s)",
            context.parent_type,
            context.property_name,
            detail.type,
        )
        detail.items = None

    resolution.transformation = _build_transformation(detail, declaration_index, context, resolution.source_lines)

    if has_inline_enum and enum_values:
        _lift_inline_enum(enum_values, enum_start_line, context, resolution)

    logger.debug(
        "Resolved property %s.%s: type=%s $ref=%s format=%s",
        context.parent_type,
        context.property_name,
        detail.type,
        detail.ref,
        detail.format,
    )
    return resolution


def _resolve_type(type_value: str, line_index: int, context: PropertyContext, resolution: PropertyResolution) -> None:
    """Handle a "type:" line: union, reference or scalar."""
    detail = resolution.detail
    mapper = context.mapper
    detail.original_type = type_value

    if UNION_SEPARATOR in type_value:
        members = [member.strip() for member in type_value.split(UNION_SEPARATOR)]
        detail.type = [mapper.map_union_member(member) for member in members]
        detail.ref = None
        resolution.union = UnionConversion(
            parent_type=context.parent_type,
            property=context.property_name,
            original=type_value,
            converted=members,
            strategy="type-array",
            line_number=line_index + 1,
        )
        return

    detail.ref = mapper.type_reference(type_value)
    detail.type = None if detail.ref else mapper.map_type(type_value)

    inference = infer_format(type_value, context.property_name)
    if inference.format or inference.pattern_hint:
        detail.format = inference.format
        resolution.format_inference = FormatInferenceRecord(
            property=context.property_name,
            parent_type=context.parent_type,
            original_type=type_value,
            format=inference.format,
            reason=inference.reason,
            confidence=inference.confidence,
        )


def _resolve_items(lines: list[str], line_index: int, trimmed: str, base_indent: int, mapper: TypeMapper) -> ItemsDetail | None:
    """Resolve an "items:" line, either inline or as a nested block."""
    inline_value = marker_value(trimmed, "items:")
    if inline_value:
        return _items_detail(inline_value, mapper)

    for j in range(line_index + 1, len(lines)):
        item_line = lines[j]
        item_trimmed = item_line.strip()
        if is_skippable(item_trimmed):
            continue
        item_indent = indentation(item_line)
        if item_indent <= base_indent + 2:
            break
        if item_indent == base_indent + 4 and item_trimmed.startswith("type:"):
            return _items_detail(marker_value(item_trimmed, "type:"), mapper)
    return None


def _items_detail(item_type: str, mapper: TypeMapper) -> ItemsDetail:
    """Element type of an array: a union becomes a type array, anything else a type or $ref."""
    if UNION_SEPARATOR in item_type:
        return ItemsDetail(type=[mapper.map_union_member(member.strip()) for member in item_type.split(UNION_SEPARATOR)])
    return ItemsDetail(type=mapper.map_type(item_type), ref=mapper.type_reference(item_type))


def _build_transformation(
    detail: PropertyDetail,
    declaration_index: int,
    context: PropertyContext,
    source_lines: list[str],
) -> PropertyTransformation:
    transformation = PropertyTransformation(
        parent_type=context.parent_type,
        property_name=context.property_name,
        original_lines="\n".join(source_lines),
        original_type=detail.original_type,
        original_description=detail.description,
        is_optional=context.is_optional,
        line_number=declaration_index + 1,
        converted_type=detail.type,
        format=detail.format,
        ref=detail.ref,
        items=detail.items.to_dict() if detail.items else None,
    )
    if detail.format:
        transformation.format_reason = (
            f"Inferred from RAML type '{detail.original_type}' and property name '{context.property_name}'"
        )
    if detail.original_type is not None and detail.original_type != detail.type:
        transformation.type_reason = f"Mapped RAML type '{detail.original_type}' to JSON Schema type '{detail.type}'"
    return transformation


def _lift_inline_enum(
    enum_values: list[str],
    enum_start_line: int,
    context: PropertyContext,
    resolution: PropertyResolution,
) -> None:
    """Turn the collected inline enum into its own type and point the property at it."""
    enum_name = inline_enum_name(context.parent_type, context.property_name)
    enum_ref = context.mapper.enum_reference(enum_name)

    resolution.inline_enum = IntermediateType(
        name=enum_name,
        is_enum=True,
        enum_values=list(enum_values),
        description=f"Inline enum for {context.parent_type}.{context.property_name}",
        is_inline_enum=True,
        original_parent=context.parent_type,
        original_property=context.property_name,
    )

    detail = resolution.detail
    detail.ref = enum_ref
    detail.type = None
    if resolution.transformation is not None:
        resolution.transformation.ref = enum_ref
        resolution.transformation.converted_type = None
        resolution.transformation.note = f"Inline enum extracted to {enum_name}"

    resolution.inline_enum_extraction = InlineEnumExtraction(
        parent_type=context.parent_type,
        property=context.property_name,
        new_enum_name=enum_name,
        file=enum_ref,
        values=list(enum_values),
        line_range=(enum_start_line, enum_start_line + len(enum_values)),
    )

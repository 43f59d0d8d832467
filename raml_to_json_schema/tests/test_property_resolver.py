import pytest

from raml_to_json_schema.pipeline.config import NamingConvention
from raml_to_json_schema.pipeline.emitter.schema_emitter import SchemaEmitter
from raml_to_json_schema.pipeline.mapper.type_mapper import TypeMapper
from raml_to_json_schema.pipeline.raml_ast.property_resolver import (
    PropertyContext,
    indentation,
    inline_enum_name,
    list_item_value,
    resolve_property,
)


def resolve(block, parent="Item", prop="value", optional=False):
    """Resolve a property whose declaration is the first line of `block` (indent 2)."""
    lines = block.strip("\n").split("\n")
    context = PropertyContext(
        parent_type=parent,
        property_name=prop,
        mapper=TypeMapper(NamingConvention.PASCAL_CASE),
        is_optional=optional,
    )
    return resolve_property(lines, 1, 2, context)


def test_union_becomes_type_array():
    """Test a union type is emitted as a type array"""
    resolution = resolve(
        """
  value:
    type: string | number
"""
    )
    assert resolution.detail.type == ["string", "number"]
    assert resolution.detail.ref is None
    assert resolution.union.parent_type == "Item"
    assert resolution.union.property == "value"
    assert resolution.union.original == "string | number"
    assert resolution.union.converted == ["string", "number"]
    assert resolution.union.strategy == "type-array"
    assert resolution.union.line_number == 2

    schema = SchemaEmitter().emit_property("value", resolution.detail)
    assert schema == {"type": ["string", "number"]}


def test_union_with_any_is_unconstrained():
    """Test a union containing any is emitted as an always-valid schema"""
    resolution = resolve(
        """
  value:
    type: string | any
"""
    )
    assert resolution.detail.type == ["string", "any"]
    assert SchemaEmitter().emit_property("value", resolution.detail) == {}


def test_inline_enum_is_lifted():
    """Test an inline enum is lifted and referenced"""
    resolution = resolve(
        """
  status:
    type: string
    enum:
      - OPEN
      - "CLOSED"
""",
        parent="Order",
        prop="status",
        optional=True,
    )
    enum = resolution.inline_enum
    assert enum.name == "OrderStatus"
    assert enum.enum_values == ["OPEN", "CLOSED"]
    assert enum.description == "Inline enum for Order.status"
    assert resolution.detail.ref == "./common/enums/OrderStatusEnum.schema.json"
    assert resolution.detail.type is None

    extraction = resolution.inline_enum_extraction
    assert extraction.new_enum_name == "OrderStatus"
    assert extraction.values == ["OPEN", "CLOSED"]
    assert extraction.line_range == (3, 5)
    assert resolution.transformation.is_optional
    assert resolution.transformation.note == "Inline enum extracted to OrderStatus"


def test_enum_without_values_stays_string():
    """Test an empty inline enum is not lifted"""
    resolution = resolve(
        """
  status:
    enum:
"""
    )
    assert resolution.inline_enum is None
    assert resolution.detail.type == "string"


@pytest.mark.parametrize(
    "block,expected_type,expected_ref",
    [
        ("  tags:\n    type: array\n    items: string\n", "string", None),
        ("  tags:\n    type: array\n    items:\n      type: integer\n", "integer", None),
        ("  lines:\n    type: array\n    items: OrderLine\n", "string", "./OrderLine.schema.json"),
        ("  lines:\n    type: array\n    items:\n      type: OrderLine\n", "string", "./OrderLine.schema.json"),
        ("  lines:\n    items: string\n    type: array\n", "string", None),
    ],
)
def test_items_layouts(block, expected_type, expected_ref):
    """Test inline and nested items declarations"""
    detail = resolve(block).detail
    assert detail.type == "array"
    assert detail.items.type == expected_type
    assert detail.items.ref == expected_ref


@pytest.mark.parametrize(
    "block",
    [
        "  values:\n    type: array\n    items: string | number\n",
        "  values:\n    type: array\n    items:\n      type: string | number\n",
    ],
)
def test_union_items_become_type_array(block):
    """Test union items are emitted as a type array, not a $ref"""
    detail = resolve(block).detail
    assert detail.items.type == ["string", "number"]
    assert detail.items.ref is None
    schema = SchemaEmitter().emit_property("values", detail)
    assert schema == {"type": "array", "items": {"type": ["string", "number"]}}


def test_union_items_with_any_are_unconstrained():
    """Test union items containing any are emitted as an empty schema"""
    detail = resolve("  values:\n    type: array\n    items: integer | any\n").detail
    assert SchemaEmitter().emit_property("values", detail) == {"type": "array", "items": {}}


def test_items_dropped_for_non_array():
    """Test items are ignored on non-array properties"""
    detail = resolve("  name:\n    type: string\n    items: string\n").detail
    assert detail.type == "string"
    assert detail.items is None


def test_scan_stops_at_next_property_and_skips_comments():
    """Test the property scan boundaries"""
    block = """
  count:
    # number of things

    type: integer
    description: How many
  other:
    type: boolean
"""
    resolution = resolve(block, prop="count")
    assert resolution.detail.type == "integer"
    assert resolution.detail.description == "How many"
    assert resolution.source_lines == ["count:", "type: integer", "description: How many"]


def test_reference_type_has_no_json_type():
    """Test reference types carry only a $ref"""
    detail = resolve("  color:\n    type: enums.Color\n").detail
    assert detail.type is None
    assert detail.ref == "./common/enums/ColorEnum.schema.json"
    assert detail.original_type == "enums.Color"


def test_missing_type_defaults_to_string():
    """Test properties without a type default to string"""
    detail = resolve("  label:\n    description: Free text\n").detail
    assert detail.type == "string"
    assert detail.ref is None


def test_format_inference_is_recorded():
    """Test date-time inference and its report records"""
    resolution = resolve("  createdAt:\n    type: datetime\n", prop="createdAt")
    assert resolution.detail.format == "date-time"
    assert resolution.format_inference.confidence == "high"
    assert resolution.transformation.format_reason is not None
    assert resolution.transformation.type_reason == "Mapped RAML type 'datetime' to JSON Schema type 'string'"


def test_phone_records_pattern_hint_without_format():
    """Test phone properties record a hint but no format"""
    resolution = resolve("  phone:\n    type: string\n", prop="phone")
    assert resolution.detail.format is None
    assert resolution.format_inference.format is None
    assert resolution.format_inference.confidence == "low"


def test_plain_string_has_no_format_record():
    """Test plain strings record no format inference"""
    resolution = resolve("  name:\n    type: string\n", prop="name")
    assert resolution.format_inference is None


def test_helpers():
    """Test line helpers and inline enum naming"""
    assert indentation("    type: string") == 4
    assert list_item_value("- 'BLUE'") == "BLUE"
    assert inline_enum_name("order_line", "status") == "OrderLineStatus"

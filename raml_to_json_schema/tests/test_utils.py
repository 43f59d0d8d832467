import pytest

from raml_to_json_schema.utils import NAMING_CONVENTIONS, apply_naming_convention, to_pascal_case


@pytest.mark.parametrize(
    "name,convention,expected",
    [
        ("CustomerAddress", "kebab-case", "customer-address"),
        ("customer_address", "kebab-case", "customer-address"),
        ("customer-address", "camelCase", "customerAddress"),
        ("CustomerAddress", "camelCase", "customerAddress"),
        ("customer_address", "PascalCase", "CustomerAddress"),
        ("order-line", "PascalCase", "OrderLine"),
        ("CustomerAddress", "snake_case", "customer_address"),
        ("order-line", "snake_case", "order_line"),
    ],
)
def test_apply_naming_convention(name, convention, expected):
    """Test each naming convention"""
    assert apply_naming_convention(name, convention) == expected


@pytest.mark.parametrize("convention", NAMING_CONVENTIONS)
@pytest.mark.parametrize("name", ["CustomerAddress", "order-line", "order_status", "Color", "postalCode2Line"])
def test_naming_convention_is_idempotent(name, convention):
    """Test applying a convention twice changes nothing"""
    once = apply_naming_convention(name, convention)
    assert apply_naming_convention(once, convention) == once


def test_unknown_convention_leaves_name_unchanged():
    """Test unknown conventions are a no-op"""
    assert apply_naming_convention("CustomerAddress", "SCREAMING") == "CustomerAddress"


def test_naming_convention_accepts_enum_members():
    """Test NamingConvention members are accepted"""
    from raml_to_json_schema.pipeline.config import NamingConvention

    assert apply_naming_convention("OrderLine", NamingConvention.KEBAB_CASE) == "order-line"


@pytest.mark.parametrize(
    "text,expected",
    [("order-line", "OrderLine"), ("status", "Status"), ("order_status", "OrderStatus"), ("Order", "Order"), ("", "")],
)
def test_to_pascal_case(text, expected):
    """Test PascalCase folding of separators"""
    assert to_pascal_case(text) == expected

"""
Utility functions for the RAML to JSON Schema converter.
"""

import re

# Boundary between a lowercase letter or digit and a following uppercase letter
_CASE_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")

# A run of separators, optionally followed by the character to capitalize
_SEPARATOR_RUN = re.compile(r"[-_\s]+(.)?")

_DASH_PATTERN = re.compile(r"[_\s]+")
_UNDERSCORE_PATTERN = re.compile(r"[-\s]+")
_PASCAL_SEGMENT = re.compile(r"[_-]([a-z])")

NAMING_CONVENTIONS = ("kebab-case", "camelCase", "PascalCase", "snake_case")


def _upper_next(match: re.Match) -> str:
    char = match.group(1)
    return char.upper() if char else ""


def _to_kebab_case(name: str) -> str:
    return _DASH_PATTERN.sub("-", _CASE_BOUNDARY.sub(r"\1-\2", name).lower())


def _to_snake_case(name: str) -> str:
    return _UNDERSCORE_PATTERN.sub("_", _CASE_BOUNDARY.sub(r"\1_\2", name).lower())


def _to_camel_case(name: str) -> str:
    joined = _SEPARATOR_RUN.sub(_upper_next, name)
    return joined[:1].lower() + joined[1:]


def _to_upper_camel_case(name: str) -> str:
    joined = _SEPARATOR_RUN.sub(_upper_next, name)
    return joined[:1].upper() + joined[1:]


def apply_naming_convention(name: str, convention: str) -> str:
    """Re-case a type or file name according to a naming convention.

    Existing camelCase/PascalCase boundaries are split before re-casing, so
    applying the same convention twice gives the same result as applying it once.

    Examples:
        ("CustomerAddress", "kebab-case") -> "customer-address"
        ("customer-address", "camelCase") -> "customerAddress"
        ("customer_address", "PascalCase") -> "CustomerAddress"
        ("CustomerAddress", "snake_case") -> "customer_address"

    Args:
        name: The name to convert
        convention: One of "kebab-case", "camelCase", "PascalCase", "snake_case"

    Returns:
        The converted name (unchanged for an unknown convention)
    """
    convention = getattr(convention, "value", convention)
    if convention == "kebab-case":
        return _to_kebab_case(name)
    if convention == "camelCase":
        return _to_camel_case(name)
    if convention == "PascalCase":
        return _to_upper_camel_case(name)
    if convention == "snake_case":
        return _to_snake_case(name)
    return name


def to_pascal_case(text: str) -> str:
    """Upper-case the first letter and fold "_x"/"-x" into "X".

    Used for type names derived from file names and for synthesized inline enum
    names, e.g. "order-line" -> "OrderLine", "status" -> "Status".
    """
    if not text:
        return ""
    return text[0].upper() + _PASCAL_SEGMENT.sub(lambda m: m.group(1).upper(), text[1:])

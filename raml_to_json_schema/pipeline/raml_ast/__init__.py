"""
RAML AST module.

Contains the intermediate model, format detection and the line-oriented parser.
"""

from __future__ import annotations

from .detector import detect_format, parse_header
from .nodes import IntermediateType, ItemsDetail, ParserState, PropertyDetail, SourceFormat
from .parser import ParseResult, RamlParser
from .property_resolver import PropertyContext, PropertyResolution, resolve_property

__all__ = [
    "IntermediateType",
    "PropertyDetail",
    "ItemsDetail",
    "SourceFormat",
    "ParserState",
    "detect_format",
    "parse_header",
    "RamlParser",
    "ParseResult",
    "PropertyContext",
    "PropertyResolution",
    "resolve_property",
]

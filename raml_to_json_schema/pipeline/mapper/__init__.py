"""
Mapper module.

Maps RAML type tokens to JSON Schema types, $ref paths and formats.
"""

from __future__ import annotations

from .type_mapper import SCALAR_TYPES, FormatInference, TypeMapper, infer_format

__all__ = [
    "SCALAR_TYPES",
    "FormatInference",
    "TypeMapper",
    "infer_format",
]

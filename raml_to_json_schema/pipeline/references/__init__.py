"""
References module.

Loads schema documents and resolves $ref pointers into a reference graph.
"""

from __future__ import annotations

from .loader import LoadedSchema, SchemaReference, extract_references, load_schemas
from .reference_resolver import ReferenceIndex, ReferenceResolver, ResolutionStats, resolve_reference

__all__ = [
    "LoadedSchema",
    "SchemaReference",
    "extract_references",
    "load_schemas",
    "ReferenceIndex",
    "ReferenceResolver",
    "ResolutionStats",
    "resolve_reference",
]

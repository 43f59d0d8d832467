"""
Emitter module.

Renders intermediate types and scaffold documents as JSON Schema.
"""

from __future__ import annotations

from .schema_emitter import SchemaEmitter

__all__ = [
    "SchemaEmitter",
]

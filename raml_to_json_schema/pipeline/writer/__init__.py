"""
Writer module.

Atomic writes of generated schema documents.
"""

from __future__ import annotations

from .atomic_writer import AtomicWriter, serialize_schema

__all__ = [
    "AtomicWriter",
    "serialize_schema",
]

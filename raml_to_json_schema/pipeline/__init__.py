"""
Pipeline - RAML to JSON Schema conversion.

This module provides a multi-phase architecture for turning RAML type
definitions into JSON Schema documents:

1. Phase 1 (Parser): Parse RAML text into IntermediateType records
2. Phase 2 (Emitter): Map types/references and render JSON Schema
3. Phase 3 (Converter): Merge files, write the output tree and reports
4. Phase 4 (References): Resolve $ref pointers across loaded schemas
"""

from __future__ import annotations

from .config import ConverterConfig, NamingConvention, OutputConfig, OutputMode
from .converter import ConversionRun, ConversionState, FileConversionResult, RamlConverter
from .errors import ConversionError, RamlParseError, SchemaWriteError
from .references import LoadedSchema, ReferenceResolver, load_schemas
from .writer import AtomicWriter

__all__ = [
    "RamlConverter",
    "ConversionRun",
    "ConversionState",
    "FileConversionResult",
    "ConverterConfig",
    "NamingConvention",
    "OutputConfig",
    "OutputMode",
    "ConversionError",
    "RamlParseError",
    "SchemaWriteError",
    "LoadedSchema",
    "ReferenceResolver",
    "load_schemas",
    "AtomicWriter",
]

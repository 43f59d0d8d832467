"""RAML to JSON Schema Converter

A Python package for converting RAML type libraries into JSON Schema
documents, and for resolving $ref pointers across a set of schema files
into a reference graph.
"""

__version__ = "1.0.0"

from .pipeline import (
    AtomicWriter,
    ConversionRun,
    ConverterConfig,
    LoadedSchema,
    NamingConvention,
    OutputConfig,
    OutputMode,
    RamlConverter,
    ReferenceResolver,
    load_schemas,
)

__all__ = [
    "RamlConverter",
    "ConversionRun",
    "ConverterConfig",
    "NamingConvention",
    "OutputConfig",
    "OutputMode",
    "LoadedSchema",
    "ReferenceResolver",
    "load_schemas",
    "AtomicWriter",
]

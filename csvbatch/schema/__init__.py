#!filepath: csvbatch/schema/__init__.py
from .type_description import (
    Category,
    TypeDescription,
    PrimitiveType,
    StructType,
    ListType,
    MapType,
    UnionType,
    primitive,
    decimal,
    struct,
    validate_flattenable,
)
from .parser import parse_schema

__all__ = [
    "Category",
    "TypeDescription",
    "PrimitiveType",
    "StructType",
    "ListType",
    "MapType",
    "UnionType",
    "primitive",
    "decimal",
    "struct",
    "validate_flattenable",
    "parse_schema",
]

#!filepath: csvbatch/engines/__init__.py
from .field_splitter import FieldSplitter
from .null_recognizer import NullRecognizer
from .type_coercer import TypeCoercer
from .schema_walker import SchemaWalker, FieldCursor, build_converter
from .writers import ParquetFileWriter

__all__ = [
    "FieldSplitter",
    "NullRecognizer",
    "TypeCoercer",
    "SchemaWalker",
    "FieldCursor",
    "build_converter",
    "ParquetFileWriter",
]

#!filepath: csvbatch/__init__.py

from .utils.logger import Logging, logs, init_logging
from .utils.errors import (
    CsvBatchError,
    UserInputError,
    MalformedRecord,
    ConversionError,
    UnsupportedSchema,
    SchemaParseError,
)
from .schema import parse_schema
from .batch import VectorizedRowBatch, create_row_batch
from .config import AppConfig, ReaderConfig, ErrorPolicy
from .io import TextLineSource, open_line_source
from .reader import CsvReader

__version__ = "0.1.0"

__all__ = [
    "logs", "Logging", "init_logging",
    "CsvBatchError", "UserInputError", "MalformedRecord",
    "ConversionError", "UnsupportedSchema", "SchemaParseError",
    "parse_schema",
    "VectorizedRowBatch", "create_row_batch",
    "AppConfig", "ReaderConfig", "ErrorPolicy",
    "TextLineSource", "open_line_source",
    "CsvReader",
    "__version__",
]

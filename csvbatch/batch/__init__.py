#!filepath: csvbatch/batch/__init__.py
from .column_vector import (
    ColumnVector,
    LongColumnVector,
    DoubleColumnVector,
    DecimalColumnVector,
    DateColumnVector,
    TimestampColumnVector,
    BytesColumnVector,
    StructColumnVector,
    ListColumnVector,
    MapColumnVector,
)
from .row_batch import VectorizedRowBatch, create_row_batch, create_column_vector, DEFAULT_BATCH_SIZE

__all__ = [
    "ColumnVector",
    "LongColumnVector",
    "DoubleColumnVector",
    "DecimalColumnVector",
    "DateColumnVector",
    "TimestampColumnVector",
    "BytesColumnVector",
    "StructColumnVector",
    "ListColumnVector",
    "MapColumnVector",
    "VectorizedRowBatch",
    "create_row_batch",
    "create_column_vector",
    "DEFAULT_BATCH_SIZE",
]

#!filepath: csvbatch/batch/row_batch.py
from __future__ import annotations

from typing import Any, Dict, List

import pyarrow as pa

from csvbatch.batch.column_vector import (
    BytesColumnVector,
    ColumnVector,
    DateColumnVector,
    DecimalColumnVector,
    DoubleColumnVector,
    ListColumnVector,
    LongColumnVector,
    MapColumnVector,
    StructColumnVector,
    TimestampColumnVector,
)
from csvbatch.schema.type_description import (
    Category,
    FLOAT_CATEGORIES,
    INTEGER_CATEGORIES,
    ListType,
    MapType,
    PrimitiveType,
    StructType,
    TypeDescription,
    validate_flattenable,
)
from csvbatch.utils.errors import UnsupportedSchema

DEFAULT_BATCH_SIZE = 1024


class VectorizedRowBatch:
    """
    一个 batch = 顶层 struct 的每个字段一列。

    - capacity : 固定容量，构造后不变
    - size     : 本次填充实际写入的行数
    - cols     : 由 batch 持有；reader 只在 next_batch() 期间借用
    """

    def __init__(self, schema: StructType, cols: List[ColumnVector], capacity: int):
        self.schema = schema
        self.cols = cols
        self.capacity = capacity
        self.size = 0

    @property
    def num_cols(self) -> int:
        return len(self.cols)

    def column(self, name: str) -> ColumnVector:
        return self.cols[self.schema.field_names.index(name)]

    def reset(self) -> None:
        self.size = 0
        for col in self.cols:
            col.reset()

    def to_record_batch(self) -> pa.RecordBatch:
        arrays = [col.to_arrow(self.size) for col in self.cols]
        return pa.RecordBatch.from_arrays(arrays, schema=self.schema.to_arrow_schema())

    def to_pylist(self) -> List[Dict[str, Any]]:
        return self.to_record_batch().to_pylist()

    def __repr__(self) -> str:
        return f"VectorizedRowBatch(size={self.size}, capacity={self.capacity}, schema={self.schema})"


# ============================================================
# batch 工厂
# ============================================================
def create_column_vector(node: TypeDescription, capacity: int) -> ColumnVector:
    """按 schema 节点递归分配列缓冲区。"""

    if isinstance(node, PrimitiveType):
        category = node.category
        arrow_type = node.to_arrow_type()

        if category in INTEGER_CATEGORIES:
            return LongColumnVector(capacity, arrow_type)
        if category in FLOAT_CATEGORIES:
            return DoubleColumnVector(capacity, arrow_type)
        if category == Category.DECIMAL:
            return DecimalColumnVector(capacity, node.precision, node.scale)
        if category == Category.DATE:
            return DateColumnVector(capacity)
        if category == Category.TIMESTAMP:
            return TimestampColumnVector(capacity)
        return BytesColumnVector(capacity, arrow_type)

    if isinstance(node, StructType):
        return StructColumnVector(
            capacity,
            node.field_names,
            [create_column_vector(child, capacity) for child in node.children],
            node.to_arrow_type(),
        )

    if isinstance(node, ListType):
        return ListColumnVector(
            capacity,
            node.arity,
            create_column_vector(node.element, capacity * node.arity),
            node.to_arrow_type(),
        )

    if isinstance(node, MapType):
        return MapColumnVector(
            capacity,
            node.arity,
            create_column_vector(node.key, capacity * node.arity),
            create_column_vector(node.value, capacity * node.arity),
            node.to_arrow_type(),
        )

    raise UnsupportedSchema(str(node), f"no column vector for {node.category.value}")


def create_row_batch(schema: TypeDescription, capacity: int = DEFAULT_BATCH_SIZE) -> VectorizedRowBatch:
    if not isinstance(schema, StructType):
        raise UnsupportedSchema("<root>", f"top-level type must be a struct, got {schema}")
    if capacity <= 0:
        raise ValueError(f"batch capacity must be positive, got {capacity}")

    validate_flattenable(schema)
    cols = [create_column_vector(child, capacity) for child in schema.children]
    return VectorizedRowBatch(schema, cols, capacity)

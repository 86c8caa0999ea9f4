#!filepath: csvbatch/batch/column_vector.py
from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List, Optional

import numpy as np
import pyarrow as pa


class ColumnVector(ABC):
    """
    列缓冲区基类（固定容量，batch 间复用）：

    - is_null[row]  : 该行是否为 null
    - no_nulls      : 本次填充中是否一个 null 都没有
    - reset()       : 只清 validity，不重新分配存储
    - to_arrow()    : 导出副本，不与下一次填充共享内存
    """

    def __init__(self, capacity: int, arrow_type: pa.DataType):
        self.capacity = capacity
        self.arrow_type = arrow_type
        self.is_null = np.zeros(capacity, dtype=bool)
        self.no_nulls = True

    def reset(self) -> None:
        self.is_null[:] = False
        self.no_nulls = True

    def set_null(self, row: int) -> None:
        self.is_null[row] = True
        self.no_nulls = False

    def set_valid(self, row: int) -> None:
        self.is_null[row] = False

    def set_value(self, row: int, value) -> None:
        self.vector[row] = value
        self.is_null[row] = False

    def discard_row(self, row: int) -> None:
        """
        丢弃最后写入的一行（行级 skip 时用）。
        行是按顺序写入的，所以 no_nulls 只需看 row 之前的部分。
        """
        self.is_null[row] = False
        self.no_nulls = not bool(self.is_null[:row].any())

    def _mask(self, size: int) -> np.ndarray:
        return self.is_null[:size].copy()

    @abstractmethod
    def to_arrow(self, size: int) -> pa.Array:
        raise NotImplementedError


# ============================================================
# 定长数值列
# ============================================================
class LongColumnVector(ColumnVector):
    """boolean / tinyint / smallint / int / bigint，boolean 存 0/1。"""

    def __init__(self, capacity: int, arrow_type: pa.DataType = pa.int64()):
        super().__init__(capacity, arrow_type)
        dtype = np.int8 if pa.types.is_boolean(arrow_type) else arrow_type.to_pandas_dtype()
        self.vector = np.zeros(capacity, dtype=dtype)

    def to_arrow(self, size: int) -> pa.Array:
        values = self.vector[:size].copy()
        if pa.types.is_boolean(self.arrow_type):
            values = values.astype(bool)
        return pa.array(values, type=self.arrow_type, mask=self._mask(size))


class DoubleColumnVector(ColumnVector):
    """float / double。"""

    def __init__(self, capacity: int, arrow_type: pa.DataType = pa.float64()):
        super().__init__(capacity, arrow_type)
        self.vector = np.zeros(capacity, dtype=arrow_type.to_pandas_dtype())

    def to_arrow(self, size: int) -> pa.Array:
        return pa.array(self.vector[:size].copy(), type=self.arrow_type, mask=self._mask(size))


class DateColumnVector(ColumnVector):
    """自 1970-01-01 起的天数（int32）。"""

    def __init__(self, capacity: int):
        super().__init__(capacity, pa.date32())
        self.vector = np.zeros(capacity, dtype=np.int32)

    def to_arrow(self, size: int) -> pa.Array:
        days = self.vector[:size].astype("datetime64[D]")
        return pa.array(days, type=pa.date32(), mask=self._mask(size))


class TimestampColumnVector(ColumnVector):
    """自 epoch 起的纳秒数（int64，不带时区）。"""

    def __init__(self, capacity: int):
        super().__init__(capacity, pa.timestamp("ns"))
        self.vector = np.zeros(capacity, dtype=np.int64)

    def to_arrow(self, size: int) -> pa.Array:
        nanos = self.vector[:size].copy().view("datetime64[ns]")
        return pa.array(nanos, type=pa.timestamp("ns"), mask=self._mask(size))


class DecimalColumnVector(ColumnVector):
    """
    定点小数列：
    - 每个 slot 保存 Decimal，保留输入文本的字面 scale（"1" → Decimal("1")）
    - format(row, scale) 按固定 scale 输出（"1.01"）
    """

    def __init__(self, capacity: int, precision: int, scale: int):
        super().__init__(capacity, pa.decimal128(precision, scale))
        self.precision = precision
        self.scale = scale
        self.vector: List[Optional[Decimal]] = [None] * capacity

    def format(self, row: int, scale: Optional[int] = None) -> str:
        scale = self.scale if scale is None else scale
        return str(self.vector[row].quantize(Decimal((0, (1,), -scale))))

    def to_string(self, row: int) -> str:
        return str(self.vector[row])

    def to_arrow(self, size: int) -> pa.Array:
        values = [
            None if self.is_null[i] else self.vector[i]
            for i in range(size)
        ]
        return pa.array(values, type=self.arrow_type)


class BytesColumnVector(ColumnVector):
    """
    字节串列：
    - 所有值追加到同一个 bytearray（arena）
    - start[row] / length[row] 指向 arena 内的位置
    - reset() 清空 arena 内容，但不换对象
    """

    def __init__(self, capacity: int, arrow_type: pa.DataType = pa.string()):
        super().__init__(capacity, arrow_type)
        self.buffer = bytearray()
        self.start = np.zeros(capacity, dtype=np.int64)
        self.length = np.zeros(capacity, dtype=np.int64)

    def reset(self) -> None:
        super().reset()
        del self.buffer[:]
        self.start[:] = 0
        self.length[:] = 0

    def set_val(self, row: int, data: bytes) -> None:
        self.start[row] = len(self.buffer)
        self.length[row] = len(data)
        self.buffer.extend(data)

    def set_value(self, row: int, value: bytes) -> None:
        self.set_val(row, value)
        self.is_null[row] = False

    def discard_row(self, row: int) -> None:
        if not self.is_null[row] and self.length[row] and self.start[row] + self.length[row] == len(self.buffer):
            del self.buffer[int(self.start[row]):]
        self.length[row] = 0
        super().discard_row(row)

    def get_bytes(self, row: int) -> bytes:
        begin = int(self.start[row])
        return bytes(self.buffer[begin:begin + int(self.length[row])])

    def to_string(self, row: int) -> str:
        return self.get_bytes(row).decode("utf-8")

    def to_arrow(self, size: int) -> pa.Array:
        if pa.types.is_binary(self.arrow_type):
            values = [None if self.is_null[i] else self.get_bytes(i) for i in range(size)]
        else:
            values = [None if self.is_null[i] else self.to_string(i) for i in range(size)]
        return pa.array(values, type=self.arrow_type)


# ============================================================
# 复合列
# ============================================================
class StructColumnVector(ColumnVector):

    def __init__(
        self,
        capacity: int,
        names: List[str],
        fields: List[ColumnVector],
        arrow_type: pa.DataType,
    ):
        super().__init__(capacity, arrow_type)
        self.names = names
        self.fields = fields

    def reset(self) -> None:
        super().reset()
        for child in self.fields:
            child.reset()

    def discard_row(self, row: int) -> None:
        for child in self.fields:
            child.discard_row(row)
        super().discard_row(row)

    def to_arrow(self, size: int) -> pa.Array:
        arrays = [child.to_arrow(size) for child in self.fields]
        return pa.StructArray.from_arrays(
            arrays,
            fields=list(self.arrow_type),
            mask=pa.array(self._mask(size), type=pa.bool_()),
        )


class _FixedArityVector(ColumnVector):
    """
    固定元素个数的 list / map：
    第 row 行的元素位于子列的 [row * arity, (row + 1) * arity)。
    """

    def __init__(self, capacity: int, arity: int, arrow_type: pa.DataType):
        super().__init__(capacity, arrow_type)
        self.arity = arity

    @property
    def children(self) -> List[ColumnVector]:
        raise NotImplementedError

    def reset(self) -> None:
        super().reset()
        for child in self.children:
            child.reset()

    def discard_row(self, row: int) -> None:
        for child in self.children:
            for i in range(self.arity - 1, -1, -1):
                child.discard_row(row * self.arity + i)
        super().discard_row(row)


class ListColumnVector(_FixedArityVector):

    def __init__(self, capacity: int, arity: int, child: ColumnVector, arrow_type: pa.DataType):
        super().__init__(capacity, arity, arrow_type)
        self.child = child

    @property
    def children(self) -> List[ColumnVector]:
        return [self.child]

    def _offsets_and_indices(self, size: int):
        """
        null 行不占元素，offset 置 None；
        arrow 会用后一个有效 offset 填补，所以相邻行的区间不受影响。
        """
        offsets: List[Optional[int]] = []
        indices: List[int] = []
        pos = 0
        for row in range(size):
            if self.is_null[row]:
                offsets.append(None)
                continue
            offsets.append(pos)
            indices.extend(range(row * self.arity, (row + 1) * self.arity))
            pos += self.arity
        offsets.append(pos)
        return pa.array(offsets, type=pa.int32()), pa.array(indices, type=pa.int64())

    def to_arrow(self, size: int) -> pa.Array:
        offsets, indices = self._offsets_and_indices(size)
        values = self.child.to_arrow(size * self.arity).take(indices)
        return pa.ListArray.from_arrays(offsets, values)


class MapColumnVector(_FixedArityVector):

    def __init__(
        self,
        capacity: int,
        arity: int,
        keys: ColumnVector,
        values: ColumnVector,
        arrow_type: pa.DataType,
    ):
        super().__init__(capacity, arity, arrow_type)
        self.keys = keys
        self.values = values

    @property
    def children(self) -> List[ColumnVector]:
        return [self.keys, self.values]

    def to_arrow(self, size: int) -> pa.Array:
        keys = self.keys.to_arrow(size * self.arity).to_pylist()
        items = self.values.to_arrow(size * self.arity).to_pylist()

        rows = []
        for row in range(size):
            if self.is_null[row]:
                rows.append(None)
                continue
            base = row * self.arity
            rows.append(list(zip(keys[base:base + self.arity], items[base:base + self.arity])))
        return pa.array(rows, type=self.arrow_type)

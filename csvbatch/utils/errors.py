#!filepath: csvbatch/utils/errors.py
from __future__ import annotations

from typing import Optional


class CsvBatchError(RuntimeError):
    """csvbatch 所有致命错误的基类。"""


class UserInputError(CsvBatchError):
    """
    Raised for invalid user-provided config (delimiter, batch size, etc).
    Should NOT print traceback.
    """


class MalformedRecord(CsvBatchError):
    """
    一条记录的字段数 != schema 的叶子数。
    row 为绝对行号（跨 batch，从 0 开始，不含 header）。
    """

    def __init__(self, row: int, expected: int, actual: int, record: str = ""):
        self.row = row
        self.expected = expected
        self.actual = actual
        self.record = record
        super().__init__(
            f"Malformed record at row {row}: expected {expected} fields, "
            f"got {actual}: {record!r}"
        )


class ConversionError(CsvBatchError):
    """
    非 null 字段无法转换为目标类型。
    row / column 由 SchemaWalker 在写入时补全。
    """

    def __init__(
        self,
        value: str,
        kind: str,
        reason: str = "",
        row: Optional[int] = None,
        column: Optional[str] = None,
    ):
        self.value = value
        self.kind = kind
        self.reason = reason
        self.row = row
        self.column = column
        super().__init__(self._render())

    def locate(self, row: int, column: str) -> "ConversionError":
        self.row = row
        self.column = column
        self.args = (self._render(),)
        return self

    def _render(self) -> str:
        where = ""
        if self.row is not None:
            where = f" at row {self.row}"
        if self.column is not None:
            where += f", column '{self.column}'"
        msg = f"Cannot convert {self.value!r} to {self.kind}{where}"
        if self.reason:
            msg += f" ({self.reason})"
        return msg


class UnsupportedSchema(CsvBatchError):
    """schema 中存在无法展平成固定字段数的节点（构造期错误）。"""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Unsupported schema at '{path}': {reason}")


class SchemaParseError(CsvBatchError):
    """schema 文本无法解析。"""

    def __init__(self, text: str, pos: int, reason: str):
        self.text = text
        self.pos = pos
        self.reason = reason
        super().__init__(f"{reason} at position {pos} in {text!r}")

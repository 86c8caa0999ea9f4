#!filepath: csvbatch/engines/type_coercer.py
from __future__ import annotations

import math
import re
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Context, Decimal, InvalidOperation
from typing import Any, Callable, Dict, Optional

import numpy as np

from csvbatch.schema.type_description import Category, MAX_DECIMAL_PRECISION, PrimitiveType
from csvbatch.utils.errors import ConversionError

# ============================
# 文本格式（fullmatch，不去空白）
# ============================
_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(
    r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|[+-]?Infinity|NaN"
)
_DECIMAL_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_DATE_RE = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})")
_TIMESTAMP_RE = re.compile(
    r"([0-9]{4})-([0-9]{2})-([0-9]{2})[ T]([0-9]{2}):([0-9]{2}):([0-9]{2})(?:\.([0-9]{1,9}))?"
)

_INT_RANGES = {
    Category.BYTE: (-(1 << 7), (1 << 7) - 1),
    Category.SHORT: (-(1 << 15), (1 << 15) - 1),
    Category.INT: (-(1 << 31), (1 << 31) - 1),
    Category.LONG: (-(1 << 63), (1 << 63) - 1),
}
_FLOAT32_MAX = float(np.finfo(np.float32).max)

_EPOCH_DATE = date(1970, 1, 1)
_EPOCH_DT = datetime(1970, 1, 1)
_NANOS_PER_SECOND = 1_000_000_000
_INT64_MIN, _INT64_MAX = _INT_RANGES[Category.LONG]
_DECIMAL_CONTEXT = Context(prec=2 * MAX_DECIMAL_PRECISION)


class TypeCoercer:
    """
    文本 → 类型值（纯函数，不碰列缓冲区）：

    - 整数      : 十进制，带符号，不去空白，溢出报错
    - 浮点      : 十进制 / 科学计数法，另接受 NaN / Infinity
    - decimal   : 保留字面 scale；超过声明 scale 时 HALF_UP 舍入，整数位超出 precision 报错
    - date      : YYYY-MM-DD → 自 epoch 起的天数
    - timestamp : YYYY-MM-DD HH:MM:SS[.fffffffff] → 自 epoch 起的纳秒数
                  （timestamp_format 不为空时改用 strptime，精度到微秒）
    - 字符串    : 原样 utf-8 字节
    """

    def __init__(self, timestamp_format: Optional[str] = None):
        self.timestamp_format = timestamp_format
        self._dispatch: Dict[Category, Callable[[str, PrimitiveType], Any]] = {
            Category.BOOLEAN: self._to_boolean,
            Category.BYTE: self._to_integer,
            Category.SHORT: self._to_integer,
            Category.INT: self._to_integer,
            Category.LONG: self._to_integer,
            Category.FLOAT: self._to_float,
            Category.DOUBLE: self._to_float,
            Category.DECIMAL: self._to_decimal,
            Category.DATE: self._to_date,
            Category.TIMESTAMP: self._to_timestamp,
            Category.STRING: self._to_bytes,
            Category.CHAR: self._to_bytes,
            Category.VARCHAR: self._to_bytes,
            Category.BINARY: self._to_bytes,
        }

    def coerce(self, value: str, node: PrimitiveType) -> Any:
        try:
            fn = self._dispatch[node.category]
        except KeyError:
            raise ConversionError(value, str(node), "not a primitive type") from None
        return fn(value, node)

    # ------------------------------------------------------------------
    @staticmethod
    def _to_boolean(value: str, node: PrimitiveType) -> int:
        lowered = value.lower()
        if lowered == "true":
            return 1
        if lowered == "false":
            return 0
        raise ConversionError(value, str(node), "expected true or false")

    @staticmethod
    def _to_integer(value: str, node: PrimitiveType) -> int:
        if not _INT_RE.fullmatch(value):
            raise ConversionError(value, str(node), "not a base-10 integer")
        result = int(value)
        low, high = _INT_RANGES[node.category]
        if not low <= result <= high:
            raise ConversionError(value, str(node), f"out of range [{low}, {high}]")
        return result

    @staticmethod
    def _to_float(value: str, node: PrimitiveType) -> float:
        if not _FLOAT_RE.fullmatch(value):
            raise ConversionError(value, str(node), "not a floating point literal")
        result = float(value.replace("Infinity", "inf"))
        if node.category == Category.FLOAT and math.isfinite(result) and abs(result) > _FLOAT32_MAX:
            raise ConversionError(value, str(node), "out of range for float")
        return result

    @staticmethod
    def _to_decimal(value: str, node: PrimitiveType) -> Decimal:
        if not _DECIMAL_RE.fullmatch(value):
            raise ConversionError(value, str(node), "not a decimal literal")
        try:
            result = Decimal(value)
            exponent = result.as_tuple().exponent
            if exponent > 0:
                result = result.quantize(Decimal(1), context=_DECIMAL_CONTEXT)
            elif -exponent > node.scale:
                result = result.quantize(Decimal((0, (1,), -node.scale)), rounding=ROUND_HALF_UP, context=_DECIMAL_CONTEXT)
        except InvalidOperation:
            raise ConversionError(value, str(node), "cannot be represented") from None

        sign, digits, exponent = result.as_tuple()
        integer_digits = 0 if result.is_zero() else max(len(digits) + exponent, 0)
        if integer_digits > node.precision - node.scale:
            raise ConversionError(
                value,
                str(node),
                f"needs {integer_digits} integer digits, at most {node.precision - node.scale} allowed",
            )
        return result

    @staticmethod
    def _to_date(value: str, node: PrimitiveType) -> int:
        m = _DATE_RE.fullmatch(value)
        if m is None:
            raise ConversionError(value, str(node), "expected YYYY-MM-DD")
        try:
            d = date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
        except ValueError as e:
            raise ConversionError(value, str(node), str(e)) from None
        return (d - _EPOCH_DATE).days

    def _to_timestamp(self, value: str, node: PrimitiveType) -> int:
        if self.timestamp_format:
            return self._to_timestamp_strptime(value, node)

        m = _TIMESTAMP_RE.fullmatch(value)
        if m is None:
            raise ConversionError(value, str(node), "expected YYYY-MM-DD HH:MM:SS[.fffffffff]")
        try:
            dt = datetime(*(int(g) for g in m.groups()[:6]))
        except ValueError as e:
            raise ConversionError(value, str(node), str(e)) from None

        fraction = m.group(7) or ""
        nanos = int(fraction.ljust(9, "0")) if fraction else 0
        return _epoch_nanos(dt, nanos, value, node)

    def _to_timestamp_strptime(self, value: str, node: PrimitiveType) -> int:
        try:
            dt = datetime.strptime(value, self.timestamp_format)
        except ValueError as e:
            raise ConversionError(value, str(node), str(e)) from None

        if dt.tzinfo is not None:
            dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
        return _epoch_nanos(dt.replace(microsecond=0), dt.microsecond * 1000, value, node)

    @staticmethod
    def _to_bytes(value: str, node: PrimitiveType) -> bytes:
        return value.encode("utf-8")


def _epoch_nanos(dt: datetime, nanos: int, value: str, node: PrimitiveType) -> int:
    delta = dt - _EPOCH_DT
    result = (delta.days * 86_400 + delta.seconds) * _NANOS_PER_SECOND + nanos
    if not _INT64_MIN <= result <= _INT64_MAX:
        raise ConversionError(value, str(node), "outside the nanosecond timestamp range")
    return result

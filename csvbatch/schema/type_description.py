#!filepath: csvbatch/schema/type_description.py
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

import pyarrow as pa

from csvbatch.utils.errors import UnsupportedSchema


class Category(str, Enum):
    BOOLEAN = "boolean"
    BYTE = "tinyint"
    SHORT = "smallint"
    INT = "int"
    LONG = "bigint"
    FLOAT = "float"
    DOUBLE = "double"
    DECIMAL = "decimal"
    DATE = "date"
    TIMESTAMP = "timestamp"
    STRING = "string"
    CHAR = "char"
    VARCHAR = "varchar"
    BINARY = "binary"
    STRUCT = "struct"
    LIST = "array"
    MAP = "map"
    UNION = "uniontype"


INTEGER_CATEGORIES = (
    Category.BOOLEAN,
    Category.BYTE,
    Category.SHORT,
    Category.INT,
    Category.LONG,
)
FLOAT_CATEGORIES = (Category.FLOAT, Category.DOUBLE)

DEFAULT_DECIMAL_PRECISION = 38
DEFAULT_DECIMAL_SCALE = 10
MAX_DECIMAL_PRECISION = 38

_ARROW_PRIMITIVES = {
    Category.BOOLEAN: pa.bool_(),
    Category.BYTE: pa.int8(),
    Category.SHORT: pa.int16(),
    Category.INT: pa.int32(),
    Category.LONG: pa.int64(),
    Category.FLOAT: pa.float32(),
    Category.DOUBLE: pa.float64(),
    Category.DATE: pa.date32(),
    Category.TIMESTAMP: pa.timestamp("ns"),
    Category.STRING: pa.string(),
    Category.CHAR: pa.string(),
    Category.VARCHAR: pa.string(),
    Category.BINARY: pa.binary(),
}


class TypeDescription(ABC):
    """
    schema 树节点（不可变）：
        primitive / struct / list / map / union

    每个节点都能算出自己展平后占用多少个原始字段（leaf_count），
    reader 据此在构造期校验记录宽度。
    """

    category: Category

    @property
    def is_primitive(self) -> bool:
        return False

    @abstractmethod
    def leaf_count(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def column_names(self, prefix: str = "") -> List[str]:
        """展平后每个叶子的列名（与原始字段一一对应）。"""
        raise NotImplementedError

    @abstractmethod
    def to_arrow_type(self) -> pa.DataType:
        raise NotImplementedError


@dataclass(frozen=True)
class PrimitiveType(TypeDescription):
    category: Category
    precision: Optional[int] = None
    scale: Optional[int] = None
    max_length: Optional[int] = None

    @property
    def is_primitive(self) -> bool:
        return True

    def leaf_count(self) -> int:
        return 1

    def column_names(self, prefix: str = "") -> List[str]:
        return [prefix]

    def to_arrow_type(self) -> pa.DataType:
        if self.category == Category.DECIMAL:
            return pa.decimal128(self.precision, self.scale)
        return _ARROW_PRIMITIVES[self.category]

    def __str__(self) -> str:
        if self.category == Category.DECIMAL:
            return f"decimal({self.precision},{self.scale})"
        if self.category in (Category.CHAR, Category.VARCHAR):
            return f"{self.category.value}({self.max_length})"
        return self.category.value


@dataclass(frozen=True)
class StructType(TypeDescription):
    fields: Tuple[Tuple[str, TypeDescription], ...]
    category: Category = Category.STRUCT

    @property
    def field_names(self) -> List[str]:
        return [name for name, _ in self.fields]

    @property
    def children(self) -> List[TypeDescription]:
        return [child for _, child in self.fields]

    def leaf_count(self) -> int:
        return sum(child.leaf_count() for _, child in self.fields)

    def column_names(self, prefix: str = "") -> List[str]:
        names: List[str] = []
        for name, child in self.fields:
            child_prefix = f"{prefix}.{name}" if prefix else name
            names.extend(child.column_names(child_prefix))
        return names

    def to_arrow_type(self) -> pa.DataType:
        return pa.struct(
            [pa.field(name, child.to_arrow_type()) for name, child in self.fields]
        )

    def to_arrow_schema(self) -> pa.Schema:
        return pa.schema(
            [pa.field(name, child.to_arrow_type()) for name, child in self.fields]
        )

    def __str__(self) -> str:
        inner = ",".join(f"{name}:{child}" for name, child in self.fields)
        return f"struct<{inner}>"


@dataclass(frozen=True)
class ListType(TypeDescription):
    """
    arity=None 表示变长 list（每行元素个数要从文本里读出来），
    这种形状无法展平 → UnsupportedSchema。
    """

    element: TypeDescription
    arity: Optional[int] = None
    category: Category = Category.LIST

    def leaf_count(self) -> int:
        if self.arity is None:
            raise UnsupportedSchema(str(self), "variable-length array has no fixed arity")
        return self.arity * self.element.leaf_count()

    def column_names(self, prefix: str = "") -> List[str]:
        if self.arity is None:
            raise UnsupportedSchema(prefix or str(self), "variable-length array has no fixed arity")
        names: List[str] = []
        for i in range(self.arity):
            names.extend(self.element.column_names(f"{prefix}[{i}]"))
        return names

    def to_arrow_type(self) -> pa.DataType:
        return pa.list_(self.element.to_arrow_type())

    def __str__(self) -> str:
        suffix = f"[{self.arity}]" if self.arity is not None else ""
        return f"array<{self.element}>{suffix}"


@dataclass(frozen=True)
class MapType(TypeDescription):
    key: TypeDescription
    value: TypeDescription
    arity: Optional[int] = None
    category: Category = Category.MAP

    def leaf_count(self) -> int:
        if self.arity is None:
            raise UnsupportedSchema(str(self), "variable-length map has no fixed arity")
        return self.arity * (self.key.leaf_count() + self.value.leaf_count())

    def column_names(self, prefix: str = "") -> List[str]:
        if self.arity is None:
            raise UnsupportedSchema(prefix or str(self), "variable-length map has no fixed arity")
        names: List[str] = []
        for i in range(self.arity):
            names.extend(self.key.column_names(f"{prefix}[{i}].key"))
            names.extend(self.value.column_names(f"{prefix}[{i}].value"))
        return names

    def to_arrow_type(self) -> pa.DataType:
        return pa.map_(self.key.to_arrow_type(), self.value.to_arrow_type())

    def __str__(self) -> str:
        suffix = f"[{self.arity}]" if self.arity is not None else ""
        return f"map<{self.key},{self.value}>{suffix}"


@dataclass(frozen=True)
class UnionType(TypeDescription):
    options: Tuple[TypeDescription, ...]
    category: Category = Category.UNION

    def leaf_count(self) -> int:
        raise UnsupportedSchema(str(self), "uniontype cannot be flattened")

    def column_names(self, prefix: str = "") -> List[str]:
        raise UnsupportedSchema(prefix or str(self), "uniontype cannot be flattened")

    def to_arrow_type(self) -> pa.DataType:
        raise UnsupportedSchema(str(self), "uniontype has no arrow mapping")

    def __str__(self) -> str:
        return "uniontype<" + ",".join(str(o) for o in self.options) + ">"


# ============================================================
# 构造工具
# ============================================================
def primitive(name: str) -> PrimitiveType:
    return PrimitiveType(Category(name))


def decimal(
    precision: int = DEFAULT_DECIMAL_PRECISION,
    scale: int = DEFAULT_DECIMAL_SCALE,
) -> PrimitiveType:
    if not 1 <= precision <= MAX_DECIMAL_PRECISION:
        raise ValueError(f"decimal precision must be 1..{MAX_DECIMAL_PRECISION}, got {precision}")
    if not 0 <= scale <= precision:
        raise ValueError(f"decimal scale must be 0..{precision}, got {scale}")
    return PrimitiveType(Category.DECIMAL, precision=precision, scale=scale)


def struct(*fields: Tuple[str, TypeDescription]) -> StructType:
    names = [name for name, _ in fields]
    if len(set(names)) != len(names):
        raise ValueError(f"duplicate struct field names: {names}")
    return StructType(tuple(fields))


def validate_flattenable(schema: TypeDescription, path: str = "") -> None:
    """
    构造期检查：schema 中每个节点都必须能展平成固定个数的字段。
    出错时 UnsupportedSchema.path 指向具体节点。
    """
    where = path or "<root>"

    if isinstance(schema, PrimitiveType):
        return

    if isinstance(schema, StructType):
        for name, child in schema.fields:
            validate_flattenable(child, f"{path}.{name}" if path else name)
        return

    if isinstance(schema, ListType):
        if schema.arity is None:
            raise UnsupportedSchema(where, "variable-length array has no fixed arity")
        validate_flattenable(schema.element, f"{path}[]")
        return

    if isinstance(schema, MapType):
        if schema.arity is None:
            raise UnsupportedSchema(where, "variable-length map has no fixed arity")
        validate_flattenable(schema.key, f"{path}.key")
        validate_flattenable(schema.value, f"{path}.value")
        return

    raise UnsupportedSchema(where, f"{schema.category.value} cannot be flattened")

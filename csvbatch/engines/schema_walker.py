#!filepath: csvbatch/engines/schema_walker.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Sequence

from csvbatch.batch.column_vector import (
    ColumnVector,
    ListColumnVector,
    MapColumnVector,
    StructColumnVector,
)
from csvbatch.engines.null_recognizer import NullRecognizer
from csvbatch.engines.type_coercer import TypeCoercer
from csvbatch.schema.type_description import (
    ListType,
    MapType,
    PrimitiveType,
    StructType,
    TypeDescription,
    validate_flattenable,
)
from csvbatch.utils.errors import ConversionError, UnsupportedSchema


class FieldCursor:
    """一条记录的原始字段，严格从左到右消费。"""

    def __init__(self, fields: Sequence[str]):
        self.fields = fields
        self.pos = 0

    def next(self) -> str:
        value = self.fields[self.pos]
        self.pos += 1
        return value


# ============================================================
# Converter 树（每个 schema 节点一个，构造期一次性建好）
# ============================================================
class Converter(ABC):
    """
    convert() 消费 leaf_count 个字段，往 vector[row] 写一行；
    返回该行是否非 null。
    """

    def __init__(self, name: str, leaf_count: int):
        self.name = name
        self.leaf_count = leaf_count

    @abstractmethod
    def convert(self, cursor: FieldCursor, vector: ColumnVector, row: int) -> bool:
        raise NotImplementedError


class PrimitiveConverter(Converter):

    def __init__(self, name: str, node: PrimitiveType, nulls: NullRecognizer, coercer: TypeCoercer):
        super().__init__(name, 1)
        self.node = node
        self.nulls = nulls
        self.coercer = coercer

    def convert(self, cursor: FieldCursor, vector: ColumnVector, row: int) -> bool:
        value = cursor.next()
        if self.nulls.is_null(value):
            vector.set_null(row)
            return False

        try:
            vector.set_value(row, self.coercer.coerce(value, self.node))
        except ConversionError as e:
            e.column = self.name
            raise
        return True


class StructConverter(Converter):
    """
    struct 本身在文本里没有表示，字段直接内联展开；
    任一子字段非 null 则 struct 非 null。
    """

    def __init__(self, name: str, children: List[Converter]):
        super().__init__(name, sum(c.leaf_count for c in children))
        self.children = children

    def convert(self, cursor: FieldCursor, vector: StructColumnVector, row: int) -> bool:
        valid = False
        for child, child_vector in zip(self.children, vector.fields):
            valid |= child.convert(cursor, child_vector, row)

        if valid:
            vector.set_valid(row)
        else:
            vector.set_null(row)
        return valid


class ListConverter(Converter):
    """固定 arity：第 i 个元素写到子列 row * arity + i。"""

    def __init__(self, name: str, elements: List[Converter]):
        super().__init__(name, sum(c.leaf_count for c in elements))
        self.elements = elements

    def convert(self, cursor: FieldCursor, vector: ListColumnVector, row: int) -> bool:
        base = row * vector.arity
        valid = False
        for i, element in enumerate(self.elements):
            valid |= element.convert(cursor, vector.child, base + i)

        if valid:
            vector.set_valid(row)
        else:
            vector.set_null(row)
        return valid


class MapConverter(Converter):
    """
    固定 arity 的 map：每个 entry 依次消费 key 字段、value 字段。
    map 非 null 时 key 不允许为 null。
    """

    def __init__(self, name: str, entries: List[tuple]):
        super().__init__(name, sum(k.leaf_count + v.leaf_count for k, v in entries))
        self.entries = entries

    def convert(self, cursor: FieldCursor, vector: MapColumnVector, row: int) -> bool:
        base = row * vector.arity
        valid = False
        null_key = None
        for i, (key, value) in enumerate(self.entries):
            key_valid = key.convert(cursor, vector.keys, base + i)
            value_valid = value.convert(cursor, vector.values, base + i)
            if not key_valid and null_key is None:
                null_key = key
            valid |= key_valid or value_valid

        if valid and null_key is not None:
            raise ConversionError(
                "<null>",
                "map key",
                "map key cannot be null",
                column=null_key.name,
            )

        if valid:
            vector.set_valid(row)
        else:
            vector.set_null(row)
        return valid


def build_converter(
    node: TypeDescription,
    name: str,
    nulls: NullRecognizer,
    coercer: TypeCoercer,
) -> Converter:
    if isinstance(node, PrimitiveType):
        return PrimitiveConverter(name, node, nulls, coercer)

    if isinstance(node, StructType):
        return StructConverter(
            name,
            [
                build_converter(child, f"{name}.{field}" if name else field, nulls, coercer)
                for field, child in node.fields
            ],
        )

    if isinstance(node, ListType):
        if node.arity is None:
            raise UnsupportedSchema(name, "variable-length array has no fixed arity")
        return ListConverter(
            name,
            [build_converter(node.element, f"{name}[{i}]", nulls, coercer) for i in range(node.arity)],
        )

    if isinstance(node, MapType):
        if node.arity is None:
            raise UnsupportedSchema(name, "variable-length map has no fixed arity")
        return MapConverter(
            name,
            [
                (
                    build_converter(node.key, f"{name}[{i}].key", nulls, coercer),
                    build_converter(node.value, f"{name}[{i}].value", nulls, coercer),
                )
                for i in range(node.arity)
            ],
        )

    raise UnsupportedSchema(name or "<root>", f"{node.category.value} cannot be flattened")


class SchemaWalker:
    """
    把一条记录的原始字段按 schema 顺序写进 batch 的各列。

    - 顶层 struct 的每个字段对应 batch.cols 中的一列
    - 字段总数必须等于 leaf_count（由调用方检查）
    - 不持有任何列缓冲区，只在 write_row() 期间借用
    """

    def __init__(self, schema: StructType, nulls: NullRecognizer, coercer: TypeCoercer):
        if not isinstance(schema, StructType):
            raise UnsupportedSchema("<root>", f"top-level type must be a struct, got {schema}")
        validate_flattenable(schema)

        self.schema = schema
        self.converters = [
            build_converter(child, field, nulls, coercer)
            for field, child in schema.fields
        ]
        self.leaf_count = sum(c.leaf_count for c in self.converters)

    def write_row(self, fields: Sequence[str], cols: Sequence[ColumnVector], row: int) -> None:
        cursor = FieldCursor(fields)
        for converter, vector in zip(self.converters, cols):
            converter.convert(cursor, vector, row)

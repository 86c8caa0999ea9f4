#!filepath: csvbatch/schema/parser.py
from __future__ import annotations

from typing import List, Optional, Tuple

from csvbatch.schema.type_description import (
    Category,
    DEFAULT_DECIMAL_PRECISION,
    DEFAULT_DECIMAL_SCALE,
    ListType,
    MapType,
    PrimitiveType,
    StructType,
    TypeDescription,
    UnionType,
    decimal,
)
from csvbatch.utils.errors import SchemaParseError

_ALIASES = {"list": "array", "long": "bigint", "byte": "tinyint", "short": "smallint"}


class _Cursor:
    """schema 文本上的只读游标（跳过空白）。"""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def skip_ws(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def peek(self) -> str:
        self.skip_ws()
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def accept(self, ch: str) -> bool:
        if self.peek() == ch:
            self.pos += 1
            return True
        return False

    def expect(self, ch: str) -> None:
        if not self.accept(ch):
            found = self.peek() or "end of input"
            raise self.error(f"expected '{ch}', found '{found}'")

    def word(self) -> str:
        self.skip_ws()
        start = self.pos
        while self.pos < len(self.text) and (
            self.text[self.pos].isalnum() or self.text[self.pos] == "_"
        ):
            self.pos += 1
        if start == self.pos:
            raise self.error("expected identifier")
        return self.text[start:self.pos]

    def field_name(self) -> str:
        if self.peek() != "`":
            return self.word()
        self.pos += 1
        start = self.pos
        end = self.text.find("`", start)
        if end < 0:
            raise self.error("unterminated quoted field name")
        self.pos = end + 1
        return self.text[start:end]

    def integer(self) -> int:
        self.skip_ws()
        start = self.pos
        while self.pos < len(self.text) and self.text[self.pos].isdigit():
            self.pos += 1
        if start == self.pos:
            raise self.error("expected integer")
        return int(self.text[start:self.pos])

    def error(self, reason: str) -> SchemaParseError:
        return SchemaParseError(self.text, self.pos, reason)


# ============================================================
# 主入口
# ============================================================
def parse_schema(text: str) -> TypeDescription:
    """
    解析 schema 文本，例如：
        struct<a:int,b:struct<c:int,d:int>,e:decimal(10,2)>
        array<int>[3]            固定 3 个元素
        map<string,double>[2]    固定 2 个 entry
    """
    cur = _Cursor(text)
    node = _parse_type(cur)
    if cur.peek():
        raise cur.error(f"unexpected trailing text '{text[cur.pos:]}'")
    return node


def _parse_type(cur: _Cursor) -> TypeDescription:
    start = cur.pos
    name = cur.word().lower()
    try:
        category = Category(_ALIASES.get(name, name))
    except ValueError:
        cur.pos = start
        raise cur.error(f"unknown type '{name}'") from None

    if category == Category.DECIMAL:
        return _parse_decimal(cur)

    if category in (Category.CHAR, Category.VARCHAR):
        cur.expect("(")
        length = cur.integer()
        cur.expect(")")
        return PrimitiveType(category, max_length=length)

    if category == Category.STRUCT:
        return StructType(tuple(_parse_struct_fields(cur)))

    if category == Category.LIST:
        cur.expect("<")
        element = _parse_type(cur)
        cur.expect(">")
        return ListType(element, _parse_arity(cur))

    if category == Category.MAP:
        cur.expect("<")
        key = _parse_type(cur)
        cur.expect(",")
        value = _parse_type(cur)
        cur.expect(">")
        return MapType(key, value, _parse_arity(cur))

    if category == Category.UNION:
        cur.expect("<")
        options = [_parse_type(cur)]
        while cur.accept(","):
            options.append(_parse_type(cur))
        cur.expect(">")
        return UnionType(tuple(options))

    return PrimitiveType(category)


def _parse_decimal(cur: _Cursor) -> PrimitiveType:
    precision, scale = DEFAULT_DECIMAL_PRECISION, DEFAULT_DECIMAL_SCALE
    if cur.accept("("):
        precision = cur.integer()
        scale = 0
        if cur.accept(","):
            scale = cur.integer()
        cur.expect(")")
    try:
        return decimal(precision, scale)
    except ValueError as e:
        raise cur.error(str(e)) from None


def _parse_struct_fields(cur: _Cursor) -> List[Tuple[str, TypeDescription]]:
    cur.expect("<")
    fields: List[Tuple[str, TypeDescription]] = []
    if cur.accept(">"):
        return fields

    while True:
        name = cur.field_name()
        if any(name == existing for existing, _ in fields):
            raise cur.error(f"duplicate field name '{name}'")
        cur.expect(":")
        fields.append((name, _parse_type(cur)))
        if cur.accept(">"):
            return fields
        cur.expect(",")


def _parse_arity(cur: _Cursor) -> Optional[int]:
    if not cur.accept("["):
        return None
    arity = cur.integer()
    cur.expect("]")
    if arity <= 0:
        raise cur.error("arity must be positive")
    return arity

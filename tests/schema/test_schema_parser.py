import pyarrow as pa
import pytest

from csvbatch.schema import (
    Category,
    ListType,
    MapType,
    PrimitiveType,
    StructType,
    UnionType,
    decimal,
    parse_schema,
    primitive,
    struct,
    validate_flattenable,
)
from csvbatch.utils.errors import SchemaParseError, UnsupportedSchema


def test_parse_flat_struct():
    schema = parse_schema("struct<a:int,b:double,c:decimal(10,2),d:string>")

    assert isinstance(schema, StructType)
    assert schema.field_names == ["a", "b", "c", "d"]
    assert schema.children[2] == decimal(10, 2)
    assert schema.leaf_count() == 4


def test_parse_nested_struct_leaf_order():
    schema = parse_schema("struct<a:int,b:struct<c:int,d:int>,e:int>")

    assert schema.leaf_count() == 4
    assert schema.column_names() == ["a", "b.c", "b.d", "e"]


def test_round_trip_text():
    text = "struct<a:int,b:struct<c:bigint,d:varchar(10)>,e:array<int>[2],f:map<string,double>[1]>"
    assert str(parse_schema(text)) == text


def test_whitespace_and_case_are_ignored():
    schema = parse_schema(" STRUCT< a : INT , b : String > ")
    assert schema == struct(("a", primitive("int")), ("b", primitive("string")))


def test_decimal_defaults():
    assert parse_schema("decimal") == decimal(38, 10)
    assert parse_schema("decimal(5)") == decimal(5, 0)


def test_char_and_varchar_length():
    node = parse_schema("char(3)")
    assert node.category == Category.CHAR
    assert node.max_length == 3


def test_fixed_arity_list_and_map():
    schema = parse_schema("struct<xs:array<int>[3],m:map<string,int>[2]>")
    xs, m = schema.children

    assert isinstance(xs, ListType) and xs.arity == 3
    assert isinstance(m, MapType) and m.arity == 2
    assert schema.leaf_count() == 3 + 4
    assert schema.column_names() == [
        "xs[0]", "xs[1]", "xs[2]",
        "m[0].key", "m[0].value", "m[1].key", "m[1].value",
    ]


def test_list_alias():
    assert parse_schema("list<int>[2]") == ListType(primitive("int"), 2)


def test_backquoted_field_name():
    schema = parse_schema("struct<`my col`:int>")
    assert schema.field_names == ["my col"]


def test_arrow_types():
    schema = parse_schema(
        "struct<a:boolean,b:tinyint,c:date,d:timestamp,e:binary,f:array<float>[2],g:map<string,bigint>[1]>"
    )
    arrow = schema.to_arrow_schema()

    assert arrow.field("a").type == pa.bool_()
    assert arrow.field("b").type == pa.int8()
    assert arrow.field("c").type == pa.date32()
    assert arrow.field("d").type == pa.timestamp("ns")
    assert arrow.field("e").type == pa.binary()
    assert arrow.field("f").type == pa.list_(pa.float32())
    assert arrow.field("g").type == pa.map_(pa.string(), pa.int64())


@pytest.mark.parametrize(
    "text",
    [
        "struct<a:int",
        "struct<a int>",
        "foo",
        "struct<a:int,a:int>",
        "decimal(50,2)",
        "decimal(5,6)",
        "array<int>[0]",
        "int extra",
    ],
)
def test_parse_errors(text):
    with pytest.raises(SchemaParseError):
        parse_schema(text)


def test_variable_length_list_is_unsupported():
    schema = parse_schema("struct<a:int,xs:array<int>>")

    with pytest.raises(UnsupportedSchema) as exc:
        validate_flattenable(schema)
    assert exc.value.path == "xs"

    with pytest.raises(UnsupportedSchema):
        schema.leaf_count()


def test_variable_length_map_is_unsupported():
    with pytest.raises(UnsupportedSchema):
        validate_flattenable(parse_schema("struct<m:map<string,int>>"))


def test_union_is_unsupported():
    schema = parse_schema("struct<u:uniontype<int,string>>")
    assert isinstance(schema.children[0], UnionType)

    with pytest.raises(UnsupportedSchema):
        validate_flattenable(schema)


def test_struct_rejects_duplicate_names():
    with pytest.raises(ValueError):
        struct(("a", primitive("int")), ("a", primitive("int")))


def test_primitive_is_primitive():
    assert PrimitiveType(Category.INT).is_primitive
    assert not struct(("a", primitive("int"))).is_primitive

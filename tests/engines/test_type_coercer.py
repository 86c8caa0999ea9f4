import math
from decimal import Decimal

import pytest

from csvbatch.engines.type_coercer import TypeCoercer
from csvbatch.schema import decimal, parse_schema, primitive
from csvbatch.utils.errors import ConversionError


@pytest.fixture
def coercer():
    return TypeCoercer()


# ============================
# integers
# ============================
@pytest.mark.parametrize(
    "kind,text,expected",
    [
        ("int", "42", 42),
        ("int", "-7", -7),
        ("int", "+3", 3),
        ("tinyint", "127", 127),
        ("smallint", "-32768", -32768),
        ("bigint", "9223372036854775807", 9223372036854775807),
    ],
)
def test_integers(coercer, kind, text, expected):
    assert coercer.coerce(text, primitive(kind)) == expected


@pytest.mark.parametrize(
    "kind,text",
    [
        ("int", " 1"),
        ("int", "1 "),
        ("int", "1.0"),
        ("int", "abc"),
        ("int", ""),
        ("int", "1_000"),
        ("tinyint", "128"),
        ("int", "2147483648"),
        ("bigint", "9223372036854775808"),
    ],
)
def test_integer_failures(coercer, kind, text):
    with pytest.raises(ConversionError) as exc:
        coercer.coerce(text, primitive(kind))
    assert exc.value.value == text
    assert exc.value.kind == kind


def test_boolean(coercer):
    assert coercer.coerce("true", primitive("boolean")) == 1
    assert coercer.coerce("FALSE", primitive("boolean")) == 0
    with pytest.raises(ConversionError):
        coercer.coerce("yes", primitive("boolean"))


# ============================
# floating point
# ============================
@pytest.mark.parametrize(
    "text,expected",
    [("1.25", 1.25), ("5", 5.0), ("-.5", -0.5), ("1e3", 1000.0), ("2.5E-1", 0.25)],
)
def test_double(coercer, text, expected):
    assert coercer.coerce(text, primitive("double")) == pytest.approx(expected)


def test_double_special_values(coercer):
    assert math.isnan(coercer.coerce("NaN", primitive("double")))
    assert coercer.coerce("-Infinity", primitive("double")) == float("-inf")


@pytest.mark.parametrize("text", ["abc", "1.2.3", " 1.0", "", "0x10", "inf"])
def test_double_failures(coercer, text):
    with pytest.raises(ConversionError):
        coercer.coerce(text, primitive("double"))


def test_float_out_of_range(coercer):
    with pytest.raises(ConversionError):
        coercer.coerce("1e39", primitive("float"))
    assert coercer.coerce("1e38", primitive("float")) == pytest.approx(1e38)


# ============================
# decimal
# ============================
def test_decimal_keeps_literal_scale(coercer):
    value = coercer.coerce("1", decimal(10, 2))
    assert value == Decimal("1")
    assert str(value) == "1"

    value = coercer.coerce("1.01", decimal(10, 2))
    assert str(value) == "1.01"


def test_decimal_rounds_extra_scale_half_up(coercer):
    assert str(coercer.coerce("1.235", decimal(10, 2))) == "1.24"
    assert str(coercer.coerce("-1.235", decimal(10, 2))) == "-1.24"


def test_decimal_exponent(coercer):
    assert coercer.coerce("1.5e2", decimal(10, 2)) == Decimal("150")


def test_decimal_zero_fits_pure_fraction(coercer):
    assert coercer.coerce("0", decimal(2, 2)) == Decimal("0")
    assert str(coercer.coerce("0.99", decimal(2, 2))) == "0.99"


def test_decimal_precision_overflow(coercer):
    with pytest.raises(ConversionError):
        coercer.coerce("123456789.5", decimal(10, 2))
    with pytest.raises(ConversionError):
        coercer.coerce("1", decimal(2, 2))


def test_decimal_wide_values(coercer):
    text = "1234567890123456789012345678.0123456789"
    assert str(coercer.coerce(text, decimal(38, 10))) == text


@pytest.mark.parametrize("text", ["abc", "NaN", "1,0", " 1", "Infinity"])
def test_decimal_failures(coercer, text):
    with pytest.raises(ConversionError):
        coercer.coerce(text, decimal(10, 2))


# ============================
# date / timestamp
# ============================
def test_date(coercer):
    assert coercer.coerce("1970-01-01", primitive("date")) == 0
    assert coercer.coerce("1970-01-02", primitive("date")) == 1
    assert coercer.coerce("1969-12-31", primitive("date")) == -1
    assert coercer.coerce("2000-02-29", primitive("date")) == 11016


@pytest.mark.parametrize("text", ["2021-02-29", "2021-13-01", "2021/01/01", "21-01-01", "2021-01-01 "])
def test_date_failures(coercer, text):
    with pytest.raises(ConversionError):
        coercer.coerce(text, primitive("date"))


def test_timestamp(coercer):
    ts = primitive("timestamp")
    assert coercer.coerce("1970-01-01 00:00:00", ts) == 0
    assert coercer.coerce("1970-01-01 00:00:01.5", ts) == 1_500_000_000
    assert coercer.coerce("1970-01-01T00:00:00.000000001", ts) == 1
    assert coercer.coerce("1969-12-31 23:59:59", ts) == -1_000_000_000


@pytest.mark.parametrize(
    "text",
    ["1970-01-01", "1970-01-01 24:00:00", "1970-01-01 00:00:00.1234567890", "2021-02-30 00:00:00", "3000-01-01 00:00:00"],
)
def test_timestamp_failures(coercer, text):
    with pytest.raises(ConversionError):
        coercer.coerce(text, primitive("timestamp"))


def test_timestamp_custom_format():
    coercer = TypeCoercer(timestamp_format="%d/%m/%Y %H:%M")
    assert coercer.coerce("02/01/1970 00:00", primitive("timestamp")) == 86_400 * 1_000_000_000

    with pytest.raises(ConversionError):
        coercer.coerce("1970-01-02 00:00:00", primitive("timestamp"))


def test_timestamp_custom_format_with_offset():
    coercer = TypeCoercer(timestamp_format="%Y-%m-%d %H:%M:%S%z")
    assert coercer.coerce("1970-01-01 08:00:00+0800", primitive("timestamp")) == 0


# ============================
# strings
# ============================
def test_strings_are_verbatim(coercer):
    assert coercer.coerce(" a b ", primitive("string")) == b" a b "
    assert coercer.coerce("é", parse_schema("varchar(3)")) == "é".encode("utf-8")
    assert coercer.coerce("x", primitive("binary")) == b"x"

import pyarrow.parquet as pq
import pytest
from typer.testing import CliRunner

from csvbatch import __version__
from csvbatch.cli import app

runner = CliRunner()

SCHEMA = "struct<a:int,b:struct<c:int,d:int>,e:int>"


@pytest.fixture
def csv_file(tmp_path):
    f = tmp_path / "data.csv"
    f.write_text("a,c,d,e\n1,2,3,4\n5,6,7,8\n")
    return f


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_convert(tmp_path, csv_file):
    out = tmp_path / "out.parquet"
    result = runner.invoke(app, ["convert", str(csv_file), "-s", SCHEMA, "-o", str(out), "-H", "1"])

    assert result.exit_code == 0, result.output
    assert "Wrote 2 rows" in result.output
    assert pq.read_table(out).column("e").to_pylist() == [4, 8]


def test_convert_bad_record_exits_1(tmp_path, csv_file):
    out = tmp_path / "out.parquet"
    # 不跳过 header → 第一行无法转换
    result = runner.invoke(app, ["convert", str(csv_file), "-s", SCHEMA, "-o", str(out)])

    assert result.exit_code == 1
    assert not out.exists()


def test_convert_skip_bad_rows(tmp_path, csv_file):
    out = tmp_path / "out.parquet"
    result = runner.invoke(app, ["convert", str(csv_file), "-s", SCHEMA, "-o", str(out), "--skip-bad-rows"])

    assert result.exit_code == 0, result.output
    assert "skipped=1" in result.output


def test_convert_invalid_option_exits_2(tmp_path, csv_file):
    result = runner.invoke(
        app, ["convert", str(csv_file), "-s", SCHEMA, "-o", str(tmp_path / "o.parquet"), "-d", ";;"]
    )
    assert result.exit_code == 2


def test_convert_bad_schema_exits_2(tmp_path, csv_file):
    result = runner.invoke(
        app, ["convert", str(csv_file), "-s", "struct<a:int", "-o", str(tmp_path / "o.parquet")]
    )
    assert result.exit_code == 2


def test_inspect():
    result = runner.invoke(app, ["inspect", "-s", SCHEMA])
    assert result.exit_code == 0
    for name in ("a", "b.c", "b.d", "e"):
        assert name in result.output


def test_inspect_unsupported_schema():
    result = runner.invoke(app, ["inspect", "-s", "struct<xs:array<int>>"])
    assert result.exit_code == 2


def test_head(csv_file):
    result = runner.invoke(app, ["head", str(csv_file), "-s", SCHEMA, "-H", "1", "-r", "1"])
    assert result.exit_code == 0, result.output
    assert "'c': 2" in result.output
    assert "'c': 6" not in result.output


@pytest.mark.parametrize("rows", ["0", "-1"])
def test_head_rejects_non_positive_rows(csv_file, rows):
    result = runner.invoke(app, ["head", str(csv_file), "-s", SCHEMA, "-r", rows])
    assert result.exit_code == 2

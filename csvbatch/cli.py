#!filepath: csvbatch/cli.py
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich import print
from rich.console import Console
from rich.table import Table

from csvbatch import __version__
from csvbatch.adapters.csv_convert_adapter import CsvConvertAdapter
from csvbatch.config import AppConfig, ErrorPolicy
from csvbatch.io.line_source import open_line_source
from csvbatch.observability.instrumentation import Instrumentation
from csvbatch.reader.csv_reader import CsvReader
from csvbatch.schema import parse_schema
from csvbatch.utils.errors import CsvBatchError
from csvbatch.utils.logger import init_logging

app = typer.Typer(help="CSV → columnar batch converter")


def _build_config(
    config: Optional[Path],
    delimiter: Optional[str],
    quote: Optional[str],
    escape: Optional[str],
    header: Optional[int],
    null_string: Optional[str],
    batch_size: Optional[int],
    skip_bad_rows: bool,
    overwrite: bool = False,
) -> AppConfig:
    """
    YAML 配置为底，命令行参数覆盖
    """
    cfg = AppConfig.load(str(config) if config else None)

    overrides = {
        "delimiter": delimiter,
        "quote": quote,
        "escape": escape,
        "header_lines": header,
        "null_string": null_string,
        "batch_size": batch_size,
    }
    reader = cfg.reader.model_dump()
    reader.update({k: v for k, v in overrides.items() if v is not None})
    if skip_bad_rows:
        reader["error_policy"] = ErrorPolicy.SKIP_ROW

    output = cfg.output.model_dump()
    if overwrite:
        output["overwrite"] = True

    try:
        return AppConfig(log=cfg.log, reader=reader, output=output)
    except ValidationError as e:
        print(f"[red]Invalid option: {e}[/red]")
        raise typer.Exit(code=2)


def _schema_or_exit(text: str):
    try:
        return parse_schema(text)
    except CsvBatchError as e:
        print(f"[red]{e}[/red]")
        raise typer.Exit(code=2)


@app.command()
def version():
    print(f"v{__version__}")


@app.command()
def convert(
    input: Path = typer.Argument(..., help="CSV 文件（支持 .gz）"),
    schema: str = typer.Option(..., "--schema", "-s", help="例如 struct<a:int,b:string>"),
    output: Path = typer.Option(..., "--output", "-o", help="输出 parquet 路径"),
    delimiter: Optional[str] = typer.Option(None, "--delimiter", "-d"),
    quote: Optional[str] = typer.Option(None, "--quote", "-q"),
    escape: Optional[str] = typer.Option(None, "--escape", "-e"),
    header: Optional[int] = typer.Option(None, "--header", "-H", help="跳过的表头行数"),
    null_string: Optional[str] = typer.Option(None, "--null-string", "-n"),
    batch_size: Optional[int] = typer.Option(None, "--batch-size", "-b"),
    skip_bad_rows: bool = typer.Option(False, "--skip-bad-rows", help="坏行跳过而不是中止"),
    overwrite: bool = typer.Option(False, "--overwrite"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML 配置文件"),
    log_file: bool = typer.Option(False, "--log-file", help="按 log 配置写日志文件"),
):
    """
    CSV → Parquet（按 schema 强类型转换）
    """
    cfg = _build_config(
        config, delimiter, quote, escape, header, null_string, batch_size, skip_bad_rows, overwrite
    )
    if log_file:
        init_logging(cfg.log)

    node = _schema_or_exit(schema)
    inst = Instrumentation()

    try:
        result = CsvConvertAdapter(cfg, inst).convert(input, output, node)
    except (CsvBatchError, FileNotFoundError) as e:
        print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)

    elapsed = sum(inst.timeline.values())
    print(
        f"[green]Wrote {result.rows} rows in {result.batches} batches → {result.output_path}[/green]"
        f" ({elapsed:.2f}s, skipped={result.skipped_rows})"
    )


@app.command()
def inspect(
    schema: str = typer.Option(..., "--schema", "-s"),
):
    """
    打印 schema 展平后的叶子列（即 CSV 中每个字段的含义）
    """
    node = _schema_or_exit(schema)
    try:
        names = node.column_names()
    except CsvBatchError as e:
        print(f"[red]{e}[/red]")
        raise typer.Exit(code=2)

    table = Table(title=str(node))
    table.add_column("#", justify="right")
    table.add_column("column")
    for i, name in enumerate(names):
        table.add_row(str(i), name)

    Console().print(table)
    print(f"arrow: {node.to_arrow_type()}")


@app.command()
def head(
    input: Path = typer.Argument(...),
    schema: str = typer.Option(..., "--schema", "-s"),
    rows: int = typer.Option(10, "--rows", "-r", min=1),
    delimiter: Optional[str] = typer.Option(None, "--delimiter", "-d"),
    quote: Optional[str] = typer.Option(None, "--quote", "-q"),
    escape: Optional[str] = typer.Option(None, "--escape", "-e"),
    header: Optional[int] = typer.Option(None, "--header", "-H"),
    null_string: Optional[str] = typer.Option(None, "--null-string", "-n"),
    config: Optional[Path] = typer.Option(None, "--config", "-c"),
):
    """
    预览前 N 行的转换结果
    """
    cfg = _build_config(config, delimiter, quote, escape, header, null_string, None, False)
    node = _schema_or_exit(schema)

    try:
        with CsvReader(open_line_source(input), node, cfg.reader) as reader:
            batch = reader.create_batch(rows)
            reader.next_batch(batch)
            records = batch.to_pylist()
    except (CsvBatchError, FileNotFoundError) as e:
        print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)

    table = Table()
    for name in node.field_names:
        table.add_column(name)
    for record in records:
        table.add_row(*("null" if v is None else str(v) for v in record.values()))

    Console().print(table)


if __name__ == "__main__":
    app()

# python -m csvbatch.cli convert data.csv -s "struct<a:int,b:string>" -o data.parquet

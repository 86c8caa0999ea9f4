#!filepath: csvbatch/adapters/csv_convert_adapter.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from csvbatch.adapters.base_adapter import BaseAdapter
from csvbatch.config.app_config import AppConfig
from csvbatch.engines.writers import ParquetFileWriter
from csvbatch.io.line_source import open_line_source
from csvbatch.observability.instrumentation import Instrumentation
from csvbatch.reader.csv_reader import CsvReader
from csvbatch.schema.type_description import StructType
from csvbatch.utils.errors import UserInputError
from csvbatch.utils.filesystem import FileSystem
from csvbatch import logs


@dataclass
class ConvertResult:
    output_path: Path
    rows: int
    batches: int
    skipped_rows: int


class CsvConvertAdapter(BaseAdapter):
    """
    Adapter 层：
    - 负责 I/O（打开 CSV / 写 parquet）
    - 调用 CsvReader 做解析与类型转换
    - 无论成功失败都会关闭 line source 与 writer；失败时删除残缺输出
    """

    def __init__(self, cfg: Optional[AppConfig] = None, inst: Instrumentation | None = None):
        super().__init__(inst)
        self.cfg = cfg or AppConfig()

    # ----------------------------------------------------------------------
    @logs.catch()
    def convert(self, csv_path: Path, out_path: Path, schema: StructType) -> ConvertResult:
        csv_path, out_path = Path(csv_path), Path(out_path)

        if out_path.exists() and not self.cfg.output.overwrite:
            raise UserInputError(f"输出文件已存在（未开启 overwrite）: {out_path}")

        logs.info(
            f"[CSVConvert] {csv_path} ({FileSystem.format_size(FileSystem.get_file_size(csv_path))}) "
            f"→ {out_path} | schema={schema}"
        )
        FileSystem.ensure_dir(out_path.parent)

        reader = CsvReader(open_line_source(csv_path), schema, self.cfg.reader)
        writer = ParquetFileWriter(out_path, schema.to_arrow_schema(), self.cfg.output.compression)

        batches = 0
        try:
            with self.timer(f"convert_{csv_path.name}"):
                batch = reader.create_batch()
                while reader.next_batch(batch):
                    writer.write(batch.to_record_batch())
                    batches += 1
                    self.incr("batches")
            writer.close()
        except BaseException:
            writer.close()
            FileSystem.remove(out_path)
            raise
        finally:
            reader.close()

        result = ConvertResult(
            output_path=out_path,
            rows=reader.get_row_number(),
            batches=batches,
            skipped_rows=reader.skipped_rows,
        )
        self.record("rows", result.rows)
        self.record("skipped_rows", result.skipped_rows)

        logs.info(f"[CSVConvert] 完成: rows={result.rows} batches={batches} skipped={result.skipped_rows}")
        return result

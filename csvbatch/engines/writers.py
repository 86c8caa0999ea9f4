#!filepath: csvbatch/engines/writers.py

from __future__ import annotations
from pathlib import Path
import pyarrow.parquet as pq
import pyarrow as pa


class ParquetFileWriter:
    """
    单文件 Writer（增量 write_batch）
    """

    def __init__(self, out_path: Path, schema: pa.Schema, compression: str = "zstd"):
        self.out_path = out_path
        self.schema = schema
        self.compression = compression
        self.writer = None
        self.rows_written = 0
        self._closed = False

    def write(self, batch: pa.RecordBatch):
        if self.writer is None:
            self.writer = pq.ParquetWriter(self.out_path, self.schema, compression=self.compression)
        self.writer.write_batch(batch)
        self.rows_written += batch.num_rows

    def close(self):
        """没有写过任何 batch 时也输出一个只有 schema 的空文件。"""
        if self._closed:
            return
        self._closed = True

        if self.writer is None:
            pq.write_table(self.schema.empty_table(), self.out_path, compression=self.compression)
            return
        self.writer.close()
        self.writer = None

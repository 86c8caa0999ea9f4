#!filepath: csvbatch/reader/csv_reader.py
from __future__ import annotations

from enum import Enum
from typing import Iterator, List, Optional

import pyarrow as pa

from csvbatch.batch.row_batch import VectorizedRowBatch, create_row_batch
from csvbatch.config.reader_config import ErrorPolicy, ReaderConfig
from csvbatch.engines.field_splitter import FieldSplitter
from csvbatch.engines.null_recognizer import NullRecognizer
from csvbatch.engines.schema_walker import SchemaWalker
from csvbatch.engines.type_coercer import TypeCoercer
from csvbatch.io.line_source import LineSource
from csvbatch.schema.type_description import StructType
from csvbatch.utils.errors import ConversionError, MalformedRecord
from csvbatch import logs


class ReaderState(str, Enum):
    AWAITING_HEADER = "awaiting_header"
    FILLING = "filling"
    BATCH_FULL = "batch_full"
    EXHAUSTED = "exhausted"


class CsvReader:
    """
    CSV → VectorizedRowBatch（单线程、阻塞、拉模式）

    状态机：
        AWAITING_HEADER → FILLING → BATCH_FULL ↺
                                  → EXHAUSTED

    - 持有 line source，close() 负责释放（构造失败时也会释放）
    - 每次 next_batch() 只重置 batch 的 size / validity，不重新分配存储
    - 行号（row）从 0 开始，跨 batch 累计，不含 header
    """

    def __init__(
        self,
        source: LineSource,
        schema: StructType,
        config: Optional[ReaderConfig] = None,
    ):
        self._source = source
        try:
            self.config = config or ReaderConfig()
            self.schema = schema

            self.splitter = FieldSplitter(self.config.delimiter, self.config.quote, self.config.escape)
            self.nulls = NullRecognizer(self.config.null_string)
            self.coercer = TypeCoercer(self.config.timestamp_format)
            self.walker = SchemaWalker(schema, self.nulls, self.coercer)
        except BaseException:
            source.close()
            raise

        self.column_names: List[str] = schema.column_names()
        self.state = ReaderState.AWAITING_HEADER if self.config.header_lines else ReaderState.FILLING

        self._header_remaining = self.config.header_lines
        self._records_read = 0
        self.row_number = 0
        self.skipped_rows = 0
        self._closed = False

    # ---------------------------------------------------------
    # 主入口
    # ---------------------------------------------------------
    def next_batch(self, batch: VectorizedRowBatch) -> bool:
        """
        从 row 0 开始填充 batch，直到填满或输入耗尽。
        返回本次是否写入了至少一行。
        """
        batch.reset()

        if self.state == ReaderState.AWAITING_HEADER:
            self._skip_header()

        if self.state == ReaderState.EXHAUSTED:
            return False

        self.state = ReaderState.FILLING
        while batch.size < batch.capacity:
            line = self._source.read_line()
            if line is None:
                self.state = ReaderState.EXHAUSTED
                break

            if self._fill_row(line, batch):
                batch.size += 1
                self.row_number += 1
        else:
            self.state = ReaderState.BATCH_FULL

        logs.debug(
            f"[CsvReader] batch size={batch.size}/{batch.capacity} "
            f"rows={self.row_number} state={self.state.value}"
        )
        return batch.size > 0

    def _skip_header(self) -> None:
        while self._header_remaining > 0:
            if self._source.read_line() is None:
                self.state = ReaderState.EXHAUSTED
                return
            self._header_remaining -= 1
        self.state = ReaderState.FILLING

    def _fill_row(self, line: str, batch: VectorizedRowBatch) -> bool:
        """
        写入一行；失败时丢弃本行的部分写入。
        FAIL 策略下 batch.size 停在最后一个完整行，然后向上抛出。
        """
        record = self._records_read
        self._records_read += 1
        row = batch.size

        fields = self.splitter.split(line)
        try:
            if len(fields) != self.walker.leaf_count:
                raise MalformedRecord(record, self.walker.leaf_count, len(fields), line)
            self.walker.write_row(fields, batch.cols, row)
            return True

        except (MalformedRecord, ConversionError) as e:
            if isinstance(e, ConversionError):
                e.locate(record, e.column)
            for col in batch.cols:
                col.discard_row(row)

            if self.config.error_policy == ErrorPolicy.SKIP_ROW:
                self.skipped_rows += 1
                logs.warning(f"[CsvReader] skip row: {e}")
                return False
            raise

    # ---------------------------------------------------------
    # 辅助接口
    # ---------------------------------------------------------
    def create_batch(self, capacity: Optional[int] = None) -> VectorizedRowBatch:
        if capacity is None:
            capacity = self.config.batch_size
        return create_row_batch(self.schema, capacity)

    def iter_batches(self, capacity: Optional[int] = None) -> Iterator[pa.RecordBatch]:
        batch = self.create_batch(capacity)
        while self.next_batch(batch):
            yield batch.to_record_batch()

    def get_row_number(self) -> int:
        return self.row_number

    def get_progress(self) -> float:
        total = getattr(self._source, "total_bytes", None)
        if not total:
            return 0.0
        return min(self._source.bytes_read / total, 1.0)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._source.close()

    def __enter__(self) -> "CsvReader":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

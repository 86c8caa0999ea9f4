#!filepath: csvbatch/config/reader_config.py
from enum import Enum
from typing import Optional

from pydantic import BaseModel, field_validator


class ErrorPolicy(str, Enum):
    FAIL = "fail"
    SKIP_ROW = "skip_row"


class ReaderConfig(BaseModel):
    """
    CsvReader 构造参数（构造后不可变）
    """

    delimiter: str = ","
    quote: str = "'"
    escape: str = "\\"
    header_lines: int = 0
    null_string: str = ""
    batch_size: int = 1024
    error_policy: ErrorPolicy = ErrorPolicy.FAIL
    timestamp_format: Optional[str] = None

    model_config = {"frozen": True}

    @field_validator("delimiter", "quote", "escape")
    @classmethod
    def _single_char(cls, v: str) -> str:
        if len(v) != 1:
            raise ValueError(f"must be exactly one character, got {v!r}")
        return v

    @field_validator("header_lines")
    @classmethod
    def _non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"header_lines must be >= 0, got {v}")
        return v

    @field_validator("batch_size")
    @classmethod
    def _positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"batch_size must be > 0, got {v}")
        return v

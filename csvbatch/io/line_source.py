#!filepath: csvbatch/io/line_source.py
from __future__ import annotations

import gzip
import os
from pathlib import Path
from typing import Optional, Protocol, TextIO, Union

"""
Low-level I/O utility.
只负责按行提供文本，不做任何解析。
"""


class LineSource(Protocol):
    """reader 依赖的最小行接口。"""

    bytes_read: int
    total_bytes: Optional[int]

    def read_line(self) -> Optional[str]:
        ...

    def close(self) -> None:
        ...


class TextLineSource:
    """
    包装任意文本流（StringIO / open() 返回的文件）：
    - read_line() 去掉行尾换行符，读完返回 None
    - close() 幂等
    """

    def __init__(self, stream: TextIO, total_bytes: Optional[int] = None, encoding: str = "utf-8"):
        self._stream = stream
        self._encoding = encoding
        self.total_bytes = total_bytes
        self.bytes_read = 0

    def read_line(self) -> Optional[str]:
        if self._stream is None:
            return None

        line = self._stream.readline()
        if line == "":
            return None

        self.bytes_read += len(line.encode(self._encoding, errors="replace"))

        if line.endswith("\r\n"):
            return line[:-2]
        if line.endswith("\n") or line.endswith("\r"):
            return line[:-1]
        return line

    def close(self) -> None:
        try:
            if self._stream is not None:
                self._stream.close()
        finally:
            self._stream = None

    @property
    def closed(self) -> bool:
        return self._stream is None

    def __enter__(self) -> "TextLineSource":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def open_line_source(path: Union[str, Path], encoding: str = "utf-8") -> TextLineSource:
    """
    打开 CSV 文件：
    - *.gz → gzip 文本模式（总大小未知，progress 恒为 0）
    - 其他 → 普通文本文件（newline="" 保留原始行尾，由 read_line 去除）
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"CSV 文件不存在: {path}")

    if path.suffix == ".gz":
        stream = gzip.open(path, "rt", encoding=encoding, newline="")
        return TextLineSource(stream, total_bytes=None, encoding=encoding)

    stream = open(path, "r", encoding=encoding, newline="")
    return TextLineSource(stream, total_bytes=os.path.getsize(path), encoding=encoding)

#!filepath: csvbatch/engines/null_recognizer.py
from __future__ import annotations


class NullRecognizer:
    """
    null_string == "" 表示关闭 null 识别（空字段不会被当成 null）。
    """

    def __init__(self, null_string: str = ""):
        self.null_string = null_string

    @property
    def enabled(self) -> bool:
        return self.null_string != ""

    def is_null(self, field: str) -> bool:
        return self.enabled and field == self.null_string

#!filepath: csvbatch/io/__init__.py
from .line_source import LineSource, TextLineSource, open_line_source

__all__ = ["LineSource", "TextLineSource", "open_line_source"]

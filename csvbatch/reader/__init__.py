#!filepath: csvbatch/reader/__init__.py
from .csv_reader import CsvReader, ReaderState

__all__ = ["CsvReader", "ReaderState"]

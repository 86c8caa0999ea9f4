#!filepath: csvbatch/config/__init__.py
from .app_config import AppConfig
from .log_config import LogConfig
from .output_config import OutputConfig
from .reader_config import ReaderConfig, ErrorPolicy

__all__ = ["AppConfig", "LogConfig", "OutputConfig", "ReaderConfig", "ErrorPolicy"]

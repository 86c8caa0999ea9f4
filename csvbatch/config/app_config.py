#!filepath: csvbatch/config/app_config.py
import os
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel

from .log_config import LogConfig
from .output_config import OutputConfig
from .reader_config import ReaderConfig


def default_config_path() -> str:
    """包内自带的 config/base.yml（不依赖当前工作目录）"""
    return os.path.join(os.path.dirname(os.path.abspath(__file__)), "base.yml")


class AppConfig(BaseModel):
    log: LogConfig = LogConfig()
    reader: ReaderConfig = ReaderConfig()
    output: OutputConfig = OutputConfig()

    @classmethod
    def load(cls, path: Optional[str] = None) -> "AppConfig":
        """
        加载 YAML 配置 + .env
        - 默认使用包内 config/base.yml
        - 环境变量 CSVBATCH_LOG_LEVEL 覆盖 log.level
        """
        # 1) 先加载 .env（当前目录）
        load_dotenv()

        # 2) 决定配置文件路径
        if path is None:
            path = default_config_path()

        if not os.path.exists(path):
            raise FileNotFoundError(f"Config file not found: {path}")

        # 3) 读取 YAML
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

        level = os.getenv("CSVBATCH_LOG_LEVEL")
        if level:
            raw.setdefault("log", {})["level"] = level

        return cls(**raw)

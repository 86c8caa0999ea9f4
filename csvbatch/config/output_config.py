#!filepath: csvbatch/config/output_config.py
from pydantic import BaseModel


class OutputConfig(BaseModel):
    compression: str = "zstd"
    overwrite: bool = False

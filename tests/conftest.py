# tests/conftest.py
from __future__ import annotations

import io

import pytest
from loguru import logger

from csvbatch.io.line_source import TextLineSource
from csvbatch.schema import parse_schema


@pytest.fixture(autouse=True)
def disable_file_logger():
    logger.remove()
    logger.add(lambda msg: None)  # or sys.stderr
    yield


@pytest.fixture
def make_source():
    """
    Factory fixture：字符串 → TextLineSource

    Usage:
        source = make_source("1,2\\n3,4\\n")
    """

    def _make(text: str) -> TextLineSource:
        return TextLineSource(io.StringIO(text))

    return _make


@pytest.fixture
def simple_schema():
    return parse_schema("struct<a:int,b:double,c:decimal(10,2),d:string>")


@pytest.fixture
def simple_csv() -> str:
    return (
        "1,1.25,1.01,'a'\n"
        "2,2.5,2.02,'14'\n"
        "3,3.75,3.03,'1e'\n"
        "4,5,4.04,'28'\n"
        "5,6.25,5.05,'32'\n"
        "6,7.5,6.06,'3c'\n"
        "7,8.75,7.07,'46'\n"
        "8,10,8.08,'50'\n"
    )

#!filepath: csvbatch/observability/instrumentation.py
from __future__ import annotations

from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict

from csvbatch.observability.metrics import MetricRecorder
from csvbatch.observability.timer import Timer


@dataclass
class Instrumentation:
    """
    转换过程的计时 + 计数。

    - timer(name) 是唯一计时入口，结果写入 timeline
    - metrics 记录行数 / batch 数等
    - 本身不在热路径打日志
    """

    enabled: bool = True

    def __post_init__(self):
        self._timer = Timer(enabled=self.enabled)
        self.metrics = MetricRecorder(enabled=self.enabled)
        self.timeline: Dict[str, float] = OrderedDict()

    def timer(self, name: str, *, record: bool = True):
        inst = self

        @contextmanager
        def _ctx():
            if not inst.enabled:
                yield
                return

            inst._timer.start(name)
            try:
                yield
            finally:
                elapsed = inst._timer.end(name)
                if record:
                    inst.timeline[name] = elapsed

        return _ctx()

#!filepath: csvbatch/engines/field_splitter.py
from __future__ import annotations

from typing import List


class FieldSplitter:
    """
    把一条记录切成原始字段（纯逻辑，不做 I/O）：

    - 引号外：delimiter 结束当前字段
    - quote 只有出现在字段开头才进入引号模式，本身被丢弃
    - 引号内：escape 让下一个字符按字面复制；未转义的 quote 关闭引号模式
    - 字段中间出现的 quote 按普通字符处理
    - 未闭合的引号在记录结尾隐式关闭

    escape == quote 时按 CSV 习惯处理：引号内的 "" 表示一个字面 quote。
    """

    def __init__(self, delimiter: str = ",", quote: str = "'", escape: str = "\\"):
        self.delimiter = delimiter
        self.quote = quote
        self.escape = escape

    def split(self, record: str) -> List[str]:
        fields: List[str] = []
        current: List[str] = []
        in_quotes = False
        at_field_start = True

        i = 0
        n = len(record)
        while i < n:
            ch = record[i]

            if in_quotes:
                if ch == self.escape and i + 1 < n:
                    nxt = record[i + 1]
                    if self.escape != self.quote or nxt == self.quote:
                        current.append(nxt)
                        i += 2
                        continue
                if ch == self.quote:
                    in_quotes = False
                else:
                    current.append(ch)

            elif ch == self.delimiter:
                fields.append("".join(current))
                current = []
                at_field_start = True
                i += 1
                continue

            elif ch == self.quote and at_field_start:
                in_quotes = True

            else:
                current.append(ch)

            at_field_start = False
            i += 1

        fields.append("".join(current))
        return fields

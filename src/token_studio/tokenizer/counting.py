"""计数原语：字符数与 UTF-8 字节数。"""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class Counts:
    """某个输出字符串的计数结果。"""

    characters: int = 0
    bytes: int = 0
    tokens: int = 0

    def with_tokens(self, tokens: int) -> Counts:
        return replace(self, tokens=tokens)


def char_length(text: str) -> int:
    """字符数（Unicode 码点）。"""
    return len(text)


def byte_length(text: str) -> int:
    """UTF-8 编码后的字节数。"""
    return len(text.encode("utf-8"))


def count_text(text: str) -> Counts:
    """计算字符与字节数；tokens 留给分词器填充。空串为全零。"""
    if not text:
        return Counts()
    return Counts(characters=char_length(text), bytes=byte_length(text))

"""
近似 Tokenizer：零依赖、同步、确定性的启发式分词。

在精确分词不可用（离线、请求失败、模型不受支持）时提供即时反馈。

计数：`max(1, ceil(utf8 字节数 / 4))`，空串为 0。
BPE 词表在英文文本上平均约 4 字节一个 Token，这只是一个估计值。

切分：显式的字符类别扫描器，按优先级分三类，同类字符贪婪连成一段：
1. 空白
2. 词字符：ASCII 字母、数字、`_ - " ' @`
3. 其他非空白字符（标点与符号）

空白段没有 ID；其余段按首次出现顺序从 1 开始编号，相同子串复用同一 ID。
这些 ID 不是词表 ID，只是同一次调用内的分组键（相同 Token 同色高亮）。
"""

from __future__ import annotations

import math
from enum import Enum

from token_studio.tokenizer.counting import byte_length
from token_studio.tokenizer.protocol import WHITESPACE, Identified, Token

_WORD_PUNCT = frozenset("_-\"'@")

# 英文文本的经验值
BYTES_PER_TOKEN = 4


class CharClass(Enum):
    WHITESPACE = 0
    WORD = 1
    OTHER = 2


def classify(ch: str) -> CharClass:
    """单个字符的类别。"""
    if ch.isspace():
        return CharClass.WHITESPACE
    if ch.isascii() and (ch.isalnum() or ch in _WORD_PUNCT):
        return CharClass.WORD
    return CharClass.OTHER


def approximate_token_count(text: str) -> int:
    """
    估算 Token 数量。

    参数:
        text: 待计数的文本

    返回:
        空串为 0，否则至少为 1
    """
    if not text:
        return 0
    return max(1, math.ceil(byte_length(text) / BYTES_PER_TOKEN))


def approximate_tokenize(text: str) -> list[Token]:
    """
    用字符类别扫描器切分文本。

    参数:
        text: 待切分的文本

    返回:
        Token 列表，拼接所有 text 可精确还原输入
    """
    tokens: list[Token] = []
    if not text:
        return tokens

    ids: dict[str, int] = {}
    next_id = 1
    start = 0
    length = len(text)

    while start < length:
        kind = classify(text[start])
        end = start + 1
        while end < length and classify(text[end]) is kind:
            end += 1

        piece = text[start:end]
        if kind is CharClass.WHITESPACE:
            tokens.append(Token(id=WHITESPACE, text=piece, start=start, end=end))
        else:
            if piece not in ids:
                ids[piece] = next_id
                next_id += 1
            tokens.append(Token(id=Identified(ids[piece]), text=piece, start=start, end=end))
        start = end

    return tokens


class ApproximateTokenizer:
    """
    近似分词器。

    这是 Token Studio 的最轻量级分词器，零外部依赖，永远可用。

    用法::

        tokenizer = ApproximateTokenizer()
        tokenizer.count("Hello, world!")      # 4
        tokenizer.tokenize("a b a")           # a(1) ' ' b(2) ' ' a(1)
    """

    def tokenize(self, text: str) -> list[Token]:
        return approximate_tokenize(text)

    def count(self, text: str) -> int:
        return approximate_token_count(text)

    @property
    def name(self) -> str:
        """Tokenizer 名称标识。"""
        return "approximate"

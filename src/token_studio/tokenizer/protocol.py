"""
Token 数据模型与 Tokenizer 协议。

Token 的 ID 是一个显式的和类型：要么是 `Whitespace`（空白 / 未知，没有 ID），
要么是 `Identified(value)`。这样 "没有 ID" 和 "ID 为 0" 永远不会混淆。

近似分词器的 ID 只在单次调用内有意义（首次出现顺序），
精确分词器的 ID 是稳定的词表 ID。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Union, runtime_checkable


@dataclass(frozen=True)
class Whitespace:
    """空白或未知片段的标记，没有 Token ID。"""

    def __repr__(self) -> str:
        return "Whitespace()"


@dataclass(frozen=True)
class Identified:
    """带 ID 的 Token。"""

    value: int


TokenId = Union[Whitespace, Identified]

WHITESPACE = Whitespace()


@dataclass(frozen=True)
class Token:
    """
    源字符串中的一个 Token。

    属性:
        id: Token ID（Whitespace 或 Identified）
        text: 覆盖的子串
        start: 起始偏移（含）
        end: 结束偏移（不含）
    """

    id: TokenId
    text: str
    start: int
    end: int

    @property
    def id_value(self) -> int | None:
        """整数 ID；空白 Token 返回 None。"""
        if isinstance(self.id, Identified):
            return self.id.value
        return None

    @property
    def is_whitespace(self) -> bool:
        return isinstance(self.id, Whitespace)

    def to_wire(self) -> dict[str, int | str | None]:
        """序列化为 `{"id", "text"}` 的传输格式。"""
        return {"id": self.id_value, "text": self.text}


@runtime_checkable
class Tokenizer(Protocol):
    """
    同步 Tokenizer 协议。

    近似分词器实现此协议；精确分词器在此之上还提供批量与异步接口。
    """

    def tokenize(self, text: str) -> list[Token]:
        """把文本切分为 Token 序列，拼接所有 text 可还原原文。"""
        ...

    def count(self, text: str) -> int:
        """返回文本的 Token 数量。"""
        ...

    @property
    def name(self) -> str:
        """Tokenizer 名称标识。"""
        ...


def token_ids(tokens: list[Token]) -> list[int]:
    """提取整数 ID 序列，跳过空白 Token。"""
    return [t.id.value for t in tokens if isinstance(t.id, Identified)]


def color_for_token(token: Token) -> str | None:
    """
    Token 高亮配色：相同 ID 共享同一色相。

    返回 HSL 颜色字符串；空白 Token 不着色，返回 None。
    """
    if not isinstance(token.id, Identified):
        return None
    hue = (token.id.value * 47) % 360
    return f"hsl({hue},90%,45%)"

"""
转换器公共定义。

所有转换器都是纯函数：同一个解析值 + 同一组选项 ⇒ 同一个字符串，
没有副作用，正常输入下不抛异常。每种格式独立生成，互不依赖。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal

# 解析后的 JSON 值（null / bool / 数字 / 字符串 / 有序映射 / 序列）
JsonValue = Any

KeyFolding = Literal["off", "safe"]


class FormatKind(str, Enum):
    """输出格式（封闭枚举）。"""

    PRETTY = "pretty"
    MINIFIED = "minified"
    YAML = "yaml"
    TOON = "toon"
    TOML = "toml"

    @property
    def label(self) -> str:
        """展示用名称。"""
        return _LABELS[self]


_LABELS = {
    FormatKind.PRETTY: "JSON (pretty)",
    FormatKind.MINIFIED: "JSON (minified)",
    FormatKind.YAML: "YAML-lite",
    FormatKind.TOON: "TOON",
    FormatKind.TOML: "TOML",
}


class ViewMode(str, Enum):
    """单个格式标签页的展示模式：原文或 Token ID 序列。"""

    TEXT = "text"
    IDS = "ids"


@dataclass(frozen=True)
class ConvertOptions:
    """
    一次转换所需的全部选项。

    属性:
        token_aware: 省略安全裸词两侧的引号以减少 Token
        toon_delimiter: TOON 数组分隔符（"," / "\\t" / "|"）
        toon_key_folding: TOON 键折叠模式（off / safe）
    """

    token_aware: bool = False
    toon_delimiter: str = ","
    toon_key_folding: KeyFolding = "off"


def is_container(value: JsonValue) -> bool:
    """是否为数组或对象。"""
    return isinstance(value, (list, dict))


def is_scalar(value: JsonValue) -> bool:
    """是否为标量（null / bool / 数字 / 字符串）。"""
    return not is_container(value)

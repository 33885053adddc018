"""
Token 感知模式的"裸词"规则。

一个字符串值可以不加引号输出，当且仅当：
1. 它由一个或多个 ASCII 字母、数字、下划线或连字符组成；
2. 它的小写形式不是保留字（true / false / null / yes / no / on / off / ~）。

JSON、YAML-lite、TOML 转换器共用这一个谓词，保证各格式之间的 Token 数可比。
"""

from __future__ import annotations

import json
import re

_BARE_WORD_RE = re.compile(r"[A-Za-z0-9_-]+")

RESERVED_WORDS = frozenset({"true", "false", "null", "yes", "no", "on", "off", "~"})


def is_bare_word(value: str) -> bool:
    """字符串能否在 Token 感知模式下省略引号。"""
    if not _BARE_WORD_RE.fullmatch(value):
        return False
    return value.lower() not in RESERVED_WORDS


def quote_json_string(value: str) -> str:
    """JSON 字符串字面量（保留非 ASCII 字符原样）。"""
    return json.dumps(value, ensure_ascii=False)


def render_string(value: str, token_aware: bool) -> str:
    """按 Token 感知设置渲染字符串标量。"""
    if token_aware and is_bare_word(value):
        return value
    return quote_json_string(value)

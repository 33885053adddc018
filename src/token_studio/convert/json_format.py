"""
JSON 转换器：带缩进（2 空格）与压缩两种形式。

Token 感知模式下，序列化前把符合裸词规则的叶子字符串替换为带标记的占位值，
序列化后再剥掉 `"<标记>...<标记>"` 外壳。对象/数组结构与键保持不变，
只有叶子字符串值丢失引号。标记取输入中从未出现过的私有区字符串，
用户数据里已有的私有区字符不会被误认成标记。

注意：Token 感知模式的输出不是合法 JSON，它只是 Token 开销的预览。
"""

from __future__ import annotations

import json
import re

from token_studio.convert.base import JsonValue
from token_studio.convert.quoting import is_bare_word

# 私有区字符，裸词本身不可能包含它，json.dumps(ensure_ascii=False) 也不会转义它
_MARK_CHAR = "\ue000"


def _pick_marker(plain: str) -> str:
    """返回一个在已序列化文本中不存在的标记。"""
    marker = _MARK_CHAR
    while marker in plain:
        marker += _MARK_CHAR
    return marker


def _mark_bare_words(value: JsonValue, marker: str) -> JsonValue:
    if isinstance(value, str):
        return f"{marker}{value}{marker}" if is_bare_word(value) else value
    if isinstance(value, list):
        return [_mark_bare_words(item, marker) for item in value]
    if isinstance(value, dict):
        return {key: _mark_bare_words(item, marker) for key, item in value.items()}
    return value


def _serialize(value: JsonValue, indent: int | None, token_aware: bool) -> str:
    separators = (",", ": ") if indent is not None else (",", ":")
    plain = json.dumps(value, indent=indent, separators=separators, ensure_ascii=False)
    if not token_aware:
        return plain
    marker = _pick_marker(plain)
    marked = _mark_bare_words(value, marker)
    text = json.dumps(marked, indent=indent, separators=separators, ensure_ascii=False)
    return re.sub(f'"{marker}([A-Za-z0-9_-]+){marker}"', r"\1", text)


def to_pretty_json(value: JsonValue, token_aware: bool = False) -> str:
    """2 空格缩进的 JSON。"""
    return _serialize(value, indent=2, token_aware=token_aware)


def to_minified_json(value: JsonValue, token_aware: bool = False) -> str:
    """不含任何空白的 JSON。"""
    return _serialize(value, indent=None, token_aware=token_aware)

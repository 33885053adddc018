"""
YAML-lite 转换器：递归的 YAML 风格美化输出。

它只是 YAML 的近似：足以让人对照阅读、估算 Token 开销，
不保证能被第三方 YAML 解析器无损读回。

规则：
- 标量：null / 布尔 / 数字取 JSON 字面量；字符串加 JSON 引号，
  Token 感知模式下符合裸词规则的省略引号
- 空数组 `[]`，空对象 `{}`
- 数组元素各占一行 `- item`；多行的嵌套元素首行紧跟 `- `，其余行再缩进两格
- 对象每个键一行：标量值内联为 `key: value`，嵌套值在 `key:` 下缩进一级
- 缩进单位 2 空格，从根（0 级）开始累积

示例::

    >>> to_yaml_lite({"a": {"b": 1}})
    'a:\\n  b: 1'
    >>> to_yaml_lite({"a": []})
    'a: []'
"""

from __future__ import annotations

import json
import re

from token_studio.convert.base import JsonValue
from token_studio.convert.quoting import quote_json_string, render_string

INDENT = "  "

# 不加引号就会破坏行结构的键
_UNSAFE_KEY_RE = re.compile(r"[:#\n\r]|^\s|\s$|^[-?\[\]{}&*!|>'\"%@`]")


def _render_scalar(value: JsonValue, token_aware: bool) -> str:
    if isinstance(value, str):
        return render_string(value, token_aware)
    return json.dumps(value)


def _render_key(key: str) -> str:
    if not key or _UNSAFE_KEY_RE.search(key):
        return quote_json_string(key)
    return key


def _is_block(value: JsonValue) -> bool:
    """非空容器需要展开成块，其余内联。"""
    return isinstance(value, (list, dict)) and len(value) > 0


def _render_inline(value: JsonValue, token_aware: bool) -> str:
    if isinstance(value, list):
        return "[]"
    if isinstance(value, dict):
        return "{}"
    return _render_scalar(value, token_aware)


def _render_block(value: JsonValue, level: int, token_aware: bool) -> list[str]:
    pad = INDENT * level
    lines: list[str] = []

    if isinstance(value, list):
        for item in value:
            if _is_block(item):
                nested = _render_block(item, 0, token_aware)
                lines.append(f"{pad}- {nested[0]}")
                lines.extend(f"{pad}{INDENT}{line}" for line in nested[1:])
            else:
                lines.append(f"{pad}- {_render_inline(item, token_aware)}")
        return lines

    for key, item in value.items():
        rendered_key = _render_key(key)
        if _is_block(item):
            lines.append(f"{pad}{rendered_key}:")
            lines.extend(_render_block(item, level + 1, token_aware))
        else:
            lines.append(f"{pad}{rendered_key}: {_render_inline(item, token_aware)}")
    return lines


def to_yaml_lite(value: JsonValue, token_aware: bool = False) -> str:
    """把解析后的 JSON 值渲染为 YAML-lite 文本。"""
    if not _is_block(value):
        return _render_inline(value, token_aware)
    return "\n".join(_render_block(value, 0, token_aware))

"""
TOML 风格转换器。

输出遵循 TOML 的键/表语法，但它是"TOML-like"的预览，不追求与第三方解析器
逐字节兼容：

- 根不是对象时输出单行 `value = <内联值>`
- 每张表先写直接的键值对，再写子表 `[a.b]`，最后写表数组 `[[a.items]]`
- 只有元素全为非空对象的数组才展开为表数组，其余数组内联，
  数组内的对象写成内联表 `{ k = v }`
- 空对象写作 `k = {}`；null 没有 TOML 对应物，直接写 `null`
- 键符合 `[A-Za-z0-9_-]+` 时裸写，否则加 JSON 引号
- 字符串为基本字符串（JSON 引号），Token 感知模式下裸词省略引号
- 节与节之间空一行；没有直接键值对的中间表不输出表头
"""

from __future__ import annotations

import json
import re

from token_studio.convert.base import JsonValue
from token_studio.convert.quoting import quote_json_string, render_string

ROOT_KEY = "value"

_BARE_KEY_RE = re.compile(r"[A-Za-z0-9_-]+")


def _render_key(key: str) -> str:
    return key if _BARE_KEY_RE.fullmatch(key) else quote_json_string(key)


def _is_table(value: JsonValue) -> bool:
    return isinstance(value, dict) and len(value) > 0


def _is_table_array(value: JsonValue) -> bool:
    return isinstance(value, list) and len(value) > 0 and all(_is_table(item) for item in value)


def _render_inline(value: JsonValue, token_aware: bool) -> str:
    if isinstance(value, str):
        return render_string(value, token_aware)
    if isinstance(value, list):
        return "[" + ", ".join(_render_inline(item, token_aware) for item in value) + "]"
    if isinstance(value, dict):
        if not value:
            return "{}"
        pairs = ", ".join(
            f"{_render_key(k)} = {_render_inline(v, token_aware)}" for k, v in value.items()
        )
        return "{ " + pairs + " }"
    return json.dumps(value)


class _TomlWriter:
    def __init__(self, token_aware: bool) -> None:
        self.token_aware = token_aware
        self.sections: list[list[str]] = []

    def write_table(self, table: dict[str, JsonValue], path: list[str], header: str | None) -> None:
        entries: list[str] = []
        subtables: list[tuple[str, dict[str, JsonValue]]] = []
        table_arrays: list[tuple[str, list[dict[str, JsonValue]]]] = []

        for key, value in table.items():
            rendered = _render_key(key)
            if _is_table(value):
                subtables.append((rendered, value))
            elif _is_table_array(value):
                table_arrays.append((rendered, value))
            else:
                entries.append(f"{rendered} = {_render_inline(value, self.token_aware)}")

        # 表数组元素即使没有直接键值对也必须写表头，否则元素个数会丢失
        if header is not None and (entries or header.startswith("[[")):
            self.sections.append([header, *entries])
        elif entries:
            self.sections.append(entries)

        for rendered, value in subtables:
            child = [*path, rendered]
            self.write_table(value, child, f"[{'.'.join(child)}]")

        for rendered, items in table_arrays:
            child = [*path, rendered]
            for item in items:
                self.write_table(item, child, f"[[{'.'.join(child)}]]")

    def render(self) -> str:
        return "\n\n".join("\n".join(section) for section in self.sections)


def to_toml(value: JsonValue, token_aware: bool = False) -> str:
    """把解析后的 JSON 值渲染为 TOML 风格文本。"""
    if not isinstance(value, dict):
        return f"{ROOT_KEY} = {_render_inline(value, token_aware)}"
    writer = _TomlWriter(token_aware)
    writer.write_table(value, [], None)
    return writer.render()

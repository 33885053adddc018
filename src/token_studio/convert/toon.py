"""
TOON（Token-Oriented Object Notation）编码器。

TOON 是面向 LLM 输入的紧凑表示法，在 JSON 数据模型上用缩进代替括号、
用带长度标记的数组头代替重复的键：

    users[2]{id,name}:
      1,Alice
      2,Bob
    tags[3]: a,b,c

编码规则：
- 对象：`key: value`；嵌套对象 `key:` 后缩进一级；空对象只写 `key:`
- 原始值数组：`key[N]: v1,v2`；空数组 `key[0]:`
- 对象数组若键集合一致且值全为原始值，使用表格形式 `key[N]{f1,f2}:` 加数据行
- 其余数组使用列表形式，每项一行 `- item`
- 非逗号分隔符会写进数组头：`key[N|]:`、`key[N\\t]:`
- 字符串仅在必要时加引号（空串、首尾空白、保留字、形似数字、含结构字符或分隔符、以 `-` 开头）
- 数字使用十进制规范形式：无指数、无多余的零，-0 写作 0
- 键折叠（safe）：单键对象链折叠为点路径 `a.b.c: 1`，仅当每一段都是合法标识符且不与兄弟键冲突

编码失败时 `to_toon` 返回空字符串（见该函数说明）。
"""

from __future__ import annotations

import logging
import math
import re
from decimal import Decimal

from token_studio.convert.base import JsonValue, KeyFolding

logger = logging.getLogger(__name__)

LIST_ITEM_PREFIX = "- "
INDENT_SIZE = 2
VALID_DELIMITERS = (",", "\t", "|")

_RESERVED_LITERALS = frozenset({"true", "false", "null"})
_NUMERIC_LIKE_RE = re.compile(r"-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?")
_LEADING_ZERO_RE = re.compile(r"0\d+")
_STRUCTURAL_RE = re.compile(r'[:"\\\[\]{}\n\r\t]')
_VALID_KEY_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_.]*")
_FOLDABLE_SEGMENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t"}


def _is_primitive(value: JsonValue) -> bool:
    return value is None or isinstance(value, (bool, int, float, str))


def format_number(value: int | float) -> str:
    """规范的十进制数字：无指数，无多余的零。非有限值编码为 null。"""
    if isinstance(value, int):
        return str(value)
    if not math.isfinite(value):
        return "null"
    if value == 0:
        return "0"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def quote(value: str) -> str:
    return '"' + "".join(_ESCAPES.get(ch, ch) for ch in value) + '"'


def encode_key(key: str) -> str:
    if _VALID_KEY_RE.fullmatch(key):
        return key
    return quote(key)


class ToonEncoder:
    """
    TOON 编码器。

    用法::

        encoder = ToonEncoder(delimiter="|", key_folding="safe")
        text = encoder.encode({"a": {"b": [1, 2]}})   # 'a.b[2|]: 1|2'

    参数:
        delimiter: 数组与表格行的分隔符（"," / "\\t" / "|"）
        key_folding: 键折叠模式（off / safe）
    """

    def __init__(self, delimiter: str = ",", key_folding: KeyFolding = "off") -> None:
        if delimiter not in VALID_DELIMITERS:
            raise ValueError(f"不支持的 TOON 分隔符：{delimiter!r}")
        if key_folding not in ("off", "safe"):
            raise ValueError(f"不支持的键折叠模式：{key_folding!r}")
        self.delimiter = delimiter
        self.key_folding = key_folding

    # ------------------------------------------------------------
    # 入口
    # ------------------------------------------------------------

    def encode(self, value: JsonValue) -> str:
        lines: list[str] = []
        if isinstance(value, dict):
            self._write_object(value, 0, lines)
        elif isinstance(value, list):
            self._write_array(None, value, 0, lines)
        else:
            return self.encode_primitive(value)
        return "\n".join(lines)

    # ------------------------------------------------------------
    # 原始值
    # ------------------------------------------------------------

    def encode_primitive(self, value: JsonValue) -> str:
        if value is None:
            return "null"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return format_number(value)
        if isinstance(value, str):
            return value if self._is_safe_unquoted(value) else quote(value)
        raise TypeError(f"类型 {type(value).__name__} 无法编码为 TOON")

    def _is_safe_unquoted(self, value: str) -> bool:
        if not value or value != value.strip():
            return False
        if value in _RESERVED_LITERALS:
            return False
        if _NUMERIC_LIKE_RE.fullmatch(value) or _LEADING_ZERO_RE.fullmatch(value):
            return False
        if _STRUCTURAL_RE.search(value) or self.delimiter in value:
            return False
        return not value.startswith("-")

    # ------------------------------------------------------------
    # 对象
    # ------------------------------------------------------------

    def _write_object(self, obj: dict[str, JsonValue], depth: int, lines: list[str]) -> None:
        siblings = set(obj)
        for key, value in obj.items():
            rendered, folded_value = self._fold(key, value, siblings)
            self._write_field(rendered, folded_value, depth, lines)

    def _write_field(self, key: str, value: JsonValue, depth: int, lines: list[str]) -> None:
        if isinstance(value, list):
            self._write_array(key, value, depth, lines)
        elif isinstance(value, dict):
            lines.append(self._line(depth, f"{key}:"))
            if value:
                self._write_object(value, depth + 1, lines)
        else:
            lines.append(self._line(depth, f"{key}: {self.encode_primitive(value)}"))

    def _fold(
        self,
        key: str,
        value: JsonValue,
        siblings: set[str],
    ) -> tuple[str, JsonValue]:
        """safe 模式下把单键对象链折叠为点路径。"""
        if self.key_folding != "safe" or not _FOLDABLE_SEGMENT_RE.fullmatch(key):
            return encode_key(key), value

        segments = [key]
        current = value
        while isinstance(current, dict) and len(current) == 1:
            (child_key, child_value), = current.items()
            if not _FOLDABLE_SEGMENT_RE.fullmatch(child_key):
                break
            segments.append(child_key)
            current = child_value

        if len(segments) == 1:
            return key, value
        folded = ".".join(segments)
        if folded in siblings:
            return key, value
        return folded, current

    # ------------------------------------------------------------
    # 数组
    # ------------------------------------------------------------

    def _header(self, key: str | None, length: int, fields: list[str] | None = None) -> str:
        marker = "" if self.delimiter == "," else self.delimiter
        header = f"{key or ''}[{length}{marker}]"
        if fields is not None:
            header += "{" + self.delimiter.join(encode_key(f) for f in fields) + "}"
        return header + ":"

    def _inline(self, key: str | None, arr: list[JsonValue]) -> str:
        header = self._header(key, len(arr))
        if not arr:
            return header
        return f"{header} " + self.delimiter.join(self.encode_primitive(v) for v in arr)

    def _tabular_fields(self, arr: list[JsonValue]) -> list[str] | None:
        """对象数组能否写成表格：键集合一致，值全为原始值。"""
        if not arr or not all(isinstance(item, dict) and item for item in arr):
            return None
        fields = list(arr[0].keys())
        field_set = set(fields)
        for item in arr:
            if set(item) != field_set or not all(_is_primitive(v) for v in item.values()):
                return None
        return fields

    def _write_rows(
        self,
        arr: list[dict[str, JsonValue]],
        fields: list[str],
        depth: int,
        lines: list[str],
    ) -> None:
        for item in arr:
            row = self.delimiter.join(self.encode_primitive(item[f]) for f in fields)
            lines.append(self._line(depth, row))

    def _write_array(
        self,
        key: str | None,
        arr: list[JsonValue],
        depth: int,
        lines: list[str],
        lead: str = "",
        child_depth: int | None = None,
    ) -> None:
        children = depth + 1 if child_depth is None else child_depth

        if all(_is_primitive(v) for v in arr):
            lines.append(self._line(depth, lead + self._inline(key, arr)))
            return

        fields = self._tabular_fields(arr)
        if fields is not None:
            lines.append(self._line(depth, lead + self._header(key, len(arr), fields)))
            self._write_rows(arr, fields, children, lines)
            return

        lines.append(self._line(depth, lead + self._header(key, len(arr))))
        for item in arr:
            self._write_list_item(item, children, lines)

    def _write_list_item(self, item: JsonValue, depth: int, lines: list[str]) -> None:
        if isinstance(item, dict):
            self._write_object_item(item, depth, lines)
        elif isinstance(item, list):
            self._write_array(None, item, depth, lines, lead=LIST_ITEM_PREFIX)
        else:
            lines.append(self._line(depth, LIST_ITEM_PREFIX + self.encode_primitive(item)))

    def _write_object_item(self, obj: dict[str, JsonValue], depth: int, lines: list[str]) -> None:
        """对象列表项：首个字段写在连字符行上，其余字段缩进一级。"""
        if not obj:
            lines.append(self._line(depth, LIST_ITEM_PREFIX.rstrip()))
            return

        siblings = set(obj)
        entries = list(obj.items())
        first_key, first_value = self._fold(entries[0][0], entries[0][1], siblings)

        if isinstance(first_value, list):
            self._write_array(
                first_key,
                first_value,
                depth,
                lines,
                lead=LIST_ITEM_PREFIX,
                child_depth=depth + 2,
            )
        elif isinstance(first_value, dict):
            lines.append(self._line(depth, f"{LIST_ITEM_PREFIX}{first_key}:"))
            if first_value:
                self._write_object(first_value, depth + 2, lines)
        else:
            lines.append(
                self._line(depth, f"{LIST_ITEM_PREFIX}{first_key}: {self.encode_primitive(first_value)}")
            )

        for key, value in entries[1:]:
            rendered, folded_value = self._fold(key, value, siblings)
            self._write_field(rendered, folded_value, depth + 1, lines)

    @staticmethod
    def _line(depth: int, content: str) -> str:
        return " " * (INDENT_SIZE * depth) + content


def to_toon(value: JsonValue, delimiter: str = ",", key_folding: KeyFolding = "off") -> str:
    """
    把解析后的 JSON 值编码为 TOON。

    编码失败时返回空字符串而不抛异常：编排层会把"无输出"状态连同输入本身的
    解析错误一起呈现，而不是展示一个次生的编码错误。失败只记录到 DEBUG 日志。
    """
    try:
        return ToonEncoder(delimiter=delimiter, key_folding=key_folding).encode(value)
    except (TypeError, ValueError, RecursionError) as e:
        logger.debug("TOON 编码失败，输出置空：%s", e)
        return ""

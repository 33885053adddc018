"""
Token Studio 格式转换器。

同一个解析值被扇出到五个互相独立的转换器：
pretty JSON、minified JSON、YAML-lite、TOON、TOML。
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from token_studio.convert.base import (
    ConvertOptions,
    FormatKind,
    JsonValue,
    KeyFolding,
    ViewMode,
    is_container,
    is_scalar,
)
from token_studio.convert.json_format import to_minified_json, to_pretty_json
from token_studio.convert.quoting import RESERVED_WORDS, is_bare_word, render_string
from token_studio.convert.toml_format import to_toml
from token_studio.convert.toon import ToonEncoder, to_toon
from token_studio.convert.yaml_lite import to_yaml_lite
from token_studio.errors import ConverterError

logger = logging.getLogger(__name__)

_CONVERTERS: dict[FormatKind, Callable[[JsonValue, ConvertOptions], str]] = {
    FormatKind.PRETTY: lambda v, o: to_pretty_json(v, token_aware=o.token_aware),
    FormatKind.MINIFIED: lambda v, o: to_minified_json(v, token_aware=o.token_aware),
    FormatKind.YAML: lambda v, o: to_yaml_lite(v, token_aware=o.token_aware),
    FormatKind.TOON: lambda v, o: to_toon(
        v, delimiter=o.toon_delimiter, key_folding=o.toon_key_folding
    ),
    FormatKind.TOML: lambda v, o: to_toml(v, token_aware=o.token_aware),
}


def convert_format(kind: FormatKind | str, value: JsonValue, options: ConvertOptions | None = None) -> str:
    """
    用指定格式渲染解析值。

    参数:
        kind: 输出格式
        value: 解析后的 JSON 值
        options: 转换选项，None 时使用默认值

    返回:
        渲染后的文本

    异常:
        ConverterError: 未知的格式名称
    """
    try:
        converter = _CONVERTERS[FormatKind(kind)]
    except ValueError as e:
        choices = " / ".join(k.value for k in FormatKind)
        raise ConverterError(
            what=f"不支持的输出格式：{kind}",
            how=f"可选格式：{choices}。",
            format_kind=str(kind),
        ) from e
    return converter(value, options or ConvertOptions())


def convert_all_formats(
    value: JsonValue,
    options: ConvertOptions | None = None,
) -> dict[FormatKind, str]:
    """按 FormatKind 声明顺序渲染全部格式。"""
    options = options or ConvertOptions()
    outputs = {kind: convert_format(kind, value, options) for kind in FormatKind}
    logger.debug(
        "转换完成：%s",
        ", ".join(f"{kind.value}={len(text)}" for kind, text in outputs.items()),
    )
    return outputs


__all__ = [
    "RESERVED_WORDS",
    "ConvertOptions",
    "FormatKind",
    "JsonValue",
    "KeyFolding",
    "ToonEncoder",
    "ViewMode",
    "convert_all_formats",
    "convert_format",
    "is_bare_word",
    "is_container",
    "is_scalar",
    "render_string",
    "to_minified_json",
    "to_pretty_json",
    "to_toml",
    "to_toon",
    "to_yaml_lite",
]

"""
CLI 工具函数：Rich 美化、输入读取、通用辅助。

提供 CLI 各子命令共用的实用函数，包括：
- Rich Console 美化输出
- 错误/成功信息统一格式
- Token 数字格式化与计数表格
- Token 高亮渲染
- 按命令行参数创建 TokenStudio 会话
"""

from __future__ import annotations

import colorsys
import re
import sys
from typing import Any, NoReturn

from rich.console import Console
from rich.style import Style
from rich.table import Table
from rich.text import Text

from token_studio.config.loader import load_settings
from token_studio.config.schema import SettingsFile
from token_studio.convert import FormatKind
from token_studio.errors import TokenStudioError
from token_studio.export import read_input_file
from token_studio.studio import ConversionResult, TokenStudio
from token_studio.tokenizer.backends import HttpTokenizeBackend, LocalTokenizeBackend
from token_studio.tokenizer.protocol import Token, color_for_token

# 全局 Console 实例
_console: Console | None = None

_HSL_RE = re.compile(r"hsl\((\d+),(\d+)%,(\d+)%\)")


def create_console() -> Console:
    """创建或获取全局 Rich Console 实例。"""
    global _console
    if _console is None:
        _console = Console()
    return _console


def print_error(message: str, exit_code: int = 1) -> NoReturn:
    """打印错误信息并退出程序。"""
    console = create_console()
    console.print(f"[bold red]X 错误：[/bold red]{message}")
    sys.exit(exit_code)


def print_success(message: str) -> None:
    console = create_console()
    console.print(f"[bold green]OK[/bold green] {message}")


def print_warning(message: str) -> None:
    console = create_console()
    console.print(f"[bold yellow]![/bold yellow] {message}")


def format_token_count(count: int) -> str:
    """
    格式化数字为带千分位分隔符的字符串。

    示例::

        >>> format_token_count(128000)
        '128,000'
    """
    return f"{count:,}"


def handle_token_studio_error(error: TokenStudioError) -> NoReturn:
    """统一处理 TokenStudioError：打印三段式信息并以 1 退出。"""
    console = create_console()
    console.print("\n[bold red]X 错误[/bold red]\n")
    console.print(error.full_message, markup=False)
    sys.exit(1)


def read_cli_input(input_path: str) -> str:
    """读取输入；`-` 表示标准输入。"""
    if input_path == "-":
        return sys.stdin.read()
    return read_input_file(input_path)


def parse_format(value: str) -> FormatKind:
    """解析 --format 参数。"""
    try:
        return FormatKind(value.lower())
    except ValueError:
        choices = " / ".join(kind.value for kind in FormatKind)
        print_error(f"不支持的格式：{value}（可选：{choices}）")


def build_settings(config_path: str | None, studio_overrides: dict[str, Any]) -> SettingsFile:
    """按 默认 → 设置文件 → 命令行 的优先级构建设置。"""
    overrides = {"studio": {k: v for k, v in studio_overrides.items() if v is not None}}
    return load_settings(path=config_path, overrides=overrides)


def create_studio(
    settings: SettingsFile,
    exact: bool = False,
    remote: str | None = None,
    debug: bool = False,
) -> TokenStudio:
    """
    根据 CLI 参数创建 TokenStudio 会话。

    `--remote` 优先于设置文件中的 tokenize_url；两者都没有时，
    `--exact` 使用进程内 tiktoken。
    """
    if remote:
        backend = HttpTokenizeBackend(remote, timeout=settings.server.request_timeout)
        return TokenStudio(config=settings.studio, backend=backend, debug=debug)
    if exact and not settings.server.tokenize_url:
        return TokenStudio(config=settings.studio, backend=LocalTokenizeBackend(), debug=debug)
    return TokenStudio.from_settings(settings, debug=debug)


def create_counts_table(result: ConversionResult, kinds: list[FormatKind] | None = None) -> Table:
    """每种格式的字符 / 字节 / Token 计数表。"""
    table = Table(title="计数", show_header=True, header_style="bold magenta")
    table.add_column("格式", style="cyan")
    table.add_column("字符", justify="right", style="white")
    table.add_column("字节", justify="right", style="white")
    table.add_column("Token", justify="right", style="blue")
    table.add_column("来源", style="dim")

    for kind in kinds or list(FormatKind):
        view = result.view(kind)
        table.add_row(
            kind.label,
            format_token_count(view.counts.characters),
            format_token_count(view.counts.bytes),
            format_token_count(view.counts.tokens),
            "精确" if view.exact else "近似",
        )
    return table


def token_style(token: Token) -> Style:
    """Token 高亮样式：相同 ID 同色，空白不着色。"""
    color = color_for_token(token)
    match = _HSL_RE.fullmatch(color or "")
    if match is None:
        return Style()
    hue, saturation, lightness = (int(part) for part in match.groups())
    r, g, b = colorsys.hls_to_rgb(hue / 360, lightness / 100, saturation / 100)
    return Style(color=f"rgb({round(r * 255)},{round(g * 255)},{round(b * 255)})", underline=True)


def render_tokens(tokens: list[Token]) -> Text:
    """把 Token 序列渲染为逐段着色的 Rich Text。"""
    text = Text()
    for token in tokens:
        text.append(token.text, style=token_style(token))
    return text

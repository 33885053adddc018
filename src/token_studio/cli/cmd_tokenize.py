"""
tokenize 命令：显示某个格式输出的逐 Token 明细。

优先使用精确分词；模型不受支持或分词失败时回退到近似分词。
"""

from __future__ import annotations

import asyncio

from rich.table import Table
from rich.text import Text

from token_studio.cli.utils import (
    build_settings,
    create_console,
    create_studio,
    format_token_count,
    handle_token_studio_error,
    parse_format,
    print_warning,
    read_cli_input,
    render_tokens,
    token_style,
)
from token_studio.errors import TokenStudioError
from token_studio.studio import ExactStatus, parse_input

console = create_console()

# 超过此数量只显示前面的行
MAX_TABLE_ROWS = 200


def tokenize_command(
    input_path: str,
    format: str = "minified",
    model: str | None = None,
    remote: str | None = None,
    config: str | None = None,
    verbose: bool = False,
) -> None:
    """打印 Token 表格与高亮预览。"""
    kind = parse_format(format)

    try:
        text = read_cli_input(input_path)
        if text.strip():
            parse_input(text)
        settings = build_settings(config, {"model": model, "show_tokens": True})
    except TokenStudioError as e:
        handle_token_studio_error(e)

    studio = create_studio(settings, exact=True, remote=remote, debug=verbose)
    result = studio.update(text)

    outcome = asyncio.run(studio.refresh_exact())
    if outcome.status is ExactStatus.FAILED:
        print_warning(f"精确分词失败，使用近似分词：{outcome.error}")
    elif outcome.status is ExactStatus.SKIPPED and result.has_output:
        print_warning(f"模型 {studio.config.model} 不支持精确分词，使用近似分词。")

    view = outcome.result.view(kind)
    source = f"tiktoken:{studio.config.model}" if view.exact else "approximate"

    table = Table(
        title=f"{kind.label}：{format_token_count(len(view.tokens))} 个 Token（{source}）",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("ID", justify="right", style="blue")
    table.add_column("文本", style="white")
    table.add_column("偏移", justify="right", style="dim")

    for index, token in enumerate(view.tokens[:MAX_TABLE_ROWS]):
        table.add_row(
            str(index),
            "-" if token.id_value is None else str(token.id_value),
            Text(repr(token.text), style=token_style(token)),
            f"{token.start}:{token.end}",
        )

    console.print(render_tokens(view.tokens))
    console.print()
    console.print(table)
    if len(view.tokens) > MAX_TABLE_ROWS:
        console.print(f"[dim]... 还有 {len(view.tokens) - MAX_TABLE_ROWS} 个 Token[/dim]")

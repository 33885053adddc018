"""
convert 命令：把 JSON 输入渲染为全部（或指定）格式并显示计数。
"""

from __future__ import annotations

import asyncio

from token_studio.cli.utils import (
    build_settings,
    create_console,
    create_counts_table,
    create_studio,
    handle_token_studio_error,
    parse_format,
    print_warning,
    read_cli_input,
    render_tokens,
)
from token_studio.convert import FormatKind
from token_studio.errors import TokenStudioError
from token_studio.studio import ConversionResult, ExactStatus, TokenStudio, parse_input
from token_studio.tokenizer.registry import is_supported

console = create_console()


def convert_command(
    input_path: str,
    format: str | None = None,
    token_aware: bool | None = None,
    delimiter: str | None = None,
    key_folding: str | None = None,
    exact: bool = False,
    remote: str | None = None,
    tokens: bool | None = None,
    config: str | None = None,
    verbose: bool = False,
) -> None:
    """
    转换输入并打印每种格式的输出与计数表。

    精确分词在 `--exact`、`--remote` 或设置文件配置了 tokenize_url 时执行；
    失败时回退到近似计数并给出提示。
    """
    kinds = [parse_format(format)] if format else list(FormatKind)

    try:
        text = read_cli_input(input_path)
        if text.strip():
            parse_input(text)
        settings = build_settings(
            config,
            {
                "token_aware": token_aware,
                "toon_delimiter": delimiter,
                "toon_key_folding": key_folding,
                "show_tokens": tokens,
            },
        )
    except TokenStudioError as e:
        handle_token_studio_error(e)

    studio = create_studio(settings, exact=exact, remote=remote, debug=verbose)
    result = studio.update(text)

    if not result.has_output:
        print_warning("输入为空，没有可转换的内容。")
        return

    if exact or remote or settings.server.tokenize_url:
        result = _refresh_exact(studio)

    for kind in kinds:
        _print_view(result, kind, show_tokens=studio.config.show_tokens)

    if studio.config.show_counts:
        console.print()
        console.print(create_counts_table(result, kinds))


def _refresh_exact(studio: TokenStudio) -> ConversionResult:
    outcome = asyncio.run(studio.refresh_exact())
    if outcome.status is ExactStatus.FAILED:
        print_warning(f"精确分词失败，显示近似计数：{outcome.error}")
    elif outcome.status is ExactStatus.SKIPPED and not is_supported(studio.config.model):
        print_warning(f"模型 {studio.config.model} 不支持精确分词，显示近似计数。")
    return outcome.result


def _print_view(result: ConversionResult, kind: FormatKind, show_tokens: bool) -> None:
    view = result.view(kind)
    console.rule(f"[bold cyan]{kind.label}[/bold cyan]")
    if show_tokens and view.tokens:
        console.print(render_tokens(view.tokens))
    else:
        console.print(view.display(), markup=False, highlight=False)

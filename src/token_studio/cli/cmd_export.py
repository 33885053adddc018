"""
export 命令：打印复制载荷。

- output：某个格式的输出原文
- ids：该输出的 Token ID JSON 数组（不含空白 Token）

载荷直接写到标准输出，便于管道到剪贴板工具（pbcopy / xclip / clip）。
"""

from __future__ import annotations

import asyncio

import typer

from token_studio.cli.utils import (
    build_settings,
    create_studio,
    handle_token_studio_error,
    parse_format,
    print_error,
    read_cli_input,
)
from token_studio.errors import TokenStudioError
from token_studio.export import output_payload, token_ids_payload


def export_command(
    input_path: str,
    format: str = "toon",
    what: str = "output",
    token_aware: bool | None = None,
    exact: bool = False,
    config: str | None = None,
) -> None:
    """把复制载荷写到标准输出。"""
    kind = parse_format(format)
    if what not in ("output", "ids"):
        print_error(f"不支持的载荷类型：{what}（可选：output / ids）")

    try:
        text = read_cli_input(input_path)
        settings = build_settings(
            config,
            {"token_aware": token_aware, "show_tokens": True if what == "ids" else None},
        )
    except TokenStudioError as e:
        handle_token_studio_error(e)

    studio = create_studio(settings, exact=exact)
    result = studio.update(text)
    if result.error is not None:
        print_error(f"输入不是合法的 JSON：{result.error}")

    if what == "output":
        typer.echo(output_payload(result, kind))
        return

    if exact or settings.server.tokenize_url:
        result = asyncio.run(studio.refresh_exact()).result
    typer.echo(token_ids_payload(result.view(kind).tokens))

"""
validate 命令：校验 YAML 设置文件。
"""

from __future__ import annotations

import sys
from pathlib import Path

from rich.panel import Panel

from token_studio.cli.utils import create_console, print_error, print_success
from token_studio.config.loader import load_settings, validate_settings_file

console = create_console()


def validate_command(path: str = "token_studio.yaml", show: bool = False) -> None:
    """
    校验设置文件的语法和字段。

    `--show` 在校验通过后打印合并默认值之后的完整设置。
    """
    if not Path(path).exists():
        print_error(f"文件不存在：{path}")

    console.print(f"[bold]校验设置文件：[/bold] {path}\n")
    errors = validate_settings_file(path)

    if errors:
        console.print(Panel(
            "\n".join(errors),
            title=f"[bold red]校验失败（{len(errors)} 个错误）[/bold red]",
            border_style="red",
        ))
        sys.exit(1)

    print_success(f"{path} 校验通过")
    if show:
        settings = load_settings(path)
        console.print_json(settings.model_dump_json())

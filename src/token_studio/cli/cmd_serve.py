"""
CLI 命令 serve：启动分词 HTTP 服务。
"""

from __future__ import annotations

import typer
from rich.panel import Panel
from rich.table import Table

from token_studio.cli.utils import create_console, handle_token_studio_error
from token_studio.config.loader import load_settings
from token_studio.errors import TokenStudioError

console = create_console()


def serve_command(
    host: str | None = None,
    port: int | None = None,
    model: str | None = None,
    config: str | None = None,
    cors: bool | None = None,
    reload: bool = False,
) -> None:
    """
    启动 HTTP API 服务器。

    未在命令行指定的项取自设置文件（server / studio 段），再退回内置默认值。
    """
    from token_studio import __version__

    try:
        settings = load_settings(path=config)
    except TokenStudioError as e:
        handle_token_studio_error(e)

    host = host or settings.server.host
    port = port or settings.server.port
    model = model or settings.studio.model
    cors = settings.server.cors if cors is None else cors

    console.print("\n[bold cyan]Token Studio HTTP API Server[/bold cyan]")
    console.print(f"[dim]Version: {__version__}[/dim]\n")

    config_table = Table(show_header=False, box=None, padding=(0, 2))
    config_table.add_column("Key", style="cyan")
    config_table.add_column("Value", style="yellow")
    config_table.add_row("监听地址", f"{host}:{port}")
    config_table.add_row("默认模型", model)
    config_table.add_row("设置文件", config or "[dim]自动搜索 / 内置默认[/dim]")
    config_table.add_row("CORS", "已启用" if cors else "已禁用")
    config_table.add_row("热重载", "已启用" if reload else "已禁用")
    console.print(Panel(config_table, title="[bold]配置信息[/bold]", border_style="blue"))

    endpoints_table = Table(show_header=True, box=None)
    endpoints_table.add_column("方法", style="green", width=8)
    endpoints_table.add_column("路径", style="cyan")
    endpoints_table.add_column("说明", style="white")
    for method, path, description in [
        ("POST", "/api/tokenize", "精确分词批次"),
        ("POST", "/api/convert", "转换输入并计数"),
        ("GET", "/health", "健康检查"),
        ("GET", "/docs", "OpenAPI 文档（交互式）"),
    ]:
        endpoints_table.add_row(method, path, description)
    console.print(Panel(endpoints_table, title="[bold]可用端点[/bold]", border_style="green"))

    console.print("\n[bold green]服务器正在启动...[/bold green]\n")

    try:
        import uvicorn

        from token_studio.cli.server import create_app

        app = create_app(model=model, enable_cors=cors)
        uvicorn.run(app, host=host, port=port, reload=reload, log_level="info")
    except KeyboardInterrupt:
        console.print("\n[yellow]服务器已停止[/yellow]")
        raise typer.Exit(0) from None
    except Exception as e:
        console.print(f"\n[red]服务器启动失败: {e}[/red]")
        raise typer.Exit(1) from e

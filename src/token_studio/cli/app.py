"""
Token Studio CLI：命令行工具入口。

提供 convert / tokenize / export / validate / serve / version 子命令。

用法::

    token-studio --help
    token-studio convert data.json
    token-studio convert data.json --format toon --delimiter pipe --key-folding safe
    token-studio tokenize data.json --format yaml
    token-studio export data.json --format toon --what ids
    token-studio validate token_studio.yaml
    token-studio serve
"""

from __future__ import annotations

import typer

from token_studio.cli.utils import create_console

app = typer.Typer(
    name="token-studio",
    help="Token Studio：JSON 多格式转换与 Token 计数 CLI",
    add_completion=False,
    no_args_is_help=True,
)

console = create_console()


# ============================================================
# 子命令注册
# ============================================================


@app.command(name="convert")
def convert(
    input_path: str = typer.Argument(..., help="输入 JSON 文件路径，'-' 表示标准输入"),
    format: str | None = typer.Option(
        None,
        "--format",
        "-f",
        help="只显示一种格式：pretty / minified / yaml / toon / toml",
    ),
    token_aware: bool | None = typer.Option(
        None,
        "--token-aware/--no-token-aware",
        help="省略安全裸词的引号",
    ),
    delimiter: str | None = typer.Option(
        None,
        "--delimiter",
        "-d",
        help="TOON 分隔符：comma / tab / pipe",
    ),
    key_folding: str | None = typer.Option(
        None,
        "--key-folding",
        help="TOON 键折叠：off / safe",
    ),
    exact: bool = typer.Option(False, "--exact", "-e", help="使用 tiktoken 精确计数"),
    remote: str | None = typer.Option(
        None,
        "--remote",
        help="远程分词服务地址（如 http://127.0.0.1:8000/api/tokenize）",
    ),
    tokens: bool | None = typer.Option(
        None,
        "--tokens/--no-tokens",
        help="高亮显示 Token",
    ),
    config: str | None = typer.Option(None, "--config", "-c", help="设置文件路径（默认自动搜索）"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="详细输出（显示调试信息）"),
) -> None:
    """把 JSON 渲染为各种格式并对比计数。"""
    from token_studio.cli.cmd_convert import convert_command

    convert_command(
        input_path=input_path,
        format=format,
        token_aware=token_aware,
        delimiter=delimiter,
        key_folding=key_folding,
        exact=exact,
        remote=remote,
        tokens=tokens,
        config=config,
        verbose=verbose,
    )


@app.command(name="tokenize")
def tokenize(
    input_path: str = typer.Argument(..., help="输入 JSON 文件路径，'-' 表示标准输入"),
    format: str = typer.Option("minified", "--format", "-f", help="要分词的输出格式"),
    model: str | None = typer.Option(None, "--model", "-m", help="分词模型（默认 cl100k_base）"),
    remote: str | None = typer.Option(None, "--remote", help="远程分词服务地址"),
    config: str | None = typer.Option(None, "--config", "-c", help="设置文件路径"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="详细输出"),
) -> None:
    """显示某个格式输出的逐 Token 明细。"""
    from token_studio.cli.cmd_tokenize import tokenize_command

    tokenize_command(
        input_path=input_path,
        format=format,
        model=model,
        remote=remote,
        config=config,
        verbose=verbose,
    )


@app.command(name="export")
def export(
    input_path: str = typer.Argument(..., help="输入 JSON 文件路径，'-' 表示标准输入"),
    format: str = typer.Option("toon", "--format", "-f", help="输出格式"),
    what: str = typer.Option("output", "--what", "-w", help="载荷类型：output / ids"),
    token_aware: bool | None = typer.Option(
        None,
        "--token-aware/--no-token-aware",
        help="省略安全裸词的引号",
    ),
    exact: bool = typer.Option(False, "--exact", "-e", help="ids 使用 tiktoken 精确分词"),
    config: str | None = typer.Option(None, "--config", "-c", help="设置文件路径"),
) -> None:
    """打印复制载荷（输出原文或 Token ID 数组）。"""
    from token_studio.cli.cmd_export import export_command

    export_command(
        input_path=input_path,
        format=format,
        what=what,
        token_aware=token_aware,
        exact=exact,
        config=config,
    )


@app.command(name="validate")
def validate(
    path: str = typer.Argument("token_studio.yaml", help="YAML 设置文件路径"),
    show: bool = typer.Option(False, "--show", help="校验通过后打印完整设置"),
) -> None:
    """校验 YAML 设置文件。"""
    from token_studio.cli.cmd_validate import validate_command

    validate_command(path=path, show=show)


@app.command(name="serve")
def serve(
    host: str | None = typer.Option(None, "--host", "-h", help="监听地址"),
    port: int | None = typer.Option(None, "--port", "-p", help="监听端口"),
    model: str | None = typer.Option(None, "--model", "-m", help="默认分词模型"),
    config: str | None = typer.Option(None, "--config", "-c", help="设置文件路径"),
    cors: bool | None = typer.Option(None, "--cors/--no-cors", help="启用 CORS"),
    reload: bool = typer.Option(False, "--reload", help="启用热重载（开发模式）"),
) -> None:
    """启动分词 HTTP API 服务器。"""
    from token_studio.cli.cmd_serve import serve_command

    serve_command(host=host, port=port, model=model, config=config, cors=cors, reload=reload)


@app.command(name="version")
def version() -> None:
    """显示版本信息。"""
    from token_studio import __version__

    console.print(f"Token Studio v{__version__}")


# ============================================================
# CLI 入口点
# ============================================================


def main() -> None:
    """CLI 入口点。"""
    app()


if __name__ == "__main__":
    main()

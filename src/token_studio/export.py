"""文件输入与复制载荷。"""

from __future__ import annotations

import json
from pathlib import Path

from token_studio.convert import FormatKind
from token_studio.errors import TokenStudioError
from token_studio.studio import ConversionResult
from token_studio.tokenizer.protocol import Token, token_ids


def read_input_file(path: str | Path) -> str:
    """
    读取输入文件的完整文本，不做任何修改。

    异常:
        TokenStudioError: 文件不存在或无法按 UTF-8 读取
    """
    file_path = Path(path)
    try:
        # newline="" 保留原始换行符
        with file_path.open("r", encoding="utf-8", newline="") as f:
            return f.read()
    except FileNotFoundError as e:
        raise TokenStudioError(
            what=f"找不到输入文件：{file_path}",
            how="检查文件路径是否正确。",
        ) from e
    except (OSError, UnicodeDecodeError) as e:
        raise TokenStudioError(
            what=f"无法读取输入文件：{file_path}",
            why=str(e),
            how="确认文件可读且为 UTF-8 编码的文本。",
        ) from e


def output_payload(result: ConversionResult, kind: FormatKind | str) -> str:
    """某个格式的复制载荷：输出原文。"""
    return result.output(kind)


def token_ids_payload(tokens: list[Token]) -> str:
    """Token ID 的 JSON 数组（不含空白 Token）。"""
    return json.dumps(token_ids(tokens))

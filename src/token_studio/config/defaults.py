"""
默认配置与分词模型注册表。

精确分词只认识一小组 tiktoken 编码方案。其中只有 cl100k_base 被正式支持，
其余方案已登记但保留（reserved），在精确分词边界上与未知模型一样被拒绝，
绝不静默替换为别的模型。
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TokenizationModelInfo:
    """分词模型的登记信息。"""

    model_id: str
    encoding_name: str
    supported: bool
    description: str = ""


# ============================================================
# 分词模型注册表
# ============================================================

TOKENIZATION_MODELS: dict[str, TokenizationModelInfo] = {
    "cl100k_base": TokenizationModelInfo(
        model_id="cl100k_base",
        encoding_name="cl100k_base",
        supported=True,
        description="GPT-4 / GPT-3.5-turbo 使用的 BPE 编码",
    ),
    "o200k_base": TokenizationModelInfo(
        model_id="o200k_base",
        encoding_name="o200k_base",
        supported=False,
        description="GPT-4o 系列（保留）",
    ),
    "p50k_base": TokenizationModelInfo(
        model_id="p50k_base",
        encoding_name="p50k_base",
        supported=False,
        description="Codex 系列（保留）",
    ),
    "r50k_base": TokenizationModelInfo(
        model_id="r50k_base",
        encoding_name="r50k_base",
        supported=False,
        description="GPT-3 系列（保留）",
    ),
}

DEFAULT_MODEL = "cl100k_base"

# TOON 分隔符的人类可读名称（CLI 与设置文件都接受名称或字符本身）
DELIMITER_NAMES: dict[str, str] = {
    "comma": ",",
    "tab": "\t",
    "pipe": "|",
}

DEFAULT_DELIMITER = ","

# 远程分词服务
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000
DEFAULT_TOKENIZE_PATH = "/api/tokenize"
DEFAULT_REQUEST_TIMEOUT = 10.0


def supported_models() -> list[str]:
    """返回可用于精确分词的模型 ID 列表。"""
    return sorted(m.model_id for m in TOKENIZATION_MODELS.values() if m.supported)


def list_models() -> list[str]:
    """返回所有已登记（含保留）模型的 ID 列表。"""
    return sorted(TOKENIZATION_MODELS.keys())


def resolve_delimiter(value: str) -> str:
    """把 'comma' / 'tab' / 'pipe' 或分隔符本身解析为分隔符字符。"""
    if value in DELIMITER_NAMES.values():
        return value
    try:
        return DELIMITER_NAMES[value.lower()]
    except KeyError:
        raise ValueError(
            f"未知的 TOON 分隔符 {value!r}，可选值：comma / tab / pipe。"
        ) from None

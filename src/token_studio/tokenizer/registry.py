"""
Tokenizer 注册表：模型 ID 到编码方案的解析，以及展示层的回退选择。

两种策略有意不同：
- 精确分词边界（`resolve_encoding_name`）对不受支持的模型直接报错；
- 展示层（`get_tokenizer`）可以回退到近似分词器，仅用于显示。
"""

from __future__ import annotations

import logging

from token_studio.config.defaults import TOKENIZATION_MODELS, supported_models
from token_studio.errors import UnsupportedModelError
from token_studio.tokenizer.protocol import Token, Tokenizer

logger = logging.getLogger(__name__)

# Tokenizer 实例缓存（避免重复创建）
_tokenizer_cache: dict[str, Tokenizer] = {}


def is_supported(model: str) -> bool:
    """模型是否可用于精确分词。"""
    info = TOKENIZATION_MODELS.get(model)
    return info is not None and info.supported


def resolve_encoding_name(model: str) -> str:
    """
    把模型 ID 解析为 tiktoken 编码方案名称。

    参数:
        model: 分词模型 ID

    返回:
        编码方案名称

    异常:
        UnsupportedModelError: 模型未登记或仅为保留项
    """
    info = TOKENIZATION_MODELS.get(model)
    if info is None or not info.supported:
        available = supported_models()
        why = (
            f"'{model}' 已登记但尚未支持精确分词。"
            if info is not None
            else f"'{model}' 不在分词模型注册表中。"
        )
        raise UnsupportedModelError(
            what=f"Unsupported model: {model}",
            why=why,
            how=f"可用模型：{', '.join(available)}。或关闭精确分词使用近似计数。",
            model=model,
            supported_models=available,
        )
    return info.encoding_name


class _SingleTextTokenizer:
    """把批量精确分词器包装为单文本的 Tokenizer 协议实现。"""

    def __init__(self, model: str) -> None:
        from token_studio.tokenizer.tiktoken_adapter import ExactTokenizer

        self._model = model
        self._exact = ExactTokenizer()

    def tokenize(self, text: str) -> list[Token]:
        return self._exact.tokenize_batch(self._model, {"text": text})["text"]

    def count(self, text: str) -> int:
        return len(self.tokenize(text))

    @property
    def name(self) -> str:
        return f"tiktoken:{self._model}"


def get_tokenizer(model: str) -> Tokenizer:
    """
    为展示层选择 Tokenizer。

    查找优先级：
    1. 受支持模型 → tiktoken 精确分词
    2. 其他 → 近似分词器（仅供显示）

    参数:
        model: 分词模型 ID

    返回:
        Tokenizer 实例
    """
    if model in _tokenizer_cache:
        return _tokenizer_cache[model]

    tokenizer: Tokenizer
    if is_supported(model):
        tokenizer = _SingleTextTokenizer(model)
    else:
        from token_studio.tokenizer.approximate import ApproximateTokenizer

        logger.info("模型 '%s' 不支持精确分词，展示层使用近似分词器。", model)
        tokenizer = ApproximateTokenizer()

    _tokenizer_cache[model] = tokenizer
    return tokenizer


def clear_cache() -> None:
    """清除 Tokenizer 缓存。通常仅在测试中使用。"""
    _tokenizer_cache.clear()

"""
Token Studio 分词模块。

- 近似分词：零依赖、同步，永远可用
- 精确分词：tiktoken 批量适配器，可在工作线程或远程服务中执行并可取消
"""

from token_studio.tokenizer.approximate import (
    ApproximateTokenizer,
    approximate_token_count,
    approximate_tokenize,
)
from token_studio.tokenizer.backends import (
    HttpTokenizeBackend,
    LocalTokenizeBackend,
    TokenizeBackend,
    TokenizeCancelled,
    TokenizeFailure,
    TokenizeOutcome,
    TokenizeSuccess,
)
from token_studio.tokenizer.cancel import CancelToken
from token_studio.tokenizer.counting import Counts, byte_length, char_length, count_text
from token_studio.tokenizer.protocol import (
    WHITESPACE,
    Identified,
    Token,
    TokenId,
    Tokenizer,
    Whitespace,
    color_for_token,
    token_ids,
)
from token_studio.tokenizer.registry import (
    clear_cache,
    get_tokenizer,
    is_supported,
    resolve_encoding_name,
)
from token_studio.tokenizer.tiktoken_adapter import ExactTokenizer

__all__ = [
    "WHITESPACE",
    "ApproximateTokenizer",
    "CancelToken",
    "Counts",
    "ExactTokenizer",
    "HttpTokenizeBackend",
    "Identified",
    "LocalTokenizeBackend",
    "Token",
    "TokenId",
    "TokenizeBackend",
    "TokenizeCancelled",
    "TokenizeFailure",
    "TokenizeOutcome",
    "TokenizeSuccess",
    "Tokenizer",
    "Whitespace",
    "approximate_token_count",
    "approximate_tokenize",
    "byte_length",
    "char_length",
    "clear_cache",
    "color_for_token",
    "count_text",
    "get_tokenizer",
    "is_supported",
    "resolve_encoding_name",
    "token_ids",
]

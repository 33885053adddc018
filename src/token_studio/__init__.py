"""
Token Studio：把 JSON 渲染为多种格式，并对比每种格式的 Token 开销。

同一份数据可以写成 pretty JSON、minified JSON、YAML-lite、TOON 或 TOML，
它们在 LLM 上下文里占用的 Token 数差别很大。Token Studio 把五种输出并排生成，
给出字符数、字节数与 Token 数（近似估算立即可得，tiktoken 精确计数异步补上）。

快速上手::

    from token_studio import convert_all

    result = convert_all('{"users": [{"id": 1, "name": "Ada"}]}')
    result.output("toon")          # 'users[1]{id,name}:\\n  1,Ada'
    result.counts("toon").tokens   # 近似 Token 数

带精确计数的会话::

    from token_studio import TokenStudio

    studio = TokenStudio()
    studio.update(text)
    await studio.refresh_exact()
    studio.result.counts("minified").tokens
"""

from token_studio.config import (
    DEFAULT_MODEL,
    ServerConfig,
    SettingsFile,
    StudioConfig,
    load_settings,
)
from token_studio.convert import (
    ConvertOptions,
    FormatKind,
    ToonEncoder,
    ViewMode,
    convert_all_formats,
    convert_format,
    is_bare_word,
    to_minified_json,
    to_pretty_json,
    to_toml,
    to_toon,
    to_yaml_lite,
)
from token_studio.errors import (
    ConfigValidationError,
    ConverterError,
    InputParseError,
    SettingsLoadError,
    TokenizationCancelled,
    TokenizerError,
    TokenStudioError,
    UnsupportedModelError,
)
from token_studio.export import output_payload, read_input_file, token_ids_payload
from token_studio.studio import (
    ConversionResult,
    ExactOutcome,
    ExactStatus,
    FormatView,
    TokenStudio,
    convert_all,
    parse_input,
)
from token_studio.tokenizer import (
    ApproximateTokenizer,
    CancelToken,
    Counts,
    ExactTokenizer,
    HttpTokenizeBackend,
    Identified,
    LocalTokenizeBackend,
    Token,
    TokenId,
    Whitespace,
    approximate_token_count,
    approximate_tokenize,
    count_text,
)

__version__ = "0.1.0"

__all__ = [
    # 顶层入口
    "TokenStudio",
    "convert_all",
    "parse_input",
    "ConversionResult",
    "FormatView",
    "ExactStatus",
    "ExactOutcome",
    # 转换器
    "FormatKind",
    "ViewMode",
    "ConvertOptions",
    "ToonEncoder",
    "convert_format",
    "convert_all_formats",
    "is_bare_word",
    "to_pretty_json",
    "to_minified_json",
    "to_yaml_lite",
    "to_toon",
    "to_toml",
    # 分词
    "Token",
    "TokenId",
    "Whitespace",
    "Identified",
    "Counts",
    "count_text",
    "approximate_token_count",
    "approximate_tokenize",
    "ApproximateTokenizer",
    "ExactTokenizer",
    "CancelToken",
    "LocalTokenizeBackend",
    "HttpTokenizeBackend",
    # 导出
    "read_input_file",
    "output_payload",
    "token_ids_payload",
    # 配置
    "DEFAULT_MODEL",
    "StudioConfig",
    "ServerConfig",
    "SettingsFile",
    "load_settings",
    # 异常
    "TokenStudioError",
    "InputParseError",
    "ConverterError",
    "TokenizerError",
    "UnsupportedModelError",
    "TokenizationCancelled",
    "ConfigValidationError",
    "SettingsLoadError",
]

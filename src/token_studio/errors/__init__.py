"""
Token Studio 结构化异常体系。

所有异常遵循"三段式"规范：What / Why / How to fix。
"""

from token_studio.errors.exceptions import (
    ConfigValidationError,
    ConverterError,
    InputParseError,
    SettingsLoadError,
    TokenizationCancelled,
    TokenizerError,
    TokenStudioError,
    UnsupportedModelError,
)

__all__ = [
    "ConfigValidationError",
    "ConverterError",
    "InputParseError",
    "SettingsLoadError",
    "TokenStudioError",
    "TokenizationCancelled",
    "TokenizerError",
    "UnsupportedModelError",
]

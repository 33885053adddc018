"""
Token Studio 配置模块。

提供 YAML 设置加载、分词模型注册表和默认配置。
"""

from token_studio.config.defaults import (
    DEFAULT_MODEL,
    TOKENIZATION_MODELS,
    TokenizationModelInfo,
    list_models,
    resolve_delimiter,
    supported_models,
)
from token_studio.config.loader import load_settings, validate_settings_file
from token_studio.config.schema import ServerConfig, SettingsFile, StudioConfig

__all__ = [
    "DEFAULT_MODEL",
    "TOKENIZATION_MODELS",
    "ServerConfig",
    "SettingsFile",
    "StudioConfig",
    "TokenizationModelInfo",
    "list_models",
    "load_settings",
    "resolve_delimiter",
    "supported_models",
    "validate_settings_file",
]

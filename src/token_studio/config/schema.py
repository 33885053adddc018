"""
设置文件的 Schema 定义与校验。

界面上的各种开关（显示计数、显示 Token、Token 感知模式、复制就绪、
分词模型、每个标签页的展示模式）统一建模为一个不可变的 `StudioConfig`，
每次转换时显式传入编排层，而不是散落在全局可变状态里。

YAML 文件示例::

    version: "1.0"
    studio:
      show_tokens: true
      token_aware: true
      toon_delimiter: pipe
    server:
      port: 8080
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from token_studio.config.defaults import (
    DEFAULT_DELIMITER,
    DEFAULT_HOST,
    DEFAULT_MODEL,
    DEFAULT_PORT,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_TOKENIZE_PATH,
    resolve_delimiter,
)
from token_studio.convert.base import ConvertOptions, FormatKind, ViewMode


def _default_view_modes() -> dict[FormatKind, ViewMode]:
    return {kind: ViewMode.TEXT for kind in FormatKind}


class StudioConfig(BaseModel):
    """
    单次转换的完整展示配置。

    冻结模型：任何修改都通过 `model_copy(update=...)` 产生新值，
    编排层整体替换，不做局部修改。
    """

    model_config = ConfigDict(frozen=True)

    show_counts: bool = Field(default=True, description="是否显示字符/字节/Token 计数")
    show_tokens: bool = Field(default=False, description="是否显示 Token 高亮")
    token_aware: bool = Field(default=False, description="省略安全裸词的引号")
    copy_ready: bool = Field(default=False, description="在 to_dict / /api/convert 的结果中附带复制用载荷")
    model: str = Field(default=DEFAULT_MODEL, min_length=1, description="精确分词模型")
    toon_delimiter: str = Field(default=DEFAULT_DELIMITER, description="TOON 分隔符")
    toon_key_folding: Literal["off", "safe"] = Field(default="off", description="TOON 键折叠")
    view_modes: dict[FormatKind, ViewMode] = Field(
        default_factory=_default_view_modes,
        description="每个格式标签页的展示模式",
    )

    @field_validator("toon_delimiter", mode="before")
    @classmethod
    def _normalize_delimiter(cls, value: object) -> str:
        """接受 comma / tab / pipe 名称或分隔符字符本身。"""
        if not isinstance(value, str):
            raise ValueError("toon_delimiter 必须是字符串")
        return resolve_delimiter(value)

    @field_validator("view_modes", mode="after")
    @classmethod
    def _fill_view_modes(cls, value: dict[FormatKind, ViewMode]) -> dict[FormatKind, ViewMode]:
        """未指定的格式默认使用文本视图。"""
        merged = _default_view_modes()
        merged.update(value)
        return merged

    @property
    def wants_tokenization(self) -> bool:
        """是否需要精确分词（显示 Token 或显示计数）。"""
        return self.show_tokens or self.show_counts

    def convert_options(self) -> ConvertOptions:
        """提取转换器需要的选项。"""
        return ConvertOptions(
            token_aware=self.token_aware,
            toon_delimiter=self.toon_delimiter,
            toon_key_folding=self.toon_key_folding,
        )

    def view_mode(self, kind: FormatKind) -> ViewMode:
        """返回某个格式的展示模式。"""
        return self.view_modes.get(kind, ViewMode.TEXT)


class ServerConfig(BaseModel):
    """分词服务与客户端配置。"""

    host: str = Field(default=DEFAULT_HOST, description="监听地址")
    port: int = Field(default=DEFAULT_PORT, description="监听端口", gt=0, lt=65536)
    cors: bool = Field(default=False, description="是否启用 CORS")
    tokenize_url: str | None = Field(
        default=None,
        description="远程分词服务地址。None 时使用进程内 tiktoken",
    )
    request_timeout: float = Field(
        default=DEFAULT_REQUEST_TIMEOUT,
        description="远程分词请求超时（秒）",
        gt=0,
    )

    @property
    def local_tokenize_url(self) -> str:
        """本机服务的分词端点。"""
        return f"http://{self.host}:{self.port}{DEFAULT_TOKENIZE_PATH}"


class SettingsFile(BaseModel):
    """
    完整的设置文件：对应 YAML 文件的根结构。

    每个字段都有合理的默认值，空文件即为默认配置。
    """

    version: str = Field(default="1.0", description="设置文件版本")
    studio: StudioConfig = Field(default_factory=StudioConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

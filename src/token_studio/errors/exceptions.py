"""
结构化异常体系：错误信息即文档。

每条异常遵循"三段式"规范：
1. What went wrong（发生了什么）
2. Why it happened（为什么发生）
3. How to fix it（怎么修）

Token Studio 的所有错误都是可恢复的：最坏情况下退化为"仅近似计数"，
而不会让整个进程失败。

示例::

    UnsupportedModelError(
        what="不支持的分词模型 'o200k_base'。",
        why="当前仅支持 cl100k_base 的精确分词。",
        how="改用 cl100k_base，或关闭精确分词以使用近似计数。",
        model="o200k_base",
    )
"""

from __future__ import annotations

from typing import Any


class TokenStudioError(Exception):
    """
    Token Studio 异常基类。

    所有 Token Studio 异常都继承自此类，支持三段式错误消息。

    属性:
        what: 发生了什么
        why: 为什么发生
        how: 怎么修复
        details: 额外的上下文信息（用于调试）
        status_code: 经 HTTP 边界返回时使用的状态码
    """

    status_code: int = 400

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        self.what = what
        self.why = why
        self.how = how
        self.details = details or {}

        parts = [what]
        if why:
            parts.append(f"→ 原因：{why}")
        if how:
            parts.append(f"→ 修复建议：{how}")

        self.full_message = "\n".join(parts)
        super().__init__(self.full_message)

    def __str__(self) -> str:
        return self.full_message

    def to_dict(self) -> dict[str, Any]:
        """转换为字典格式，用于 JSON API 响应。"""
        result: dict[str, Any] = {
            "error_type": type(self).__name__,
            "what": self.what,
        }
        if self.why:
            result["why"] = self.why
        if self.how:
            result["how"] = self.how
        if self.details:
            result["details"] = self.details
        return result


# === 输入相关异常 ===


class InputParseError(TokenStudioError):
    """
    输入解析异常。

    当输入文本不是合法 JSON 时抛出。`parser_message` 保留解析器的原始信息，
    编排层会把它原样展示给用户。
    """

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        parser_message: str = "",
        line: int = 0,
        column: int = 0,
        **kwargs: Any,
    ) -> None:
        details: dict[str, Any] = {"line": line, "column": column}
        details.update(kwargs)
        super().__init__(what=what, why=why, how=how, details=details)
        self.parser_message = parser_message or what
        self.line = line
        self.column = column


# === 转换相关异常 ===


class ConverterError(TokenStudioError):
    """
    格式转换异常。

    请求了未知的输出格式时抛出。TOON 编码自身的失败不走这里，
    而是降级为空字符串。
    """

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        format_kind: str = "",
        **kwargs: Any,
    ) -> None:
        details: dict[str, Any] = {"format_kind": format_kind}
        details.update(kwargs)
        super().__init__(what=what, why=why, how=how, details=details)
        self.format_kind = format_kind


# === Tokenizer 相关异常 ===


class TokenizerError(TokenStudioError):
    """
    Tokenizer 异常。

    精确分词批次中任一文本失败时抛出，整个批次作废（HTTP 500）。
    """

    status_code = 500


class UnsupportedModelError(TokenizerError):
    """
    不支持的分词模型。

    属于客户端错误（HTTP 400），不会自动重试，也不会悄悄替换成其他模型。
    """

    status_code = 400

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        model: str = "",
        supported_models: list[str] | None = None,
        **kwargs: Any,
    ) -> None:
        details: dict[str, Any] = {"model": model}
        if supported_models:
            details["supported_models"] = supported_models
        details.update(kwargs)
        super().__init__(what=what, why=why, how=how, details=details)
        self.model = model


class TokenizationCancelled(TokenStudioError):
    """
    精确分词批次已被取消。

    这是控制流信号而非用户可见的错误：被新请求取代的批次以此结束，
    其结果会被无条件丢弃。
    """

    def __init__(self, what: str = "分词批次已取消。", **kwargs: Any) -> None:
        super().__init__(what=what, **kwargs)


# === 配置相关异常 ===


class ConfigValidationError(TokenStudioError):
    """
    配置校验异常。

    当 YAML 设置文件字段不合法时抛出。

    示例::

        raise ConfigValidationError(
            what="设置文件 'token_studio.yaml' 校验失败。",
            why="字段 'studio.toon_delimiter' 的值 ';' 不在 [',', '\\t', '|'] 中。",
            how="将 toon_delimiter 改为 comma / tab / pipe 之一。",
            config_path="token_studio.yaml",
            field_path="studio.toon_delimiter",
        )
    """

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        config_path: str = "",
        field_path: str = "",
        **kwargs: Any,
    ) -> None:
        details = {
            "config_path": config_path,
            "field_path": field_path,
        }
        details.update(kwargs)
        super().__init__(what=what, why=why, how=how, details=details)
        self.config_path = config_path
        self.field_path = field_path


class SettingsLoadError(TokenStudioError):
    """
    设置文件加载异常。

    当设置文件不存在、格式错误或无法解析时抛出。
    """

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        file_path: str = "",
        **kwargs: Any,
    ) -> None:
        details = {"file_path": file_path}
        details.update(kwargs)
        super().__init__(what=what, why=why, how=how, details=details)
        self.file_path = file_path

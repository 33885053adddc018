"""
TokenStudio：编排层。

把一段输入文本变成五种格式的输出、每种输出的计数与 Token 序列。

数据流::

    原始文本 ─ json.loads（严格） ─┬─ pretty JSON ─┐
                                   ├─ minified    ├─ 计数 + 近似分词（同步）
                                   ├─ YAML-lite   │
                                   ├─ TOON        ├─ 精确分词批次（异步、可取消）
                                   └─ TOML ───────┘

使用示例
--------

一次性转换（只有近似计数）::

    from token_studio import StudioConfig, convert_all

    result = convert_all('{"a": [1, 2]}', StudioConfig())
    result.view("toon").output          # 'a[2]: 1,2'

带精确分词的会话::

    studio = TokenStudio()
    studio.update('{"a": [1, 2]}')
    outcome = await studio.refresh_exact()
    outcome.status                      # ExactStatus.APPLIED

每次 `update` 都整体重建结果；同一时刻只有一个权威的精确分词批次，
被取代的批次即使已经成功完成，其结果也会被丢弃。
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Any

from token_studio.config.schema import SettingsFile, StudioConfig
from token_studio.convert import FormatKind, JsonValue, ViewMode, convert_all_formats
from token_studio.errors import InputParseError
from token_studio.tokenizer.approximate import approximate_token_count, approximate_tokenize
from token_studio.tokenizer.backends import (
    HttpTokenizeBackend,
    LocalTokenizeBackend,
    TokenizeBackend,
    TokenizeCancelled,
    TokenizeFailure,
)
from token_studio.tokenizer.cancel import CancelToken
from token_studio.tokenizer.counting import Counts, count_text
from token_studio.tokenizer.protocol import Token, token_ids
from token_studio.tokenizer.registry import is_supported

logger = logging.getLogger(__name__)


# ============================================================
# 输入解析
# ============================================================


def _reject_constant(name: str) -> None:
    raise ValueError(f"Invalid JSON literal: {name}")


def parse_input(text: str) -> JsonValue:
    """
    严格解析 JSON 输入。

    NaN / Infinity / -Infinity 不是合法 JSON，同样视为解析失败。

    异常:
        InputParseError: 输入不是合法 JSON；`parser_message` 为解析器原始信息
    """
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except ValueError as e:
        raise InputParseError(
            what="输入不是合法的 JSON。",
            why=str(e),
            how="检查括号、引号与逗号是否配对；注意 JSON 不允许尾逗号与注释。",
            parser_message=str(e),
            line=getattr(e, "lineno", 0),
            column=getattr(e, "colno", 0),
        ) from e
    except RecursionError as e:
        raise InputParseError(
            what="输入嵌套过深，无法解析。",
            how="减少对象/数组的嵌套层数。",
            parser_message="Maximum nesting depth exceeded",
        ) from e


# ============================================================
# 结果模型
# ============================================================


@dataclass(frozen=True)
class FormatView:
    """
    单个格式的渲染结果。

    属性:
        kind: 输出格式
        output: 渲染后的文本（无输入或解析失败时为空串）
        counts: 字符 / 字节 / Token 计数
        tokens: 用于高亮的 Token 序列（未开启 Token 显示时为空）
        exact: 计数与 Token 是否来自精确分词
        view_mode: 展示原文还是 Token ID
    """

    kind: FormatKind
    output: str = ""
    counts: Counts = field(default_factory=Counts)
    tokens: list[Token] = field(default_factory=list)
    exact: bool = False
    view_mode: ViewMode = ViewMode.TEXT

    def render_ids(self) -> str:
        """空格分隔的 Token ID 视图（跳过空白 Token）。"""
        return " ".join(str(i) for i in token_ids(self.tokens))

    def display(self) -> str:
        """按展示模式返回原文或 Token ID 视图。"""
        if self.view_mode is ViewMode.IDS:
            return self.render_ids()
        return self.output

    def copy_payloads(self) -> dict[str, str]:
        """两种复制载荷：输出原文，以及 Token ID 的 JSON 数组（不含空白 Token）。"""
        return {"output": self.output, "token_ids": json.dumps(token_ids(self.tokens))}

    def to_dict(self, copy_ready: bool = False) -> dict[str, Any]:
        data = {
            "kind": self.kind.value,
            "output": self.output,
            "counts": asdict(self.counts),
            "tokens": [t.to_wire() for t in self.tokens],
            "exact": self.exact,
        }
        if copy_ready:
            data["copy"] = self.copy_payloads()
        return data


@dataclass(frozen=True)
class ConversionResult:
    """一次转换的完整结果：每种格式一个 FormatView，外加解析错误信息。"""

    views: dict[FormatKind, FormatView]
    error: str | None = None

    @classmethod
    def empty(cls, config: StudioConfig, error: str | None = None) -> ConversionResult:
        views = {
            kind: FormatView(kind=kind, view_mode=config.view_mode(kind)) for kind in FormatKind
        }
        return cls(views=views, error=error)

    def view(self, kind: FormatKind | str) -> FormatView:
        return self.views[FormatKind(kind)]

    def output(self, kind: FormatKind | str) -> str:
        return self.view(kind).output

    def counts(self, kind: FormatKind | str) -> Counts:
        return self.view(kind).counts

    @property
    def has_output(self) -> bool:
        return any(v.output for v in self.views.values())

    def texts(self) -> dict[str, str]:
        """精确分词批次的输入：格式名 → 输出文本。"""
        return {kind.value: view.output for kind, view in self.views.items()}

    def with_exact(
        self,
        exact_tokens: dict[str, list[Token]],
        include_tokens: bool,
    ) -> ConversionResult:
        """
        用精确分词结果替换近似值。

        只替换批次结果中存在且输出非空的格式；其余格式保留近似计数。
        """
        views = dict(self.views)
        for kind, current in self.views.items():
            tokens = exact_tokens.get(kind.value)
            if tokens is None or not current.output:
                continue
            views[kind] = replace(
                current,
                counts=current.counts.with_tokens(len(tokens)),
                tokens=list(tokens) if include_tokens else [],
                exact=True,
            )
        return replace(self, views=views)

    def to_dict(self, copy_ready: bool = False) -> dict[str, Any]:
        return {
            "error": self.error,
            "formats": {
                kind.value: view.to_dict(copy_ready) for kind, view in self.views.items()
            },
        }


def convert_all(text: str, config: StudioConfig | None = None) -> ConversionResult:
    """
    一次完整的同步转换。

    - 纯空白输入：所有输出为空串，没有错误
    - 解析失败：所有输出为空串，`error` 为解析器信息，不运行任何转换器
    - 成功：五种输出，各自的近似计数；开启 show_tokens 时附带近似 Token 序列
    """
    config = config or StudioConfig()
    if not text.strip():
        return ConversionResult.empty(config)

    try:
        value = parse_input(text)
    except InputParseError as e:
        logger.debug("输入解析失败：%s", e.parser_message)
        return ConversionResult.empty(config, error=e.parser_message)

    outputs = convert_all_formats(value, config.convert_options())
    views: dict[FormatKind, FormatView] = {}
    for kind, output in outputs.items():
        views[kind] = FormatView(
            kind=kind,
            output=output,
            counts=count_text(output).with_tokens(approximate_token_count(output)),
            tokens=approximate_tokenize(output) if config.show_tokens else [],
            view_mode=config.view_mode(kind),
        )
    return ConversionResult(views=views)


# ============================================================
# 会话
# ============================================================


class ExactStatus(str, Enum):
    """一次精确分词刷新的结局。"""

    APPLIED = "applied"
    CANCELLED = "cancelled"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ExactOutcome:
    status: ExactStatus
    result: ConversionResult
    error: str | None = None


class TokenStudio:
    """
    有状态的转换会话，拥有唯一的在途精确分词批次。

    基本用法::

        studio = TokenStudio()
        studio.update('{"users": [{"id": 1}]}')
        await studio.refresh_exact()
        studio.result.counts("toon").tokens

    使用远程分词服务::

        studio = TokenStudio(backend=HttpTokenizeBackend("http://127.0.0.1:8000/api/tokenize"))

    参数:
        config: 初始展示配置，None 时使用默认值
        backend: 精确分词后端，None 时使用进程内 tiktoken
        debug: 是否启用调试日志
    """

    def __init__(
        self,
        config: StudioConfig | None = None,
        backend: TokenizeBackend | None = None,
        debug: bool = False,
    ) -> None:
        self._config = config or StudioConfig()
        self._backend = backend or LocalTokenizeBackend()
        self._text = ""
        self._result = ConversionResult.empty(self._config)
        self._tokenize_error: str | None = None
        self._generation = 0
        self._cancel: CancelToken | None = None

        if debug:
            logging.basicConfig(level=logging.DEBUG)
            logger.debug(
                "TokenStudio 初始化完成：model=%s, backend=%s",
                self._config.model,
                type(self._backend).__name__,
            )

    @classmethod
    def from_settings(cls, settings: SettingsFile, debug: bool = False) -> TokenStudio:
        """按设置文件选择后端：配置了 tokenize_url 时走远程服务。"""
        backend: TokenizeBackend
        if settings.server.tokenize_url:
            backend = HttpTokenizeBackend(
                settings.server.tokenize_url,
                timeout=settings.server.request_timeout,
            )
        else:
            backend = LocalTokenizeBackend()
        return cls(config=settings.studio, backend=backend, debug=debug)

    @property
    def config(self) -> StudioConfig:
        return self._config

    @property
    def text(self) -> str:
        return self._text

    @property
    def result(self) -> ConversionResult:
        return self._result

    @property
    def tokenize_error(self) -> str | None:
        """最近一次精确分词失败的信息；成功或重新转换后清空。"""
        return self._tokenize_error

    def update(self, text: str, config: StudioConfig | None = None) -> ConversionResult:
        """
        用新的输入（及可选的新配置）整体重建结果。

        在途的精确分词批次随之过期并被取消。
        """
        if config is not None:
            self._config = config
        self._text = text
        self._invalidate()
        self._tokenize_error = None
        self._result = convert_all(text, self._config)
        return self._result

    def _invalidate(self) -> CancelToken:
        if self._cancel is not None:
            self._cancel.cancel()
        self._generation += 1
        self._cancel = CancelToken()
        return self._cancel

    def _skip_reason(self) -> str | None:
        if not self._config.wants_tokenization:
            return "未请求 Token 或计数"
        if not is_supported(self._config.model):
            return f"模型 {self._config.model} 不支持精确分词"
        if not self._result.has_output:
            return "所有输出为空"
        return None

    async def refresh_exact(self) -> ExactOutcome:
        """
        为当前结果发起精确分词批次。

        发起前取消上一个批次；结果返回时若已被新的 `update` 或
        `refresh_exact` 取代，则丢弃结果并返回 CANCELLED。
        失败时保留近似计数，并记录 `tokenize_error`。
        """
        cancel = self._invalidate()
        generation = self._generation

        reason = self._skip_reason()
        if reason is not None:
            logger.debug("跳过精确分词：%s", reason)
            return ExactOutcome(status=ExactStatus.SKIPPED, result=self._result)

        base = self._result
        config = self._config
        outcome = await self._backend.tokenize(config.model, base.texts(), cancel)

        if generation != self._generation or cancel.cancelled:
            logger.debug("精确分词批次 #%d 已被取代，结果丢弃", generation)
            return ExactOutcome(status=ExactStatus.CANCELLED, result=self._result)
        if isinstance(outcome, TokenizeCancelled):
            return ExactOutcome(status=ExactStatus.CANCELLED, result=self._result)
        if isinstance(outcome, TokenizeFailure):
            logger.warning("精确分词失败，保留近似计数：%s", outcome.message)
            self._tokenize_error = outcome.message
            return ExactOutcome(
                status=ExactStatus.FAILED,
                result=self._result,
                error=outcome.message,
            )

        self._tokenize_error = None
        self._result = base.with_exact(outcome.tokens, include_tokens=config.show_tokens)
        logger.debug("精确分词批次 #%d 已应用", generation)
        return ExactOutcome(status=ExactStatus.APPLIED, result=self._result)

    def run_sync(self, text: str, config: StudioConfig | None = None) -> ExactOutcome:
        """
        转换并完成一次精确分词：同步便捷方法。

        内部使用 asyncio.run()，不能在已有 event loop 中调用。
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            raise RuntimeError(
                "run_sync() 无法在已有 event loop 中使用。\n"
                "→ 修复建议：改用 'studio.update(...)' + 'await studio.refresh_exact()'"
            )
        self.update(text, config)
        return asyncio.run(self.refresh_exact())

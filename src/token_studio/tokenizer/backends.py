"""
精确分词后端：进程内 tiktoken 或远程 HTTP 服务。

后端不向调用方抛异常，而是返回三选一的结果：
- TokenizeSuccess：与请求同键的 Token 映射
- TokenizeCancelled：批次已被取代，结果必须丢弃（不是错误）
- TokenizeFailure：可恢复的失败，调用方回退到近似分词并显示提示

网络错误与非 2xx 响应被同等对待。
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, Union, runtime_checkable

import httpx

from token_studio.config.defaults import DEFAULT_REQUEST_TIMEOUT
from token_studio.errors import TokenizationCancelled, TokenizerError, UnsupportedModelError
from token_studio.tokenizer.cancel import CancelToken
from token_studio.tokenizer.protocol import WHITESPACE, Identified, Token
from token_studio.tokenizer.tiktoken_adapter import ExactTokenizer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenizeSuccess:
    model: str
    tokens: dict[str, list[Token]] = field(default_factory=dict)


@dataclass(frozen=True)
class TokenizeCancelled:
    pass


@dataclass(frozen=True)
class TokenizeFailure:
    message: str
    status: int | None = None


TokenizeOutcome = Union[TokenizeSuccess, TokenizeCancelled, TokenizeFailure]


@runtime_checkable
class TokenizeBackend(Protocol):
    """精确分词后端协议。"""

    async def tokenize(
        self,
        model: str,
        texts: Mapping[str, str | None],
        cancel: CancelToken,
    ) -> TokenizeOutcome:
        ...


class LocalTokenizeBackend:
    """进程内后端：直接调用 ExactTokenizer。"""

    def __init__(self, tokenizer: ExactTokenizer | None = None) -> None:
        self._tokenizer = tokenizer or ExactTokenizer()

    async def tokenize(
        self,
        model: str,
        texts: Mapping[str, str | None],
        cancel: CancelToken,
    ) -> TokenizeOutcome:
        try:
            tokens = await self._tokenizer.tokenize(model, texts, cancel=cancel)
        except TokenizationCancelled:
            return TokenizeCancelled()
        except UnsupportedModelError as e:
            return TokenizeFailure(message=e.what, status=400)
        except TokenizerError as e:
            logger.warning("本地精确分词失败：%s", e.what)
            return TokenizeFailure(message=e.what, status=500)
        return TokenizeSuccess(model=model, tokens=tokens)


def tokens_from_wire(items: list[dict[str, Any]]) -> list[Token]:
    """
    把 `[{"id", "text"}]` 传输格式还原为带偏移量的 Token 列表。

    偏移量按 text 字段的累计长度计算；id 为 null 的项视为空白 Token。
    """
    tokens: list[Token] = []
    offset = 0
    for item in items:
        piece = str(item.get("text", ""))
        raw_id = item.get("id")
        token_id = Identified(int(raw_id)) if isinstance(raw_id, int) else WHITESPACE
        tokens.append(Token(id=token_id, text=piece, start=offset, end=offset + len(piece)))
        offset += len(piece)
    return tokens


class HttpTokenizeBackend:
    """
    远程后端：POST 到 `/api/tokenize`。

    用法::

        backend = HttpTokenizeBackend("http://127.0.0.1:8000/api/tokenize")
        outcome = await backend.tokenize("cl100k_base", {"x": "hello"}, CancelToken())
    """

    def __init__(
        self,
        url: str,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._client = client

    async def tokenize(
        self,
        model: str,
        texts: Mapping[str, str | None],
        cancel: CancelToken,
    ) -> TokenizeOutcome:
        if cancel.cancelled:
            return TokenizeCancelled()

        request = asyncio.ensure_future(self._post(model, dict(texts)))
        waiter = asyncio.ensure_future(cancel.wait())
        try:
            done, _ = await asyncio.wait({request, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()

        if request not in done:
            # 中止进行中的请求
            request.cancel()
            return TokenizeCancelled()
        if cancel.cancelled:
            return TokenizeCancelled()
        return request.result()

    async def _post(self, model: str, texts: dict[str, str | None]) -> TokenizeOutcome:
        payload = {"model": model, "texts": texts}
        try:
            if self._client is not None:
                response = await self._client.post(self.url, json=payload, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.url, json=payload)
        except httpx.HTTPError as e:
            logger.warning("远程分词请求失败：%s", e)
            return TokenizeFailure(message=str(e) or type(e).__name__)

        if not response.is_success:
            return TokenizeFailure(
                message=_error_message(response) or "Failed to tokenize",
                status=response.status_code,
            )

        try:
            body = response.json()
            wire_tokens: dict[str, list[dict[str, Any]]] = body.get("tokens") or {}
        except (ValueError, AttributeError) as e:
            return TokenizeFailure(message=f"无法解析分词响应：{e}", status=response.status_code)

        tokens = {key: tokens_from_wire(items) for key, items in wire_tokens.items()}
        return TokenizeSuccess(model=str(body.get("model", model)), tokens=tokens)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return ""
    if isinstance(body, dict):
        return str(body.get("error") or "")
    return ""

"""
精确分词后端测试：进程内后端与 HTTP 后端。

HTTP 后端使用 httpx.MockTransport，不发起真实网络请求。
"""

from __future__ import annotations

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from token_studio.errors import TokenizationCancelled, TokenizerError, UnsupportedModelError
from token_studio.tokenizer.backends import (
    HttpTokenizeBackend,
    LocalTokenizeBackend,
    TokenizeBackend,
    TokenizeCancelled,
    TokenizeFailure,
    TokenizeSuccess,
    tokens_from_wire,
)
from token_studio.tokenizer.cancel import CancelToken
from token_studio.tokenizer.protocol import WHITESPACE, Identified, Token

URL = "http://tokenizer.test/api/tokenize"


def make_exact(**kwargs) -> MagicMock:
    exact = MagicMock()
    exact.tokenize = AsyncMock(**kwargs)
    return exact


def make_http_backend(handler) -> HttpTokenizeBackend:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpTokenizeBackend(URL, timeout=1.0, client=client)


# ============================================================
# tokens_from_wire
# ============================================================


class TestTokensFromWire:
    """传输格式还原。"""

    def test_offsets_accumulate(self) -> None:
        tokens = tokens_from_wire(
            [{"id": 5, "text": "ab"}, {"id": None, "text": " "}, {"id": 0, "text": "c"}]
        )
        assert tokens == [
            Token(id=Identified(5), text="ab", start=0, end=2),
            Token(id=WHITESPACE, text=" ", start=2, end=3),
            Token(id=Identified(0), text="c", start=3, end=4),
        ]

    def test_empty(self) -> None:
        assert tokens_from_wire([]) == []


# ============================================================
# LocalTokenizeBackend
# ============================================================


class TestLocalBackend:
    """进程内后端把异常转换为结果值。"""

    def test_satisfies_protocol(self) -> None:
        assert isinstance(LocalTokenizeBackend(make_exact()), TokenizeBackend)

    @pytest.mark.asyncio
    async def test_success(self) -> None:
        token = Token(id=Identified(1), text="a", start=0, end=1)
        exact = make_exact(return_value={"x": [token]})
        outcome = await LocalTokenizeBackend(exact).tokenize("cl100k_base", {"x": "a"}, CancelToken())
        assert outcome == TokenizeSuccess(model="cl100k_base", tokens={"x": [token]})

    @pytest.mark.asyncio
    async def test_cancelled(self) -> None:
        exact = make_exact(side_effect=TokenizationCancelled())
        outcome = await LocalTokenizeBackend(exact).tokenize("cl100k_base", {"x": "a"}, CancelToken())
        assert isinstance(outcome, TokenizeCancelled)

    @pytest.mark.asyncio
    async def test_tokenizer_error(self) -> None:
        exact = make_exact(side_effect=TokenizerError(what="boom"))
        outcome = await LocalTokenizeBackend(exact).tokenize("cl100k_base", {"x": "a"}, CancelToken())
        assert outcome == TokenizeFailure(message="boom", status=500)

    @pytest.mark.asyncio
    async def test_unsupported_model_mocked(self) -> None:
        exact = make_exact(side_effect=UnsupportedModelError(what="Unsupported model: m"))
        outcome = await LocalTokenizeBackend(exact).tokenize("m", {"x": "a"}, CancelToken())
        assert outcome == TokenizeFailure(message="Unsupported model: m", status=400)

    @pytest.mark.asyncio
    async def test_unsupported_model_real_adapter(self) -> None:
        outcome = await LocalTokenizeBackend().tokenize("not-a-model", {"x": "a"}, CancelToken())
        assert outcome == TokenizeFailure(message="Unsupported model: not-a-model", status=400)


# ============================================================
# HttpTokenizeBackend
# ============================================================


class TestHttpBackend:
    """远程后端。"""

    @pytest.mark.asyncio
    async def test_success(self) -> None:
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            seen["url"] = str(request.url)
            return httpx.Response(
                200,
                json={
                    "model": "cl100k_base",
                    "tokens": {"x": [{"id": 15339, "text": "hello"}], "y": []},
                },
            )

        backend = make_http_backend(handler)
        outcome = await backend.tokenize("cl100k_base", {"x": "hello", "y": ""}, CancelToken())

        assert seen["url"] == URL
        assert seen["body"] == {"model": "cl100k_base", "texts": {"x": "hello", "y": ""}}
        assert isinstance(outcome, TokenizeSuccess)
        assert outcome.tokens["y"] == []
        assert outcome.tokens["x"] == [Token(id=Identified(15339), text="hello", start=0, end=5)]

    @pytest.mark.asyncio
    async def test_non_2xx_is_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"success": False, "error": "Unsupported model: x"})

        outcome = await make_http_backend(handler).tokenize("x", {"a": "b"}, CancelToken())
        assert outcome == TokenizeFailure(message="Unsupported model: x", status=400)

    @pytest.mark.asyncio
    async def test_non_json_error_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="bad gateway")

        outcome = await make_http_backend(handler).tokenize("cl100k_base", {"a": "b"}, CancelToken())
        assert outcome == TokenizeFailure(message="Failed to tokenize", status=502)

    @pytest.mark.asyncio
    async def test_network_error_is_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        outcome = await make_http_backend(handler).tokenize("cl100k_base", {"a": "b"}, CancelToken())
        assert isinstance(outcome, TokenizeFailure)
        assert outcome.status is None
        assert "connection refused" in outcome.message

    @pytest.mark.asyncio
    async def test_malformed_success_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="not json")

        outcome = await make_http_backend(handler).tokenize("cl100k_base", {"a": "b"}, CancelToken())
        assert isinstance(outcome, TokenizeFailure)
        assert outcome.status == 200

    @pytest.mark.asyncio
    async def test_already_cancelled_sends_nothing(self) -> None:
        handler = MagicMock()
        cancel = CancelToken()
        cancel.cancel()
        outcome = await make_http_backend(handler).tokenize("cl100k_base", {"a": "b"}, cancel)
        assert isinstance(outcome, TokenizeCancelled)
        handler.assert_not_called()

    @pytest.mark.asyncio
    async def test_cancel_aborts_in_flight_request(self) -> None:
        started = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            started.set()
            await asyncio.sleep(30)
            return httpx.Response(200, json={"model": "cl100k_base", "tokens": {}})

        cancel = CancelToken()
        task = asyncio.ensure_future(
            make_http_backend(handler).tokenize("cl100k_base", {"a": "b"}, cancel)
        )
        await started.wait()
        cancel.cancel()
        outcome = await asyncio.wait_for(task, timeout=5)
        assert isinstance(outcome, TokenizeCancelled)

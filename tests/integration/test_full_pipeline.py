"""
端到端集成测试：文件输入 → 五种格式 → 远程精确分词 → 复制载荷。

远程分词服务是进程内的 FastAPI 应用，通过 httpx.ASGITransport 直连，
精确分词器以 Mock 替换。
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from token_studio import StudioConfig, TokenStudio, convert_all
from token_studio.cli.server import create_app
from token_studio.convert import FormatKind
from token_studio.export import output_payload, read_input_file, token_ids_payload
from token_studio.studio import ExactStatus
from token_studio.tokenizer.approximate import approximate_tokenize
from token_studio.tokenizer.backends import HttpTokenizeBackend
from token_studio.tokenizer.cancel import CancelToken
from token_studio.tokenizer.protocol import Identified, Token
from token_studio.tokenizer.tiktoken_adapter import ExactTokenizer

SAMPLES = [
    '{"users": [{"id": 1, "name": "Alice Smith", "active": true}], "count": 1}',
    '[1, 2.5, -3, "x y", null, {"nested": {"deep": []}}]',
    '{"é": "中文", "emoji": "😀", "quote": "say \\"hi\\""}',
    '"plain string"',
    "0",
]


def non_whitespace_exact(model: str, texts: dict, cancel=None) -> dict[str, list[Token]]:
    """只保留非空白片段，ID 取近似分词的编号。"""
    return {
        key: [
            Token(id=Identified(t.id_value), text=t.text, start=t.start, end=t.end)
            for t in approximate_tokenize(text or "")
            if t.id_value is not None
        ]
        for key, text in texts.items()
    }


@pytest.fixture
def remote_backend() -> HttpTokenizeBackend:
    tokenizer = MagicMock(spec=ExactTokenizer)
    tokenizer.tokenize = AsyncMock(side_effect=non_whitespace_exact)
    transport = httpx.ASGITransport(app=create_app(tokenizer=tokenizer))
    client = httpx.AsyncClient(transport=transport, base_url="http://testserver")
    return HttpTokenizeBackend("http://testserver/api/tokenize", client=client)


@pytest.mark.parametrize("text", SAMPLES)
def test_minified_round_trip(text: str) -> None:
    result = convert_all(text)
    assert json.loads(result.output(FormatKind.MINIFIED)) == json.loads(text)
    assert json.loads(result.output(FormatKind.PRETTY)) == json.loads(text)


@pytest.mark.parametrize("text", SAMPLES)
def test_every_format_rendered(text: str) -> None:
    result = convert_all(text, StudioConfig(show_tokens=True))
    for view in result.views.values():
        assert view.output
        assert "".join(t.text for t in view.tokens) == view.output


@pytest.mark.asyncio
async def test_remote_exact_pipeline(remote_backend: HttpTokenizeBackend, input_file: Path) -> None:
    studio = TokenStudio(config=StudioConfig(show_tokens=True), backend=remote_backend)
    approximate = studio.update(read_input_file(input_file))

    outcome = await studio.refresh_exact()

    assert outcome.status is ExactStatus.APPLIED
    for kind, view in outcome.result.views.items():
        assert view.exact
        assert view.output == approximate.output(kind)
        assert view.counts.characters == approximate.counts(kind).characters
        assert view.counts.tokens == len(view.tokens)
        assert all(t.id_value is not None for t in view.tokens)

    toon = outcome.result.view(FormatKind.TOON)
    expected_ids = [t.id_value for t in approximate_tokenize(toon.output) if t.id_value is not None]
    assert json.loads(token_ids_payload(toon.tokens)) == expected_ids
    assert output_payload(outcome.result, "toon") == toon.output


@pytest.mark.asyncio
async def test_remote_unsupported_model_reports_failure() -> None:
    transport = httpx.ASGITransport(app=create_app(tokenizer=ExactTokenizer()))
    client = httpx.AsyncClient(transport=transport, base_url="http://testserver")
    backend = HttpTokenizeBackend("http://testserver/api/tokenize", client=client)

    outcome = await backend.tokenize("o200k_base", {"x": "hi"}, CancelToken())
    assert outcome.status == 400
    assert outcome.message == "Unsupported model: o200k_base"

"""
测试套件共享 Fixtures 和配置。

本文件定义了所有测试中可复用的 fixtures 与假后端。
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from pathlib import Path

import pytest

from token_studio.config.schema import StudioConfig
from token_studio.tokenizer.approximate import approximate_tokenize
from token_studio.tokenizer.backends import (
    TokenizeCancelled,
    TokenizeFailure,
    TokenizeOutcome,
    TokenizeSuccess,
)
from token_studio.tokenizer.cancel import CancelToken
from token_studio.tokenizer.registry import clear_cache


# === 输入 Fixtures ===


@pytest.fixture
def users_json() -> str:
    """带表格数组的典型输入。"""
    return (
        '{"users": [{"id": 1, "name": "Alice", "role": "admin"}, '
        '{"id": 2, "name": "Bob", "role": "user"}], "tags": ["a", "b", "c"]}'
    )


@pytest.fixture
def nested_json() -> str:
    return '{"a": {"b": {"c": 1}}, "list": [1, "two", {"k": null}], "empty": {}}'


@pytest.fixture
def input_file(tmp_path: Path, users_json: str) -> Path:
    path = tmp_path / "input.json"
    path.write_text(users_json, encoding="utf-8")
    return path


# === 配置 Fixtures ===


@pytest.fixture
def default_config() -> StudioConfig:
    return StudioConfig()


@pytest.fixture
def tokens_config() -> StudioConfig:
    """开启 Token 显示的配置。"""
    return StudioConfig(show_tokens=True)


@pytest.fixture
def settings_yaml(tmp_path: Path) -> Path:
    path = tmp_path / "token_studio.yaml"
    path.write_text(
        "version: '1.0'\n"
        "studio:\n"
        "  show_tokens: true\n"
        "  token_aware: true\n"
        "  toon_delimiter: pipe\n"
        "server:\n"
        "  port: 8080\n",
        encoding="utf-8",
    )
    return path


# === 假分词后端 ===


class FakeBackend:
    """
    可控的假后端：用近似分词器生成"精确"结果。

    gate 为 None 时立即返回；否则等待 gate 或取消，先到者为准。
    """

    def __init__(
        self,
        gate: asyncio.Event | None = None,
        failure: str | None = None,
        ignore_cancel: bool = False,
    ) -> None:
        self.gate = gate
        self.failure = failure
        self.ignore_cancel = ignore_cancel
        self.calls: list[dict[str, str | None]] = []

    async def tokenize(
        self,
        model: str,
        texts: Mapping[str, str | None],
        cancel: CancelToken,
    ) -> TokenizeOutcome:
        self.calls.append(dict(texts))
        if self.gate is not None:
            if self.ignore_cancel:
                await self.gate.wait()
            else:
                gate_task = asyncio.ensure_future(self.gate.wait())
                cancel_task = asyncio.ensure_future(cancel.wait())
                await asyncio.wait({gate_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED)
                gate_task.cancel()
                cancel_task.cancel()
                if cancel.cancelled:
                    return TokenizeCancelled()
        if self.failure is not None:
            return TokenizeFailure(message=self.failure, status=500)
        tokens = {key: approximate_tokenize(text or "") for key, text in texts.items()}
        return TokenizeSuccess(model=model, tokens=tokens)


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture(autouse=True)
def _reset_tokenizer_cache() -> None:
    clear_cache()


@pytest.fixture
def backend_factory() -> type[FakeBackend]:
    """需要自定义 gate / failure 时使用。"""
    return FakeBackend

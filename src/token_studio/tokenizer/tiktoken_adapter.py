"""
基于 tiktoken 的精确分词适配器。

tiktoken 是 OpenAI 官方的 BPE tokenizer 库。这里把它包装成批量接口：
调用方一次传入 `{key → text}`（每种输出格式一段），共享一次词表加载的开销。

约束：
- 输出与输入的键完全相同；空文本或 None 得到空列表，而不是缺失的键。
- 每段文本的 Token text 按顺序拼接后精确还原原文。
- 不支持的模型抛 UnsupportedModelError，绝不替换成别的模型。
- 批次中任意一段失败，整个批次以 TokenizerError 失败。
- 词表编码对象在批次结束（成功、失败或取消）时释放。
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager

import tiktoken

from token_studio.errors import TokenizationCancelled, TokenizerError, TokenStudioError
from token_studio.tokenizer.cancel import CancelToken
from token_studio.tokenizer.protocol import Identified, Token
from token_studio.tokenizer.registry import resolve_encoding_name

logger = logging.getLogger(__name__)


@contextmanager
def encoding_scope(encoding_name: str) -> Iterator[tiktoken.Encoding]:
    """
    在一个批次的作用域内使用 tiktoken 编码对象。

    编码表由 tiktoken 的进程级注册表加载并持有，这里不会释放它；
    作用域只界定一个批次对它的使用，并把加载失败统一包装为 TokenizerError。

    参数:
        encoding_name: tiktoken 编码方案名称
    """
    try:
        encoding = tiktoken.get_encoding(encoding_name)
    except Exception as e:
        raise TokenizerError(
            what=f"无法加载 tiktoken 编码方案 '{encoding_name}'。",
            why=str(e),
            how="检查网络连接（首次使用需要下载词表）或 TIKTOKEN_CACHE_DIR 设置。",
            details={"encoding_name": encoding_name},
        ) from e
    try:
        yield encoding
    finally:
        logger.debug("编码方案 %s 的批次作用域结束", encoding_name)


def tokenize_with_encoding(encoding: tiktoken.Encoding, text: str) -> list[Token]:
    """
    用给定编码切分一段文本。

    跨越多字节字符边界的 Token 可能对应空的 text 片段，
    但所有片段按顺序拼接后一定等于原文。
    """
    if not text:
        return []
    ids = encoding.encode(text, disallowed_special=())
    decoded, offsets = encoding.decode_with_offsets(ids)
    if decoded != text:
        raise TokenizerError(
            what="分词结果无法还原原文。",
            why="解码后的文本与输入不一致（输入可能包含无法编码的代理字符）。",
            how="检查输入中是否有孤立的 UTF-16 代理项。",
        )

    bounds = [*offsets, len(text)]
    tokens: list[Token] = []
    for index, token_id in enumerate(ids):
        # 偏移量在多字节字符内部可能回退，取单调值保证切片不重叠
        start = bounds[index]
        end = max(start, bounds[index + 1])
        tokens.append(Token(id=Identified(token_id), text=text[start:end], start=start, end=end))
    return tokens


class ExactTokenizer:
    """
    精确分词适配器。

    用法::

        tokenizer = ExactTokenizer()
        result = tokenizer.tokenize_batch("cl100k_base", {"x": "hello", "y": ""})
        # {"x": [Token(...)], "y": []}

        # 异步（在工作线程中执行，可取消）
        result = await tokenizer.tokenize("cl100k_base", texts, cancel=token)
    """

    @property
    def name(self) -> str:
        return "tiktoken"

    def tokenize_batch(
        self,
        model: str,
        texts: Mapping[str, str | None],
        cancel: CancelToken | None = None,
    ) -> dict[str, list[Token]]:
        """
        同步批量分词。

        参数:
            model: 分词模型 ID
            texts: 键到文本的映射
            cancel: 取消句柄（可选）

        返回:
            与输入同键的 Token 列表映射

        异常:
            UnsupportedModelError: 模型不受支持
            TokenizerError: 任一文本分词失败
            TokenizationCancelled: 批次被取消
        """
        encoding_name = resolve_encoding_name(model)
        if cancel is not None:
            cancel.raise_if_cancelled()

        result: dict[str, list[Token]] = {}
        with encoding_scope(encoding_name) as encoding:
            for key, text in texts.items():
                if cancel is not None:
                    cancel.raise_if_cancelled()
                if not text:
                    result[key] = []
                    continue
                try:
                    result[key] = tokenize_with_encoding(encoding, text)
                except TokenStudioError:
                    raise
                except Exception as e:
                    raise TokenizerError(
                        what=f"文本 '{key}' 分词失败。",
                        why=str(e) or type(e).__name__,
                        how="整个批次已作废，调用方应回退到近似分词。",
                        details={"key": key, "model": model},
                    ) from e

        logger.debug(
            "精确分词完成：model=%s, keys=%d, tokens=%d",
            model,
            len(result),
            sum(len(v) for v in result.values()),
        )
        return result

    async def tokenize(
        self,
        model: str,
        texts: Mapping[str, str | None],
        cancel: CancelToken | None = None,
    ) -> dict[str, list[Token]]:
        """
        异步批量分词：在工作线程中执行 `tokenize_batch`。

        取消发生在等待期间时立即抛出 TokenizationCancelled；
        工作线程会在处理下一段文本前察觉取消并退出，随后离开编码作用域。
        """
        work = asyncio.ensure_future(
            asyncio.to_thread(self.tokenize_batch, model, dict(texts), cancel)
        )
        if cancel is None:
            return await work

        waiter = asyncio.ensure_future(cancel.wait())
        try:
            done, _ = await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
        if work in done:
            return work.result()
        work.add_done_callback(_consume_result)
        raise TokenizationCancelled()

    def count(self, model: str, text: str) -> int:
        """单段文本的精确 Token 数。"""
        return len(self.tokenize_batch(model, {"text": text})["text"])


def _consume_result(future: asyncio.Future[object]) -> None:
    """读取已放弃任务的结果，避免 'exception was never retrieved' 警告。"""
    if not future.cancelled():
        future.exception()

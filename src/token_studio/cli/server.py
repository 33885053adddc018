"""
FastAPI HTTP 服务器实现。

端点：
- POST /api/tokenize：精确分词批次
- POST /api/convert：一次完整转换（可选精确计数）
- GET /health：健康检查

分词端点的成功响应::

    {"model": "cl100k_base", "tokens": {"x": [{"id": 15339, "text": "hello"}], "y": []}}

错误响应统一为::

    {"success": false, "error": str, "metadata": {...}}

请求体不合法、model / texts 缺失或类型错误、模型不受支持返回 400；
分词过程内部失败返回 500。
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from token_studio.config.defaults import DEFAULT_MODEL, supported_models
from token_studio.config.schema import StudioConfig
from token_studio.errors.exceptions import TokenStudioError
from token_studio.studio import ExactStatus, TokenStudio
from token_studio.tokenizer.backends import LocalTokenizeBackend
from token_studio.tokenizer.tiktoken_adapter import ExactTokenizer

# ============================================================
# Request/Response 模型（Pydantic）
# ============================================================


class TokenizeRequest(BaseModel):
    """分词请求：同键进、同键出。"""

    model: str = Field(min_length=1, description="分词模型（如 'cl100k_base'）")
    texts: dict[str, str | None] = Field(description="待分词文本，null 视为空串")


class WireToken(BaseModel):
    id: int
    text: str


class TokenizeResponse(BaseModel):
    model: str
    tokens: dict[str, list[WireToken]]


class ConvertRequest(BaseModel):
    """转换请求。"""

    input: str = Field(description="原始 JSON 文本")
    config: StudioConfig | None = Field(default=None, description="展示配置（可选）")
    exact: bool = Field(default=False, description="是否执行精确分词")


class ConvertResponse(BaseModel):
    success: bool
    data: dict[str, Any] | None = None
    error: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    """健康检查响应。"""

    success: bool
    data: dict[str, Any]
    error: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


def _validation_message(exc: RequestValidationError) -> str:
    """把 pydantic 校验错误归纳为一句话。"""
    fields: list[str] = []
    for error in exc.errors():
        if error.get("type") == "json_invalid":
            return "Invalid JSON body"
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        if loc:
            fields.append(loc[0])
    for name in ("model", "texts", "input", "config"):
        if name in fields:
            return f"Missing or invalid {name}"
    return "Invalid JSON body"


def _error_response(status_code: int, message: str, error_type: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": message,
            "metadata": {
                "error_type": error_type,
                "timestamp": datetime.now().isoformat(),
            },
        },
    )


# ============================================================
# FastAPI 应用
# ============================================================


def create_app(
    model: str = DEFAULT_MODEL,
    enable_cors: bool = False,
    tokenizer: ExactTokenizer | None = None,
) -> FastAPI:
    """
    创建 FastAPI 应用实例。

    Args:
        model: /api/convert 未指定配置时使用的分词模型
        enable_cors: 是否启用 CORS
        tokenizer: 自定义精确分词器（测试用）

    Returns:
        FastAPI 应用实例
    """
    from token_studio import __version__

    app = FastAPI(
        title="Token Studio API",
        description="JSON 多格式转换与 Token 计数 HTTP API",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    if enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["*"],
            allow_headers=["*"],
        )

    exact = tokenizer or ExactTokenizer()

    @app.exception_handler(TokenStudioError)
    async def token_studio_error_handler(request: Request, exc: TokenStudioError) -> JSONResponse:
        """TokenStudio 异常：使用异常自带的状态码。"""
        return _error_response(exc.status_code, exc.what, type(exc).__name__)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """请求体校验失败统一返回 400。"""
        return _error_response(400, _validation_message(exc), "RequestValidationError")

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        return _error_response(500, f"服务器内部错误: {exc!s}", type(exc).__name__)

    # ============================================================
    # API 端点
    # ============================================================

    @app.post("/api/tokenize", response_model=TokenizeResponse, summary="精确分词")
    async def tokenize(request: TokenizeRequest) -> TokenizeResponse:
        """按 model 对每段文本做精确分词，返回与请求同键的 Token 列表。"""
        tokens = await exact.tokenize(request.model, request.texts)
        return TokenizeResponse(
            model=request.model,
            tokens={
                key: [
                    WireToken(id=t.id_value, text=t.text)
                    for t in items
                    if t.id_value is not None
                ]
                for key, items in tokens.items()
            },
        )

    @app.post("/api/convert", response_model=ConvertResponse, summary="转换输入")
    async def convert(request: ConvertRequest) -> ConvertResponse:
        """把输入转换为全部格式；exact=true 时用精确计数替换近似计数。"""
        config = request.config or StudioConfig(model=model)
        studio = TokenStudio(config=config, backend=LocalTokenizeBackend(exact))
        result = studio.update(request.input)
        status = ExactStatus.SKIPPED
        if request.exact:
            outcome = await studio.refresh_exact()
            status = outcome.status
            result = outcome.result
        return ConvertResponse(
            success=result.error is None,
            data=result.to_dict(copy_ready=config.copy_ready),
            error=result.error,
            metadata={
                "exact_status": status.value,
                "tokenize_error": studio.tokenize_error,
            },
        )

    @app.get("/health", response_model=HealthResponse, summary="健康检查")
    async def health_check() -> HealthResponse:
        """健康检查端点，返回服务状态与可用模型。"""
        return HealthResponse(
            success=True,
            data={
                "status": "healthy",
                "version": __version__,
                "models": supported_models(),
                "timestamp": datetime.now().isoformat(),
            },
        )

    return app

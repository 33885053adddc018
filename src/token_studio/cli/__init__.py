"""
Token Studio CLI：命令行工具。

- convert: 渲染全部格式并对比计数
- tokenize: 逐 Token 明细
- export: 复制载荷
- validate: 校验设置文件
- serve: 分词 HTTP 服务
"""

from token_studio.cli.app import app, main

__all__ = ["app", "main"]

"""
Token Studio 快速上手示例。

演示最基本的用法：一次转换得到五种格式与各自的计数。

运行方式：
    python examples/quickstart.py

场景 1 / 2 无需网络；场景 3 首次运行会下载 cl100k_base 词表。
"""

import asyncio


def show_counts(result) -> None:
    from token_studio.convert import FormatKind

    for kind in FormatKind:
        counts = result.counts(kind)
        source = "精确" if result.view(kind).exact else "近似"
        print(
            f"  {kind.label:<16} 字符 {counts.characters:>5,}  "
            f"字节 {counts.bytes:>5,}  Token {counts.tokens:>5,}（{source}）"
        )


async def main() -> None:
    from token_studio import StudioConfig, TokenStudio, convert_all

    data = (
        '{"users": [{"id": 1, "name": "Alice", "role": "admin"}, '
        '{"id": 2, "name": "Bob", "role": "user"}], "tags": ["a", "b", "c"]}'
    )

    # ===== 场景 1：最简用法 =====
    print("=" * 60)
    print("场景 1：一次转换")
    print("=" * 60)

    result = convert_all(data)
    print(f"\nTOON 输出：\n{result.output('toon')}\n")
    show_counts(result)

    # ===== 场景 2：Token 感知 + 竖线分隔 =====
    print("\n" + "=" * 60)
    print("场景 2：Token 感知模式与 TOON 分隔符")
    print("=" * 60)

    config = StudioConfig(token_aware=True, toon_delimiter="pipe")
    result = convert_all(data, config)
    print(f"\nminified：{result.output('minified')}")
    print(f"TOON：\n{result.output('toon')}\n")
    show_counts(result)

    # ===== 场景 3：精确计数 =====
    print("\n" + "=" * 60)
    print("场景 3：tiktoken 精确计数")
    print("=" * 60)

    studio = TokenStudio()
    studio.update(data)
    outcome = await studio.refresh_exact()
    print(f"\n精确分词结果：{outcome.status.value}")
    if outcome.error:
        print(f"  失败原因：{outcome.error}")
    show_counts(outcome.result)


if __name__ == "__main__":
    asyncio.run(main())

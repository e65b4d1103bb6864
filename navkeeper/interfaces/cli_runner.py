"""
命令行测试工具
交互式输入 "当前视图 outcome [动作]"，查看导航解析结果
"""
import sys
import asyncio
import shlex
from pathlib import Path

# 添加项目根目录到路径
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from navkeeper.core import get_logger, get_settings
from navkeeper.core.errors import InvalidRequest, SourceUnavailable
from navkeeper.memory.database import db_manager
from navkeeper.navigation import NavigationResolver, build_resolver

logger = get_logger(__name__)


def parse_line(line: str):
    """解析一行输入，返回 (from_location, outcome, action)"""
    parts = shlex.split(line)
    if len(parts) < 2 or len(parts) > 3:
        raise ValueError("格式: <当前视图> <outcome> [动作]")
    from_location, outcome = parts[0], parts[1]
    action = parts[2] if len(parts) == 3 else None
    return from_location, outcome, action


async def resolve_once(resolver: NavigationResolver, line: str) -> str:
    """解析一行输入并返回要显示的文本"""
    from_location, outcome, action = parse_line(line)
    try:
        result = await resolver.resolve(from_location, action, outcome)
    except SourceUnavailable as e:
        return f"❌ {e}"
    except InvalidRequest as e:
        return f"⚠️  {e}"

    if not result.resolved:
        return "… 未解析，由调用方采用默认行为"
    return f"➡️  {result.to_location}  (来源: {result.source})"


async def run_interactive_session():
    """运行交互式测试会话"""
    print("\n" + "=" * 70)
    print("  NavKeeper - 导航规则解析测试工具")
    print("=" * 70)

    try:
        print("\n⚙️  正在初始化解析器...")
        resolver = build_resolver(get_settings())
        print(f"  - 来源顺序: {' -> '.join(resolver.sources)}")

        print("\n💡 提示:")
        print("  - 输入: <当前视图> <outcome> [动作]")
        print("  - 输入 'quit' 或 'exit' 退出")
        print("\n" + "=" * 70)

        while True:
            try:
                user_input = input("\n[navkeeper] >>> ").strip()

                if not user_input:
                    continue

                if user_input.lower() in ['quit', 'exit', 'q']:
                    print("\n👋 再见！")
                    break

                print(await resolve_once(resolver, user_input))

            except ValueError as e:
                print(f"⚠️  {e}")
            except KeyboardInterrupt:
                print("\n\n👋 再见！")
                break

    except Exception as e:
        logger.error(f"初始化失败: {e}", exc_info=True)
        print(f"\n❌ 初始化失败: {e}")
    finally:
        await db_manager.dispose()


def main():
    """主入口"""
    try:
        asyncio.run(run_interactive_session())
    except KeyboardInterrupt:
        print("\n\n程序已终止")


if __name__ == "__main__":
    main()

"""
导入静态导航规则到数据库
读取 navigation_rules.yaml（或指定文件），逐条写入 navigation_rules 表
"""
import asyncio
import sys
import argparse
from pathlib import Path

# 添加项目根目录到 Python 路径
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from navkeeper.core import get_logger, get_settings
from navkeeper.core.errors import InvalidRule
from navkeeper.memory.database import db_manager, init_db
from navkeeper.memory.repositories import NavigationRuleRepository
from navkeeper.navigation import load_rules_file

logger = get_logger(__name__)


async def import_rules(file_path: Path, replace: bool = False) -> int:
    """
    导入规则文件

    Args:
        file_path: YAML 规则文件路径
        replace: 导入前是否清空数据库中已有的规则

    Returns:
        导入的规则条数
    """
    logger.info(f"开始导入规则文件: {file_path}")
    rules = load_rules_file(file_path)
    if not rules:
        logger.warning("规则文件为空，没有可导入的规则")
        return 0

    await init_db()

    async with db_manager.session_factory() as session:
        repo = NavigationRuleRepository(session)
        if replace:
            removed = await repo.delete_all()
            logger.info(f"已清空 {removed} 条旧规则")

        for rule in rules:
            record = await repo.create_from_rule(rule)
            logger.debug(f"写入 {record!r}")

    logger.info(f"成功导入 {len(rules)} 条导航规则")
    return len(rules)


async def main():
    parser = argparse.ArgumentParser(description="导入 YAML 导航规则到数据库")
    parser.add_argument("file", nargs="?", help="规则文件路径，默认为配置中的 navigation.rules_file")
    parser.add_argument("--replace", action="store_true", help="导入前清空已有规则")
    args = parser.parse_args()

    file_path = Path(args.file) if args.file else get_settings().RULES_FILE

    try:
        count = await import_rules(file_path, replace=args.replace)
        print(f"✅ 导入完成: {count} 条规则")
    except InvalidRule as e:
        print(f"❌ 规则文件不合法: {e}")
        sys.exit(1)
    finally:
        await db_manager.dispose()


if __name__ == "__main__":
    asyncio.run(main())

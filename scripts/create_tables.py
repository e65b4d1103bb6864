import asyncio
import sys
from pathlib import Path

# 添加项目根目录到 python path
sys.path.append(str(Path(__file__).parent.parent))

from navkeeper.core import get_logger
from navkeeper.memory.database import db_manager, init_db

logger = get_logger(__name__)

async def create_all_tables():
    """创建 navigation_rules 等数据库表"""
    logger.info(f"开始创建数据库表: {db_manager.engine.url.render_as_string(hide_password=True)}")

    try:
        await init_db()
    finally:
        await db_manager.dispose()

    logger.info("数据库表创建完成！")

if __name__ == "__main__":
    asyncio.run(create_all_tables())

import sys
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

# 添加项目根目录到路径
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from navkeeper.core.events import NavigationRule
from navkeeper.memory.database import Base
from navkeeper.navigation import StaticRuleSource


@pytest.fixture
def db_url(tmp_path):
    """每个测试独立的 SQLite 文件"""
    return f"sqlite+aiosqlite:///{tmp_path / 'rules.db'}"


@pytest_asyncio.fixture
async def session_factory(db_url):
    """建好表的异步会话工厂"""
    engine = create_async_engine(db_url, poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def static_source():
    return StaticRuleSource([
        NavigationRule("login", "dashboard", "success"),
        NavigationRule("home", "guest", "goAdmin"),
        NavigationRule("home", "login", "logout"),
    ])

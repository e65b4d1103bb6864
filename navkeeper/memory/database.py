"""
数据库管理模块
负责数据库连接、会话管理及初始化
"""
from typing import AsyncGenerator, Optional
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker, AsyncEngine
from sqlalchemy.orm import DeclarativeBase
from ..core import get_logger, get_settings

logger = get_logger(__name__)


def get_db_url() -> str:
    """读取配置中的数据库连接 URL"""
    return get_settings().DATABASE_URL


class DatabaseManager:
    """
    数据库管理器
    engine 与 session_factory 都在首次访问时创建
    """
    def __init__(self, url: Optional[str] = None):
        self._url = url
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker | None = None

    @property
    def url(self) -> str:
        return self._url or get_db_url()

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            settings = get_settings()
            self._engine = create_async_engine(self.url, echo=settings.project.debug)
            logger.debug(f"创建数据库引擎: {self._engine.url.render_as_string(hide_password=True)}")
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker:
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False
            )
        return self._session_factory

    async def dispose(self):
        """关闭连接池"""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None

# 全局单例
db_manager = DatabaseManager()

class Base(DeclarativeBase):
    pass

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """获取异步数据库会话的依赖项"""
    async with db_manager.session_factory() as session:
        yield session

async def init_db(manager: Optional[DatabaseManager] = None):
    """初始化数据库表"""
    # 导入模型以注册到 Base.metadata
    from . import models  # noqa: F401

    manager = manager or db_manager
    async with manager.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("数据库表初始化完成")

"""
解析器工厂
根据配置中的 source_priority 组装规则来源
"""
from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from ..core import get_logger, Settings
from ..core.config import SOURCE_DATABASE, SOURCE_STATIC
from .resolver import NavigationResolver
from .sources import PersistedRuleSource, StaticRuleSource

logger = get_logger(__name__)


def build_resolver(settings: Settings,
                   session_factory: Optional[async_sessionmaker] = None,
                   static_source: Optional[StaticRuleSource] = None) -> NavigationResolver:
    """
    构建导航解析器
    session_factory: 数据库会话工厂，缺省使用全局 db_manager
    static_source: 静态规则来源，缺省从 navigation.rules_file 加载
    """
    nav_config = settings.navigation
    sources = []

    for name in nav_config.source_priority:
        if name == SOURCE_DATABASE:
            if session_factory is None:
                from ..memory.database import db_manager
                session_factory = db_manager.session_factory
            sources.append(PersistedRuleSource(session_factory, timeout=nav_config.query_timeout))
        elif name == SOURCE_STATIC:
            if static_source is None:
                static_source = StaticRuleSource.from_yaml(settings.RULES_FILE)
            sources.append(static_source)

    resolver = NavigationResolver(sources, skip_unavailable_sources=nav_config.skip_unavailable_sources)
    logger.info(f"导航解析器已就绪，来源顺序: {' -> '.join(resolver.sources)}")
    return resolver

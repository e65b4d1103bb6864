"""
Memory 模块
封装数据库连接与导航规则的持久化
"""
from .database import Base, DatabaseManager, db_manager, get_db, init_db
from .models import NavigationRuleRecord
from .repositories import NavigationRuleRepository

__all__ = [
    "Base",
    "DatabaseManager",
    "db_manager",
    "get_db",
    "init_db",
    "NavigationRuleRecord",
    "NavigationRuleRepository",
]

"""
NavKeeper
数据库优先、静态配置兜底的页面导航规则解析
"""
from .core import (
    NavigationRule,
    ResolutionRequest,
    ResolutionResult,
    NavigationError,
    InvalidRule,
    InvalidRequest,
    SourceUnavailable,
)
from .navigation import NavigationResolver, StaticRuleSource, PersistedRuleSource, build_resolver

__version__ = "1.0.0"

__all__ = [
    "NavigationRule",
    "ResolutionRequest",
    "ResolutionResult",
    "NavigationError",
    "InvalidRule",
    "InvalidRequest",
    "SourceUnavailable",
    "NavigationResolver",
    "StaticRuleSource",
    "PersistedRuleSource",
    "build_resolver",
]

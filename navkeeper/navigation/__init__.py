"""
Navigation 模块
导航规则来源与解析器
"""
from .loader import load_rules_file, parse_rules
from .sources import RuleSource, StaticRuleSource, PersistedRuleSource
from .resolver import NavigationResolver
from .factory import build_resolver

__all__ = [
    "load_rules_file",
    "parse_rules",
    "RuleSource",
    "StaticRuleSource",
    "PersistedRuleSource",
    "NavigationResolver",
    "build_resolver",
]

from .base_repo import BaseRepository
from .navigation_rule_repo import NavigationRuleRepository

__all__ = [
    "BaseRepository",
    "NavigationRuleRepository",
]

"""
规则来源
解析器按优先级依次查询的规则提供者
- StaticRuleSource: 启动时从 YAML 加载的固定规则表
- PersistedRuleSource: 每次查询都读取数据库
"""
import asyncio
from abc import ABC, abstractmethod
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from ..core import get_logger
from ..core.config import SOURCE_DATABASE, SOURCE_STATIC
from ..core.errors import InvalidRule, SourceUnavailable
from ..core.events import NavigationRule
from ..memory.repositories import NavigationRuleRepository
from .loader import load_rules_file

logger = get_logger(__name__)


class RuleSource(ABC):
    """规则来源基类"""

    name: str = "source"

    @abstractmethod
    async def rules_for(self, from_location: str) -> Sequence[NavigationRule]:
        """返回出发视图的全部规则，保持插入顺序"""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"


def _index_rules(rules: Iterable[NavigationRule]) -> Dict[str, Tuple[NavigationRule, ...]]:
    grouped: Dict[str, List[NavigationRule]] = defaultdict(list)
    for rule in rules:
        grouped[rule.from_location].append(rule)
    return {key: tuple(value) for key, value in grouped.items()}


class StaticRuleSource(RuleSource):
    """
    静态规则来源
    规则表在构造（或 reload）时一次性建立，查询期间只读
    """

    def __init__(self, rules: Iterable[NavigationRule] = (), name: str = SOURCE_STATIC,
                 path: Optional[Path] = None):
        self.name = name
        self.path = path
        self._index = _index_rules(rules)

    @classmethod
    def from_yaml(cls, path: Union[str, Path], name: str = SOURCE_STATIC) -> "StaticRuleSource":
        path = Path(path)
        return cls(load_rules_file(path), name=name, path=path)

    def reload(self) -> int:
        """重新读取规则文件，返回规则条数；解析失败时保留原规则表"""
        if self.path is None:
            raise RuntimeError(f"静态规则来源 '{self.name}' 没有关联文件，无法重新加载")
        index = _index_rules(load_rules_file(self.path))
        self._index = index
        count = sum(len(rules) for rules in index.values())
        logger.info(f"静态规则已重新加载: {count} 条")
        return count

    def __len__(self) -> int:
        return sum(len(rules) for rules in self._index.values())

    async def rules_for(self, from_location: str) -> Tuple[NavigationRule, ...]:
        return self._index.get(from_location, ())


class PersistedRuleSource(RuleSource):
    """
    数据库规则来源
    每次查询单独开一个会话，超时或数据库异常转为 SourceUnavailable
    """

    def __init__(self, session_factory: async_sessionmaker, timeout: float = 2.0,
                 name: str = SOURCE_DATABASE):
        self.name = name
        self.session_factory = session_factory
        self.timeout = timeout

    async def _query(self, from_location: str) -> Tuple[NavigationRule, ...]:
        async with self.session_factory() as session:
            repo = NavigationRuleRepository(session)
            records = await repo.find_rules_by_from_location(from_location)

        rules = []
        for record in records:
            try:
                rules.append(record.to_rule())
            except InvalidRule as e:
                logger.warning(f"跳过非法的数据库规则 id={record.id}: {e}")
        return tuple(rules)

    async def rules_for(self, from_location: str) -> Tuple[NavigationRule, ...]:
        try:
            return await asyncio.wait_for(self._query(from_location), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise SourceUnavailable(self.name, f"查询超时 ({self.timeout}s)") from e
        except (SQLAlchemyError, OSError) as e:
            raise SourceUnavailable(self.name, str(e)) from e

"""
导航解析器
按优先级依次查询规则来源，第一条匹配的规则胜出
"""
from typing import List, Optional, Sequence

from ..core import get_logger
from ..core.errors import SourceUnavailable
from ..core.events import ResolutionRequest, ResolutionResult
from .sources import RuleSource

logger = get_logger(__name__)


class NavigationResolver:
    """
    导航解析器

    - 来源按构造时的顺序查询，命中即返回，不再查询后面的来源
    - 所有来源都未命中时返回未解析结果，由调用方采用自己的默认行为
    - 来源不可用时抛出 SourceUnavailable；skip_unavailable_sources=True 时记录警告并继续查询下一个来源
    - 解析过程不修改任何来源，可并发调用
    """

    def __init__(self, sources: Sequence[RuleSource], skip_unavailable_sources: bool = False):
        self._sources: List[RuleSource] = list(sources)
        self.skip_unavailable_sources = skip_unavailable_sources

    @property
    def sources(self) -> List[str]:
        """按优先级排列的来源名称"""
        return [source.name for source in self._sources]

    def get_source(self, name: str) -> Optional[RuleSource]:
        for source in self._sources:
            if source.name == name:
                return source
        return None

    async def resolve(self, from_location: str, action_token: Optional[str], outcome: str) -> ResolutionResult:
        """解析下一个视图，参数非法时抛出 InvalidRequest"""
        return await self.resolve_request(ResolutionRequest(from_location, action_token, outcome))

    async def resolve_request(self, request: ResolutionRequest) -> ResolutionResult:
        for source in self._sources:
            try:
                rules = await source.rules_for(request.from_location)
            except SourceUnavailable as e:
                if not self.skip_unavailable_sources:
                    raise
                logger.warning(f"{e}，跳过该来源继续解析")
                continue

            for rule in rules:
                if rule.matches(request.outcome, request.action_token):
                    logger.debug(
                        f"导航命中 [{source.name}] {request.from_location} "
                        f"--({request.outcome})--> {rule.to_location}"
                    )
                    return ResolutionResult(to_location=rule.to_location, source=source.name, rule=rule)

        logger.debug(f"导航未解析: {request.from_location} / {request.outcome}")
        return ResolutionResult.unresolved()

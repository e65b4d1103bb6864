"""
测试导航解析器的匹配、优先级与异常语义
"""
import asyncio
from unittest.mock import AsyncMock

import pytest

from navkeeper.core.errors import InvalidRequest, SourceUnavailable
from navkeeper.core.events import NavigationRule, ResolutionRequest
from navkeeper.navigation import NavigationResolver, RuleSource, StaticRuleSource


class FailingSource(RuleSource):
    """模拟不可用的数据库来源"""

    def __init__(self, name="database"):
        self.name = name
        self.calls = 0

    async def rules_for(self, from_location):
        self.calls += 1
        raise SourceUnavailable(self.name, "查询超时 (2.0s)")


def persisted_like(rules, name="database"):
    return StaticRuleSource(rules, name=name)


@pytest.mark.asyncio
async def test_single_rule_resolves():
    resolver = NavigationResolver([StaticRuleSource([NavigationRule("login", "dashboard", "success")])])

    result = await resolver.resolve("login", None, "success")

    assert result.resolved
    assert result.to_location == "dashboard"
    assert result.source == "static"


@pytest.mark.asyncio
async def test_non_matching_outcome_is_unresolved():
    resolver = NavigationResolver([StaticRuleSource([NavigationRule("login", "dashboard", "success")])])

    result = await resolver.resolve("login", None, "failure")

    assert not result.resolved
    assert result.to_location is None


@pytest.mark.asyncio
async def test_unknown_location_is_unresolved(static_source):
    resolver = NavigationResolver([static_source])
    assert not (await resolver.resolve("nowhere", None, "success")).resolved


@pytest.mark.asyncio
async def test_no_sources_is_unresolved():
    resolver = NavigationResolver([])
    assert not (await resolver.resolve("login", None, "success")).resolved


@pytest.mark.asyncio
async def test_database_first_priority(static_source):
    database = persisted_like([NavigationRule("home", "admin", "goAdmin")])
    resolver = NavigationResolver([database, static_source])

    result = await resolver.resolve("home", None, "goAdmin")

    assert result.to_location == "admin"
    assert result.source == "database"


@pytest.mark.asyncio
async def test_static_first_priority(static_source):
    database = persisted_like([NavigationRule("home", "admin", "goAdmin")])
    resolver = NavigationResolver([static_source, database])

    result = await resolver.resolve("home", None, "goAdmin")

    assert result.to_location == "guest"
    assert result.source == "static"


@pytest.mark.asyncio
async def test_falls_back_to_lower_priority_source(static_source):
    database = persisted_like([NavigationRule("home", "admin", "goAdmin")])
    resolver = NavigationResolver([database, static_source])

    result = await resolver.resolve("login", None, "success")

    assert result.to_location == "dashboard"
    assert result.source == "static"


@pytest.mark.asyncio
async def test_lower_priority_source_not_queried_after_match():
    lower = AsyncMock(spec=RuleSource)
    lower.name = "static"
    resolver = NavigationResolver([
        persisted_like([NavigationRule("login", "dashboard", "success")]),
        lower,
    ])

    await resolver.resolve("login", None, "success")

    lower.rules_for.assert_not_called()


@pytest.mark.asyncio
async def test_first_matching_rule_in_source_wins():
    resolver = NavigationResolver([StaticRuleSource([
        NavigationRule("login", "first", "success"),
        NavigationRule("login", "second", "success"),
    ])])

    assert (await resolver.resolve("login", None, "success")).to_location == "first"


@pytest.mark.asyncio
async def test_repeated_calls_are_idempotent(static_source):
    database = persisted_like([NavigationRule("home", "admin", "goAdmin")])
    resolver = NavigationResolver([database, static_source])

    results = [await resolver.resolve("home", None, "goAdmin") for _ in range(5)]

    assert all(r == results[0] for r in results)


@pytest.mark.asyncio
async def test_action_restricted_rule():
    resolver = NavigationResolver([StaticRuleSource([
        NavigationRule("login", "admin", "ok", from_action="#{loginBean.adminLogin}"),
        NavigationRule("login", "dashboard", "ok"),
    ])])

    assert (await resolver.resolve("login", "#{loginBean.adminLogin}", "ok")).to_location == "admin"
    assert (await resolver.resolve("login", "#{loginBean.login}", "ok")).to_location == "dashboard"
    assert (await resolver.resolve("login", None, "ok")).to_location == "dashboard"


@pytest.mark.asyncio
async def test_source_unavailable_is_raised_not_unresolved(static_source):
    failing = FailingSource()
    resolver = NavigationResolver([failing, static_source])

    with pytest.raises(SourceUnavailable) as exc_info:
        await resolver.resolve("login", None, "success")

    assert exc_info.value.source == "database"


@pytest.mark.asyncio
async def test_skip_unavailable_sources_falls_through(static_source):
    failing = FailingSource()
    resolver = NavigationResolver([failing, static_source], skip_unavailable_sources=True)

    result = await resolver.resolve("login", None, "success")

    assert failing.calls == 1
    assert result.to_location == "dashboard"


@pytest.mark.asyncio
async def test_invalid_request_rejected(static_source):
    resolver = NavigationResolver([static_source])

    with pytest.raises(InvalidRequest):
        await resolver.resolve("", None, "success")
    with pytest.raises(InvalidRequest):
        await resolver.resolve("login", None, "")


@pytest.mark.asyncio
async def test_non_string_action_rejected(static_source):
    resolver = NavigationResolver([static_source])

    with pytest.raises(InvalidRequest):
        await resolver.resolve("login", 5, "success")


@pytest.mark.asyncio
async def test_resolve_request(static_source):
    resolver = NavigationResolver([static_source])

    result = await resolver.resolve_request(ResolutionRequest("home", "", "logout"))

    assert result.to_location == "login"
    assert result.rule == NavigationRule("home", "login", "logout")


@pytest.mark.asyncio
async def test_concurrent_resolutions(static_source):
    database = persisted_like([NavigationRule("home", "admin", "goAdmin")])
    resolver = NavigationResolver([database, static_source])

    results = await asyncio.gather(*[
        resolver.resolve("home", None, "goAdmin") if i % 2 else resolver.resolve("login", None, "success")
        for i in range(20)
    ])

    assert [r.to_location for r in results] == ["dashboard", "admin"] * 10


def test_sources_and_get_source(static_source):
    database = persisted_like([])
    resolver = NavigationResolver([database, static_source])

    assert resolver.sources == ["database", "static"]
    assert resolver.get_source("static") is static_source
    assert resolver.get_source("missing") is None

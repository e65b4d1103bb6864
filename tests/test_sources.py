"""
测试规则来源：YAML 加载、静态规则表、数据库规则来源
"""
import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from navkeeper.core.errors import InvalidRule, SourceUnavailable
from navkeeper.core.events import NavigationRule
from navkeeper.memory.models import NavigationRuleRecord
from navkeeper.memory.repositories import NavigationRuleRepository
from navkeeper.navigation import (
    NavigationResolver,
    PersistedRuleSource,
    StaticRuleSource,
    load_rules_file,
    parse_rules,
)

RULES_YAML = """
navigation_rules:
  - from_view_id: login
    navigation_cases:
      - from_outcome: success
        to_view_id: dashboard
      - from_outcome: admin
        from_action: "#{loginBean.adminLogin}"
        to_view_id: admin
  - from_view_id: home
    navigation_cases:
      - from_outcome: goAdmin
        to_view_id: guest
"""


# ============================================
# YAML 加载
# ============================================

def test_load_rules_file(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text(RULES_YAML, encoding="utf-8")

    rules = load_rules_file(path)

    assert rules == [
        NavigationRule("login", "dashboard", "success"),
        NavigationRule("login", "admin", "admin", from_action="#{loginBean.adminLogin}"),
        NavigationRule("home", "guest", "goAdmin"),
    ]


def test_missing_rules_file_is_empty(tmp_path):
    assert load_rules_file(tmp_path / "missing.yaml") == []


def test_empty_document_is_empty():
    assert parse_rules(None) == []
    assert parse_rules({"navigation_rules": None}) == []


def test_case_without_outcome_is_rejected():
    data = {"navigation_rules": [{"from_view_id": "login", "navigation_cases": [{"to_view_id": "dashboard"}]}]}
    with pytest.raises(InvalidRule, match="navigation_cases\\[0\\]"):
        parse_rules(data)


def test_rule_without_from_view_is_rejected():
    data = {"navigation_rules": [{"navigation_cases": [{"from_outcome": "ok", "to_view_id": "dashboard"}]}]}
    with pytest.raises(InvalidRule):
        parse_rules(data)


@pytest.mark.parametrize("from_action", [1, True])
def test_case_with_non_string_action_is_rejected(from_action):
    data = {"navigation_rules": [{"from_view_id": "login", "navigation_cases": [
        {"from_outcome": "ok", "to_view_id": "home", "from_action": from_action},
    ]}]}
    with pytest.raises(InvalidRule, match="navigation_cases\\[0\\]"):
        parse_rules(data)


def test_non_mapping_document_is_rejected():
    with pytest.raises(InvalidRule):
        parse_rules(["login", "dashboard"])


def test_malformed_yaml_is_rejected(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("navigation_rules: [\n  - from_view_id: login", encoding="utf-8")
    with pytest.raises(InvalidRule):
        load_rules_file(path)


# ============================================
# 静态规则来源
# ============================================

@pytest.mark.asyncio
async def test_static_source_keeps_insertion_order():
    source = StaticRuleSource([
        NavigationRule("login", "a", "x"),
        NavigationRule("home", "b", "y"),
        NavigationRule("login", "c", "z"),
    ])

    rules = await source.rules_for("login")

    assert [r.to_location for r in rules] == ["a", "c"]
    assert len(source) == 3


@pytest.mark.asyncio
async def test_static_source_result_is_restartable(static_source):
    rules = await static_source.rules_for("home")
    assert list(rules) == list(rules)
    assert await static_source.rules_for("unknown") == ()


@pytest.mark.asyncio
async def test_static_source_reload(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text(RULES_YAML, encoding="utf-8")
    source = StaticRuleSource.from_yaml(path)
    assert len(source) == 3

    path.write_text(
        "navigation_rules:\n"
        "  - from_view_id: home\n"
        "    navigation_cases:\n"
        "      - from_outcome: goAdmin\n"
        "        to_view_id: admin\n",
        encoding="utf-8",
    )

    assert source.reload() == 1
    assert [r.to_location for r in await source.rules_for("home")] == ["admin"]
    assert await source.rules_for("login") == ()


@pytest.mark.asyncio
async def test_static_source_reload_failure_keeps_rules(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text(RULES_YAML, encoding="utf-8")
    source = StaticRuleSource.from_yaml(path)

    path.write_text("navigation_rules:\n  - from_view_id: login\n    navigation_cases:\n      - to_view_id: x\n",
                    encoding="utf-8")

    with pytest.raises(InvalidRule):
        source.reload()
    assert len(source) == 3


def test_static_source_without_file_cannot_reload(static_source):
    with pytest.raises(RuntimeError):
        static_source.reload()


# ============================================
# 数据库规则来源
# ============================================

@pytest.mark.asyncio
async def test_persisted_source_returns_rules(session_factory):
    async with session_factory() as session:
        repo = NavigationRuleRepository(session)
        await repo.create("home", "admin", "goAdmin")
        await repo.create("home", "profile", "goProfile", from_action="#{menu.profile}")
        await repo.create("login", "dashboard", "success")

    source = PersistedRuleSource(session_factory)
    rules = await source.rules_for("home")

    assert [(r.to_location, r.condition, r.from_action) for r in rules] == [
        ("admin", "goAdmin", None),
        ("profile", "goProfile", "#{menu.profile}"),
    ]
    assert all(r.rule_id is not None for r in rules)
    assert source.name == "database"


@pytest.mark.asyncio
async def test_persisted_source_skips_invalid_rows(session_factory):
    async with session_factory() as session:
        session.add(NavigationRuleRecord(from_view_id="home", to_view_id="admin", condition=""))
        session.add(NavigationRuleRecord(from_view_id="home", to_view_id="", condition="goAdmin"))
        session.add(NavigationRuleRecord(from_view_id="home", to_view_id="guest", condition="goAdmin"))
        await session.commit()

    rules = await PersistedRuleSource(session_factory).rules_for("home")

    assert [r.to_location for r in rules] == ["guest"]


@pytest.mark.asyncio
async def test_database_rule_overrides_static_rule(session_factory, static_source):
    async with session_factory() as session:
        await NavigationRuleRepository(session).create("home", "admin", "goAdmin")

    resolver = NavigationResolver([PersistedRuleSource(session_factory), static_source])

    result = await resolver.resolve("home", None, "goAdmin")

    assert result.to_location == "admin"
    assert result.source == "database"
    assert (await resolver.resolve("home", None, "logout")).source == "static"


@pytest.mark.asyncio
async def test_persisted_source_timeout(session_factory):
    source = PersistedRuleSource(session_factory, timeout=0.01)

    async def slow_query(from_location):
        await asyncio.sleep(1)
        return ()

    source._query = slow_query

    with pytest.raises(SourceUnavailable) as exc_info:
        await source.rules_for("home")

    assert exc_info.value.source == "database"
    assert isinstance(exc_info.value.__cause__, asyncio.TimeoutError)


@pytest.mark.asyncio
async def test_persisted_source_database_error():
    session_factory = MagicMock()
    session_factory.return_value.__aenter__ = AsyncMock(
        side_effect=OperationalError("SELECT 1", {}, Exception("connection refused"))
    )
    session_factory.return_value.__aexit__ = AsyncMock(return_value=False)

    with pytest.raises(SourceUnavailable, match="database"):
        await PersistedRuleSource(session_factory).rules_for("home")


@pytest.mark.asyncio
async def test_resolver_timeout_is_not_unresolved(session_factory, static_source):
    source = PersistedRuleSource(session_factory, timeout=0.01)

    async def slow_query(from_location):
        await asyncio.sleep(1)
        return ()

    source._query = slow_query
    resolver = NavigationResolver([source, static_source])

    with pytest.raises(SourceUnavailable):
        await resolver.resolve("login", None, "success")

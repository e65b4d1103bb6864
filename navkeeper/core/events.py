"""
events模块
定义了模块间传递的数据结构：导航规则、导航请求与解析结果
"""
from dataclasses import dataclass
from typing import Optional

from .errors import InvalidRule, InvalidRequest


def _normalize_action(action_token: Optional[str]) -> Optional[str]:
    """空字符串与 None 都视为"没有动作" """
    if action_token is None:
        return None
    action_token = action_token.strip()
    return action_token or None


@dataclass(frozen=True)
class NavigationRule:
    """
    不可变的导航规则
    from_location: 出发视图
    to_location: 目标视图
    condition: 必须与 outcome 完全相等（区分大小写，不支持通配符）
    from_action: 可选，限定触发动作；None 表示任意动作
    rule_id: 持久化规则的主键，静态规则为 None，不参与匹配
    """
    from_location: str
    to_location: str
    condition: str
    from_action: Optional[str] = None
    rule_id: Optional[int] = None

    def __post_init__(self):
        for field_name in ("from_location", "to_location", "condition"):
            value = getattr(self, field_name)
            if not isinstance(value, str) or not value.strip():
                raise InvalidRule(f"导航规则字段 {field_name} 不能为空: {self!r}")
        if self.from_action is not None and not isinstance(self.from_action, str):
            raise InvalidRule(f"导航规则字段 from_action 必须是字符串: {self!r}")
        object.__setattr__(self, "from_action", _normalize_action(self.from_action))

    def matches(self, outcome: str, action_token: Optional[str] = None) -> bool:
        if self.condition != outcome:
            return False
        return self.from_action is None or self.from_action == action_token


@dataclass(frozen=True)
class ResolutionRequest:
    """
    导航请求，每次导航事件构造一次，用完即弃
    from_location: 当前视图标识
    action_token: 可选，触发本次导航的动作标识
    outcome: 业务逻辑给出的结果标记
    """
    from_location: str
    action_token: Optional[str]
    outcome: str

    def __post_init__(self):
        if not isinstance(self.from_location, str) or not self.from_location:
            raise InvalidRequest("from_location 必须是非空字符串")
        if not isinstance(self.outcome, str) or not self.outcome:
            raise InvalidRequest("outcome 必须是非空字符串")
        if self.action_token is not None and not isinstance(self.action_token, str):
            raise InvalidRequest("action_token 必须是字符串或 None")
        object.__setattr__(self, "action_token", _normalize_action(self.action_token))


@dataclass(frozen=True)
class ResolutionResult:
    """
    导航解析结果
    to_location: 目标视图，None 表示未解析（调用方自行采用默认行为）
    source: 命中规则所在的来源名称
    rule: 命中的规则
    """
    to_location: Optional[str] = None
    source: Optional[str] = None
    rule: Optional[NavigationRule] = None

    @property
    def resolved(self) -> bool:
        return self.to_location is not None

    @classmethod
    def unresolved(cls) -> "ResolutionResult":
        return cls()

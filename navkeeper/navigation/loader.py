"""
静态规则加载
从 YAML 文件读取 navigation_rules -> navigation_cases 结构：

navigation_rules:
  - from_view_id: login
    navigation_cases:
      - from_outcome: success
        to_view_id: dashboard
"""
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml

from ..core import get_logger
from ..core.errors import InvalidRule
from ..core.events import NavigationRule

logger = get_logger(__name__)


def parse_rules(data: Any) -> List[NavigationRule]:
    """将 YAML 解析结果转换为规则列表，结构不合法时抛出 InvalidRule"""
    if not data:
        return []
    if not isinstance(data, dict):
        raise InvalidRule(f"规则文件顶层必须是映射，实际为 {type(data).__name__}")

    entries = data.get("navigation_rules") or []
    if not isinstance(entries, list):
        raise InvalidRule("navigation_rules 必须是列表")

    rules: List[NavigationRule] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise InvalidRule(f"navigation_rules[{index}] 必须是映射")
        from_view_id = entry.get("from_view_id")
        cases = entry.get("navigation_cases") or []
        if not isinstance(cases, list):
            raise InvalidRule(f"navigation_rules[{index}].navigation_cases 必须是列表")

        for case_index, case in enumerate(cases):
            if not isinstance(case, dict):
                raise InvalidRule(f"navigation_rules[{index}].navigation_cases[{case_index}] 必须是映射")
            try:
                rules.append(NavigationRule(
                    from_location=from_view_id,
                    to_location=case.get("to_view_id"),
                    condition=case.get("from_outcome"),
                    from_action=case.get("from_action"),
                ))
            except InvalidRule as e:
                raise InvalidRule(f"navigation_rules[{index}].navigation_cases[{case_index}]: {e}") from e

    return rules


def load_rules_file(path: Union[str, Path]) -> List[NavigationRule]:
    """
    读取静态规则文件
    文件不存在时记录警告并返回空列表
    """
    path = Path(path)
    if not path.exists():
        logger.warning(f"未找到静态规则文件 {path}，静态规则为空")
        return []

    with open(path, "r", encoding="utf-8") as f:
        try:
            data: Dict[str, Any] = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise InvalidRule(f"无法解析规则文件 {path}: {e}") from e

    rules = parse_rules(data)
    logger.info(f"从 {path.name} 加载 {len(rules)} 条静态导航规则")
    return rules

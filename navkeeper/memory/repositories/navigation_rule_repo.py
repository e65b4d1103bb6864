from typing import List, Optional
from sqlalchemy import select, delete
from ..models import NavigationRuleRecord
from ...core.events import NavigationRule
from .base_repo import BaseRepository

class NavigationRuleRepository(BaseRepository[NavigationRuleRecord]):
    """
    导航规则数据仓库
    负责 navigation_rules 表的 CRUD 操作。
    写入前通过 NavigationRule 校验字段，非法规则抛出 InvalidRule。
    """
    def __init__(self, session):
        super().__init__(session, NavigationRuleRecord)

    async def find_rules_by_from_location(self, from_location: str) -> List[NavigationRuleRecord]:
        """获取某个出发视图的全部规则，按插入顺序"""
        result = await self.session.execute(
            select(NavigationRuleRecord)
            .where(NavigationRuleRecord.from_view_id == from_location)
            .order_by(NavigationRuleRecord.id)
        )
        return list(result.scalars().all())

    async def create(self, from_location: str, to_location: str, condition: str,
                     from_action: Optional[str] = None) -> NavigationRuleRecord:
        """创建新规则"""
        rule = NavigationRule(from_location, to_location, condition, from_action)
        record = NavigationRuleRecord(
            from_view_id=rule.from_location,
            to_view_id=rule.to_location,
            condition=rule.condition,
            from_action=rule.from_action,
        )
        return await self._save(record)

    async def create_from_rule(self, rule: NavigationRule) -> NavigationRuleRecord:
        return await self.create(rule.from_location, rule.to_location, rule.condition, rule.from_action)

    async def update(self, rule_id: int, to_location: Optional[str] = None, condition: Optional[str] = None,
                     from_action: Optional[str] = None) -> Optional[NavigationRuleRecord]:
        """更新目标视图 / 条件 / 动作，未传的字段保持不变"""
        record = await self.get_by_id(rule_id)
        if record is None:
            return None

        # 先校验再写入，避免把非法值留在会话里
        rule = NavigationRule(
            from_location=record.from_view_id,
            to_location=to_location if to_location is not None else record.to_view_id,
            condition=condition if condition is not None else record.condition,
            from_action=from_action if from_action is not None else record.from_action,
        )
        record.to_view_id = rule.to_location
        record.condition = rule.condition
        record.from_action = rule.from_action
        await self.session.commit()
        await self.session.refresh(record)
        return record

    async def delete_all(self) -> int:
        """清空规则表，返回删除行数"""
        result = await self.session.execute(delete(NavigationRuleRecord))
        await self.session.commit()
        return result.rowcount or 0

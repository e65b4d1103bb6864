"""
数据模型定义
导航规则在数据库中的存储结构
"""
from datetime import datetime
from typing import Optional
from sqlalchemy import String, Integer, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column
from .database import Base
from ..core.events import NavigationRule


class NavigationRuleRecord(Base):
    """
    导航规则表
    (id, from_view_id, to_view_id, condition)，id 自增
    """
    __tablename__ = "navigation_rules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    from_view_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    to_view_id: Mapped[str] = mapped_column(String, nullable=False)
    condition: Mapped[str] = mapped_column(String, nullable=False)
    from_action: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def to_rule(self) -> NavigationRule:
        """转换为不可变规则，字段不合法时抛出 InvalidRule"""
        return NavigationRule(
            from_location=self.from_view_id,
            to_location=self.to_view_id,
            condition=self.condition,
            from_action=self.from_action,
            rule_id=self.id,
        )

    def __repr__(self) -> str:
        return (f"<NavigationRuleRecord id={self.id} {self.from_view_id!r} "
                f"--[{self.condition!r}]--> {self.to_view_id!r}>")

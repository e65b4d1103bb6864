from typing import Generic, TypeVar, Type, Optional, List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from ..database import Base

T = TypeVar("T", bound=Base)

class BaseRepository(Generic[T]):
    """通用仓库基类，提供基本的 CRUD 操作"""
    def __init__(self, session: AsyncSession, model: Type[T]):
        self.session = session
        self.model = model

    async def get_by_id(self, id: int) -> Optional[T]:
        """根据 ID 获取对象"""
        result = await self.session.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def list_all(self) -> List[T]:
        """按 ID 顺序列出全部对象"""
        result = await self.session.execute(select(self.model).order_by(self.model.id))
        return list(result.scalars().all())

    async def delete(self, id: int) -> bool:
        """删除对象，不存在时返回 False"""
        obj = await self.get_by_id(id)
        if obj is None:
            return False
        await self.session.delete(obj)
        await self.session.commit()
        return True

    async def _save(self, obj: T) -> T:
        """保存对象（内部辅助方法）"""
        self.session.add(obj)
        await self.session.commit()
        await self.session.refresh(obj)
        return obj

from datetime import datetime
from typing import List
from sqlalchemy import select, func, update
from sqlalchemy.ext.asyncio import AsyncSession

from rentdesk.core import BaseRepository
from rentdesk.models import Notification


class NotificationRepository(BaseRepository[Notification]):
    """Landlord notification repository implementation"""

    def __init__(self, session: AsyncSession):
        super().__init__(Notification, session)

    async def get_since(self, landlord_id: int, since: datetime) -> List[Notification]:
        query = (
            select(Notification)
            .where(Notification.landlord_id == landlord_id, Notification.created_at >= since)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
        )
        return list((await self.session.execute(query)).scalars().all())

    async def count_unread(self, landlord_id: int) -> int:
        query = select(func.count()).select_from(Notification).where(
            Notification.landlord_id == landlord_id,
            Notification.read_at.is_(None),
        )
        return (await self.session.execute(query)).scalar() or 0

    async def mark_all_read(self, landlord_id: int, now: datetime) -> int:
        stmt = (
            update(Notification)
            .where(Notification.landlord_id == landlord_id, Notification.read_at.is_(None))
            .values(read_at=now)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0

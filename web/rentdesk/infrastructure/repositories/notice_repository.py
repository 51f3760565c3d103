from datetime import datetime
from typing import Iterable, List, Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from rentdesk.core import BaseRepository
from rentdesk.models import Notice


class NoticeRepository(BaseRepository[Notice]):
    """Notice repository implementation"""

    def __init__(self, session: AsyncSession):
        super().__init__(Notice, session)

    def _latest_first(self, query):
        return query.order_by(Notice.sent_at.desc(), Notice.id.desc())

    async def get_by_property(self, property_id: int) -> List[Notice]:
        query = select(Notice).where(Notice.property_id == property_id)
        return list((await self.session.execute(self._latest_first(query))).scalars().all())

    async def get_by_landlord(
        self, landlord_id: int, types: Optional[Iterable[str]] = None
    ) -> List[Notice]:
        query = select(Notice).where(Notice.landlord_id == landlord_id)
        if types is not None:
            query = query.where(Notice.type.in_(list(types)))
        return list((await self.session.execute(self._latest_first(query))).scalars().all())

    async def get_for_email(
        self, email: str, exclude_types: Iterable[str] = ()
    ) -> List[Notice]:
        query = select(Notice).where(func.lower(Notice.renter_email) == email.lower())
        exclude = list(exclude_types)
        if exclude:
            query = query.where(Notice.type.not_in(exclude))
        return list((await self.session.execute(self._latest_first(query))).scalars().all())

    async def count_unread_for_email(self, email: str, exclude_types: Iterable[str] = ()) -> int:
        query = select(func.count()).select_from(Notice).where(
            func.lower(Notice.renter_email) == email.lower(),
            Notice.read_at.is_(None),
        )
        exclude = list(exclude_types)
        if exclude:
            query = query.where(Notice.type.not_in(exclude))
        return (await self.session.execute(query)).scalar() or 0

    async def count_sent_since(self, since: Optional[datetime] = None) -> int:
        query = select(func.count()).select_from(Notice)
        if since is not None:
            query = query.where(Notice.sent_at >= since)
        return (await self.session.execute(query)).scalar() or 0

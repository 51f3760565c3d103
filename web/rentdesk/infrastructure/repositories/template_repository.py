from typing import List, Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from rentdesk.core import BaseRepository
from rentdesk.models import LeaseTemplate


class LeaseTemplateRepository(BaseRepository[LeaseTemplate]):
    """Lease template repository implementation"""

    def __init__(self, session: AsyncSession):
        super().__init__(LeaseTemplate, session)

    async def search(
        self,
        *,
        document_type: Optional[str] = None,
        region: Optional[str] = None,
        active_only: bool = False,
    ) -> List[LeaseTemplate]:
        """Templates newest first, optionally filtered by type and region"""
        query = select(LeaseTemplate)
        if document_type:
            query = query.where(func.lower(LeaseTemplate.document_type) == document_type.lower())
        if region:
            query = query.where(func.lower(LeaseTemplate.region) == region.lower())
        if active_only:
            query = query.where(LeaseTemplate.is_active.is_(True))
        query = query.order_by(LeaseTemplate.created_at.desc(), LeaseTemplate.id.desc())
        return list((await self.session.execute(query)).scalars().all())

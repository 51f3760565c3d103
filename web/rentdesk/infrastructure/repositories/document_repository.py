from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rentdesk.core import BaseRepository
from rentdesk.models import Document


class DocumentRepository(BaseRepository[Document]):
    """Stored document repository implementation"""

    def __init__(self, session: AsyncSession):
        super().__init__(Document, session)

    async def get_by_property(self, property_id: int, doc_type: Optional[str] = None) -> List[Document]:
        query = select(Document).where(Document.property_id == property_id)
        if doc_type:
            query = query.where(Document.type == doc_type)
        query = query.order_by(Document.uploaded_at.desc(), Document.id.desc())
        return list((await self.session.execute(query)).scalars().all())

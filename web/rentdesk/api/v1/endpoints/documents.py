from typing import List

from fastapi import APIRouter, Depends

from rentdesk import storage
from rentdesk.api.v1.schemas import DocumentOut
from rentdesk.deps import SessionDep
from rentdesk.security import current_user
from rentdesk.services import DocumentService


router = APIRouter()


def document_out(document) -> DocumentOut:
    out = DocumentOut.model_validate(document)
    out.url = storage.presigned(document.key)
    return out


@router.get("/{property_id}", response_model=List[DocumentOut])
async def lease_documents(property_id: int, sess: SessionDep, user=Depends(current_user)):
    """Lease documents of a property, newest first"""
    documents = await DocumentService(sess).get_lease_documents(user, property_id)
    return [document_out(d) for d in documents]


@router.get("/{property_id}/latest", response_model=DocumentOut)
async def latest_lease_document(property_id: int, sess: SessionDep, user=Depends(current_user)):
    return document_out(await DocumentService(sess).get_latest_lease_document(user, property_id))

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from rentdesk.api.v1.schemas import (
    TemplateIn, TemplateUpdate, TemplateOut, TemplateValuesIn, TemplateValidationOut,
)
from rentdesk.deps import SessionDep
from rentdesk.security import current_user, role_required
from rentdesk.services import TemplateService
from rentdesk.api.v1.endpoints.utils import get_user_id, to_data


router = APIRouter()

admin_only = role_required("admin")


@router.get("", response_model=List[TemplateOut])
async def list_templates(
    sess: SessionDep,
    type: Optional[str] = Query(None, max_length=32),
    region: Optional[str] = Query(None, max_length=120),
    user=Depends(current_user),
):
    """Templates, newest first; type and region match case-insensitively"""
    templates = await TemplateService(sess).list_templates(document_type=type, region=region)
    return [TemplateOut.model_validate(t) for t in templates]


@router.get("/{template_id}", response_model=TemplateOut)
async def get_template(template_id: int, sess: SessionDep, user=Depends(current_user)):
    return TemplateOut.model_validate(await TemplateService(sess).get_template(template_id))


@router.post("", response_model=TemplateOut, status_code=status.HTTP_201_CREATED)
async def create_template(payload: TemplateIn, sess: SessionDep, user=Depends(admin_only)):
    template = await TemplateService(sess).create_template(get_user_id(user), to_data(payload, "fields"))
    await sess.commit()
    return TemplateOut.model_validate(template)


@router.put("/{template_id}", response_model=TemplateOut)
async def update_template(template_id: int, payload: TemplateUpdate, sess: SessionDep, user=Depends(admin_only)):
    template = await TemplateService(sess).update_template(
        template_id, to_data(payload, "fields", exclude_unset=True)
    )
    await sess.commit()
    return TemplateOut.model_validate(template)


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_template(template_id: int, sess: SessionDep, user=Depends(admin_only)):
    await TemplateService(sess).delete_template(template_id)
    await sess.commit()


@router.post("/{template_id}/validate", response_model=TemplateValidationOut)
async def validate_values(
    template_id: int,
    payload: TemplateValuesIn,
    sess: SessionDep,
    user=Depends(current_user),
):
    """Check filled-in values against the template's field rules"""
    errors = await TemplateService(sess).validate(template_id, payload.values)
    return TemplateValidationOut(valid=not errors, errors=errors)

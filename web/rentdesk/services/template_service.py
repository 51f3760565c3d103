"""Regional lease templates maintained by admins."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..core import BaseService, NotFoundError, ValidationError
from ..infrastructure.repositories import LeaseTemplateRepository
from ..models import LeaseTemplate

logger = logging.getLogger(__name__)

FIELD_TYPES = ("text", "number", "date", "boolean", "select", "textarea", "address", "signature")
CONDITIONS = ("equals", "not_equals", "contains")


def validate_fields(fields: List[Dict[str, Any]]) -> None:
    """Structural checks on a template's field definitions.

    Raises:
        ValidationError: on duplicate names or ids, unknown types, select
            fields without options, or conditions on a missing field
    """
    names, ids = set(), set()
    for field in fields:
        if field.get("type") not in FIELD_TYPES:
            raise ValidationError(f"Field {field.get('name')!r} has an unknown type", field="fields")
        if field["name"] in names:
            raise ValidationError(f"Duplicate field name {field['name']!r}", field="fields")
        if field.get("id") in ids:
            raise ValidationError(f"Duplicate field id {field['id']!r}", field="fields")
        names.add(field["name"])
        ids.add(field.get("id"))
        if field["type"] == "select" and not field.get("options"):
            raise ValidationError(f"Select field {field['name']!r} needs options", field="fields")

    for field in fields:
        logic = field.get("conditional_logic")
        if not logic:
            continue
        target = logic.get("depends_on")
        if target in (field["name"], field.get("id")) or (target not in names and target not in ids):
            raise ValidationError(
                f"Field {field['name']!r} depends on unknown field {target!r}", field="fields"
            )
        if logic.get("condition") not in CONDITIONS:
            raise ValidationError(f"Field {field['name']!r} has an unknown condition", field="fields")


def _is_visible(field: Dict[str, Any], values: Dict[str, Any], by_key: Dict[str, Dict[str, Any]]) -> bool:
    logic = field.get("conditional_logic")
    if not logic:
        return True
    target = by_key.get(logic["depends_on"])
    actual = values.get(target["name"]) if target else None
    expected = logic.get("value")
    if logic["condition"] == "equals":
        return actual == expected
    if logic["condition"] == "not_equals":
        return actual != expected
    return actual is not None and str(expected) in str(actual)


def validate_values(template: LeaseTemplate, values: Dict[str, Any]) -> List[Dict[str, str]]:
    """Check form *values* against the template; returns a list of problems."""
    fields = sorted(template.fields or [], key=lambda f: f.get("order", 0))
    by_key: Dict[str, Dict[str, Any]] = {}
    for field in fields:
        by_key[field["name"]] = field
        if field.get("id"):
            by_key[field["id"]] = field

    errors: List[Dict[str, str]] = []
    for field in fields:
        if not _is_visible(field, values, by_key):
            continue
        name = field["name"]
        value = values.get(name)
        if value in (None, "", []):
            if field.get("required"):
                errors.append({"field": name, "message": f"{field.get('label') or name} is required"})
            continue
        if field["type"] == "select" and value not in (field.get("options") or []):
            errors.append({"field": name, "message": "Value is not one of the allowed options"})
        elif field["type"] == "number":
            try:
                float(value)
            except (TypeError, ValueError):
                errors.append({"field": name, "message": "Value must be a number"})
    return errors


class TemplateService(BaseService):
    """Service for lease template operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.repo = LeaseTemplateRepository(session)

    async def list_templates(
        self, document_type: Optional[str] = None, region: Optional[str] = None
    ) -> List[LeaseTemplate]:
        return await self.repo.search(document_type=document_type, region=region)

    async def by_type(self, document_type: str) -> List[LeaseTemplate]:
        return await self.repo.search(document_type=document_type)

    async def by_region(self, region: str) -> List[LeaseTemplate]:
        return await self.repo.search(region=region)

    async def get_template(self, template_id: int) -> LeaseTemplate:
        template = await self.repo.get(template_id)
        if not template:
            raise NotFoundError("Template", template_id)
        return template

    async def create_template(self, admin_id: int, data: Dict[str, Any]) -> LeaseTemplate:
        validate_fields(data.get("fields") or [])
        template = await self.repo.create(obj_in={**data, "created_by": admin_id, "version": 1})
        logger.info("Template %s (%s) created", template.id, template.region)
        return template

    async def update_template(self, template_id: int, data: Dict[str, Any]) -> LeaseTemplate:
        """Partial update; a change to ``fields`` bumps the version"""
        template = await self.get_template(template_id)
        if "fields" in data and data["fields"] is not None:
            validate_fields(data["fields"])
            if data["fields"] != template.fields:
                template.version = (template.version or 1) + 1
        for field, value in data.items():
            if field in ("id", "created_by", "version") or value is None:
                continue
            setattr(template, field, value)
        await self.session.flush()
        return template

    async def delete_template(self, template_id: int) -> None:
        await self.get_template(template_id)
        await self.repo.delete(id=template_id)

    async def validate(self, template_id: int, values: Dict[str, Any]) -> List[Dict[str, str]]:
        return validate_values(await self.get_template(template_id), values)

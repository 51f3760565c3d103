from decimal import Decimal
from typing import Any, Dict

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel

from rentdesk.core import BaseError


def get_user_id(user: dict) -> int:
    """Extract user ID from user token"""
    user_id = user.get("sub")
    if not user_id:
        raise BaseError("Invalid user token", status_code=401)
    return int(user_id)


def get_user_email(user: dict) -> str:
    """Extract email from user token"""
    email = user.get("email")
    if not email:
        raise BaseError("Invalid user token", status_code=401)
    return email


def to_data(payload: BaseModel, *json_fields: str, exclude_unset: bool = False) -> Dict[str, Any]:
    """Dump *payload* for the ORM; *json_fields* go to JSON columns and must be JSON-safe"""
    data = payload.model_dump(exclude_unset=exclude_unset)
    for name in json_fields:
        if data.get(name) is not None:
            data[name] = jsonable_encoder(data[name], custom_encoder={Decimal: float})
    return data

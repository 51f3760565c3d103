from datetime import datetime
from typing import Optional, List, Any, Dict
from pydantic import BaseModel, Field

FIELD_TYPE_PATTERN = "^(text|number|date|boolean|select|textarea|address|signature)$"


class ConditionalLogic(BaseModel):
    depends_on: str
    condition: str = Field(..., pattern="^(equals|not_equals|contains)$")
    value: Any = None


class TemplateField(BaseModel):
    id: str
    name: str = Field(..., min_length=1)
    label: str
    type: str = Field(..., pattern=FIELD_TYPE_PATTERN)
    required: bool = False
    options: Optional[List[str]] = None
    default_value: Any = None
    conditional_logic: Optional[ConditionalLogic] = None
    order: int = 0
    section: str = "general"
    help_text: Optional[str] = None


class TemplateIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    region: str = Field(..., min_length=1, max_length=120)
    country: str = Field("US", max_length=64)
    state: Optional[str] = Field(None, max_length=64)
    document_type: str = Field("lease", max_length=32)
    fields: List[TemplateField] = []
    is_active: bool = True


class TemplateUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    region: Optional[str] = Field(None, min_length=1, max_length=120)
    country: Optional[str] = Field(None, max_length=64)
    state: Optional[str] = Field(None, max_length=64)
    document_type: Optional[str] = Field(None, max_length=32)
    fields: Optional[List[TemplateField]] = None
    is_active: Optional[bool] = None


class TemplateOut(BaseModel):
    id: int
    name: str
    region: str
    country: str
    state: Optional[str] = None
    document_type: str
    fields: List[Dict[str, Any]] = []
    created_by: Optional[int] = None
    version: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TemplateValuesIn(BaseModel):
    values: Dict[str, Any] = {}


class TemplateValidationOut(BaseModel):
    valid: bool
    errors: List[Dict[str, str]] = []

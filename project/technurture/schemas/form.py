# technurture/schemas/form.py

import json
from datetime import datetime
from typing import Any, Optional

from pydantic import Field, field_validator

from technurture.schemas.base import CamelModel, Flag, NonEmpty, PartialModel


class FormField(CamelModel):
    """One input of a dynamic form as drawn by the form builder."""
    id: NonEmpty
    type: NonEmpty              # text, email, tel, textarea, select, radio, checkbox, ...
    label: NonEmpty
    placeholder: Optional[str] = None
    required: bool = False
    options: Optional[list[str]] = None


def decode_fields(value: Any) -> Any:
    # The admin form builder posts the field list as a JSON string
    if isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            raise ValueError("fields must be a list of field descriptors or its JSON encoding")
    return value


class DynamicFormCreate(CamelModel):
    title: NonEmpty
    description: Optional[str] = None
    type: NonEmpty              # course, hiring, event, ...
    fields: list[FormField]
    active: Flag = 1

    @field_validator("fields", mode="before")
    @classmethod
    def parse_fields(cls, value):
        return decode_fields(value)


class DynamicFormUpdate(PartialModel):
    not_nullable = frozenset({"title", "type", "fields", "active"})

    title: Optional[NonEmpty] = None
    description: Optional[str] = None
    type: Optional[NonEmpty] = None
    fields: Optional[list[FormField]] = None
    active: Optional[Flag] = None

    @field_validator("fields", mode="before")
    @classmethod
    def parse_fields(cls, value):
        return decode_fields(value)


class DynamicForm(DynamicFormCreate):
    id: str
    created_at: datetime
    updated_at: datetime


class FormSubmissionCreate(CamelModel):
    form_id: NonEmpty
    submission_data: dict[str, Any] = Field(default_factory=dict)


class FormSubmission(FormSubmissionCreate):
    id: str
    created_at: datetime

# technurture/schemas/base.py

from typing import Annotated, ClassVar

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

# 0/1 integer flag; JSON booleans are accepted and stored as 0/1
Flag = Annotated[int, Field(ge=0, le=1)]
NonEmpty = Annotated[str, Field(min_length=1)]


class CamelModel(BaseModel):
    """
    Base for every API schema: camelCase on the wire (createdAt, readTime),
    snake_case attributes in Python. Both spellings are accepted on input.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class PartialModel(CamelModel):
    """
    Base for partial updates: every field is optional, but a field that is
    mandatory on create cannot be explicitly set to null.
    """
    not_nullable: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def reject_null_required(self):
        for name in self.not_nullable:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{to_camel(name)} cannot be null")
        return self

    def changes(self) -> dict:
        """Only the fields the client actually sent, snake_case."""
        return self.model_dump(exclude_unset=True)

"""Person Schemas: camelCase API contract for the person endpoints.

Invariants:
    - AddPersonRequest.name / last_name: stripped, non-empty
    - Wire format is camelCase; snake_case accepted on input
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True,
    )


class AddPersonRequest(_CamelModel):
    """Person creation: the external service is queried by name."""
    name: str = Field(min_length=1, max_length=200)
    last_name: str = Field(min_length=1, max_length=200)

    @field_validator("name", "last_name")
    @classmethod
    def strip_value(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("value cannot be empty or whitespace")
        return v


class PersonResponse(_CamelModel):
    id: int
    count: int
    name: str
    last_name: str
    gender: str | None = None
    probability: float | None = None

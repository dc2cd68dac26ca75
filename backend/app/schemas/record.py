"""Record Schemas - request bodies for create, bulk create and update.

Invariants:
    - RecordCreate.name: 1-255 chars, stripped, non-empty
    - data is always a JSON object
    - Extra keys are kept (table-specific columns); protected and unknown
      columns are dropped later by the engine
    - BulkCreateRequest carries 1-1000 items
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _strip_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("name cannot be empty or whitespace")
    return v


class RecordCreate(BaseModel):
    """Body of POST /{model}."""
    model_config = ConfigDict(extra="allow")

    name: str = Field(min_length=1, max_length=255)
    data: dict[str, Any] = Field(default_factory=dict)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return _strip_name(v)


class RecordUpdate(BaseModel):
    """Body of PATCH /{model}/{id}. Only fields present in the body are written."""
    model_config = ConfigDict(extra="allow")

    name: str | None = Field(None, min_length=1, max_length=255)
    data: dict[str, Any] | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str | None) -> str:
        if v is None:
            raise ValueError("name cannot be null")
        return _strip_name(v)

    @field_validator("data")
    @classmethod
    def data_not_null(cls, v: dict[str, Any] | None) -> dict[str, Any]:
        if v is None:
            raise ValueError("data cannot be null")
        return v

    def to_patch(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class BulkCreateRequest(BaseModel):
    """Body of POST /{model}/bulk."""
    items: list[RecordCreate] = Field(min_length=1, max_length=1000)

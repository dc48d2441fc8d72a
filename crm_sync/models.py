"""Input models for amoCRM webhook payloads and the persisted record type.

Every field amoCRM may omit is optional: a missing or ``null`` list becomes
empty, a non-string value is treated as absent, and a list entry that is not
an object is dropped on its own without invalidating its parent.  Unknown
keys are ignored.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _objects_only(v: Any) -> list:
    """Keep the object entries of a list; anything else reads as empty."""
    if not isinstance(v, list):
        return []
    return [item for item in v if isinstance(item, (dict, BaseModel))]


class FieldValue(BaseModel):
    """One entry of a custom field's ``values`` list."""

    model_config = ConfigDict(extra="ignore")

    value: str | None = None

    @field_validator("value", mode="before")
    @classmethod
    def _non_string_is_absent(cls, v: Any) -> str | None:
        return v if isinstance(v, str) else None


class CustomField(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: str | None = None
    name: str | None = None
    values: list[FieldValue] = Field(default_factory=list)

    @field_validator("code", "name", mode="before")
    @classmethod
    def _non_string_is_absent(cls, v: Any) -> str | None:
        return v if isinstance(v, str) else None

    @field_validator("values", mode="before")
    @classmethod
    def _drop_malformed_values(cls, v: Any) -> list:
        return _objects_only(v)


class Contact(BaseModel):
    """A contact from one webhook delivery. Never persisted.

    ``id`` is opaque and only used in log lines.
    """

    model_config = ConfigDict(extra="ignore")

    id: Any = None
    custom_fields: list[CustomField] = Field(default_factory=list)

    @field_validator("custom_fields", mode="before")
    @classmethod
    def _drop_malformed_fields(cls, v: Any) -> list:
        return _objects_only(v)


class WebhookPayload(BaseModel):
    """Envelope of ``POST /webhook/amocrm``.

    Contacts are kept as raw values here and validated one by one by the
    pipeline, so a single malformed contact does not discard the batch.
    """

    model_config = ConfigDict(extra="ignore")

    contacts: list[Any] = Field(default_factory=list)

    @field_validator("contacts", mode="before")
    @classmethod
    def _null_is_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class Record(BaseModel):
    """One spreadsheet row: the email as submitted and its ingestion date."""

    model_config = ConfigDict(frozen=True)

    email: str
    date: str = ""

"""Raw upstream payload shapes, one tagged model per provider kind.

Records stay as plain dicts so that one malformed record can be dropped by the
normalizer without failing the whole payload.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter


class WurlusPayload(BaseModel):
    """Nested shape: events -> markets -> outcomes."""

    kind: Literal["wurlus"] = "wurlus"
    provider_id: str = "wurlus"
    fetched_at: int
    events: list[Any] = Field(default_factory=list)


class WalAppPayload(BaseModel):
    """Flat shape: one row per (event, market, outcome) with denormalized event metadata."""

    kind: Literal["walapp"] = "walapp"
    provider_id: str = "walapp"
    fetched_at: int
    data: list[Any] = Field(default_factory=list)


class StaticPayload(BaseModel):
    """Local catalog in the nested Wurlus event shape."""

    kind: Literal["static"] = "static"
    provider_id: str = "static"
    fetched_at: int
    events: list[Any] = Field(default_factory=list)


RawPayload = Annotated[
    Union[WurlusPayload, WalAppPayload, StaticPayload],
    Field(discriminator="kind"),
]

_raw_payload_adapter: TypeAdapter[RawPayload] = TypeAdapter(RawPayload)


def parse_raw_payload(data: dict[str, Any]) -> WurlusPayload | WalAppPayload | StaticPayload:
    """Validate a tagged dict into its payload model (raises pydantic.ValidationError)."""
    return _raw_payload_adapter.validate_python(data)

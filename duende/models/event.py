"""Pydantic v2 model for a flamenco event listing.

All models use frozen config (immutable).  The reconciler only *selects*
records and the night-plan cache writes go straight to the store, so no
code path needs to mutate an ``Event`` in place.

Field names are snake_case in Python; the aliases are the document-store
and wire names (``_id``, ``sourceURL``, ``nightPlan``) so that a raw
MongoDB document validates directly and ``model_dump(by_alias=True)``
produces the JSON the frontend expects.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Values scraped listings use for "unknown".  The listing-quality gate
# treats these the same as a missing field.
PLACEHOLDER_VALUES: tuple[Any, ...] = (None, "", "N/A")

# Fields that must be present for a listing to pass the quality gate.
REQUIRED_LISTING_FIELDS: tuple[str, ...] = ("name", "artist", "time", "venue")


class Event(BaseModel):
    """A single flamenco performance listing."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = Field(default="", alias="_id", description="Store-assigned identifier.")
    name: str | None = Field(default=None, description="Display title; may be missing in scraped data.")
    artist: str = Field(default="", description="Performer name, free text.")
    date: str = Field(description="Calendar date, YYYY-MM-DD.")
    time: str | None = Field(default=None, description="Local start time string.")
    venue: str | None = None
    city: str | None = None
    provincia: str | None = Field(default=None, description="Province / region.")
    country: str | None = None
    description: str | None = None
    source_url: str | None = Field(default=None, alias="sourceURL")
    verified: bool = False
    night_plan: str | None = Field(default=None, alias="nightPlan")

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> str:
        # MongoDB hands back bson.ObjectId instances.
        return "" if value is None else str(value)

    @field_validator("artist", mode="before")
    @classmethod
    def _blank_artist(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("verified", mode="before")
    @classmethod
    def _coerce_verified(cls, value: Any) -> bool:
        return bool(value)

    @property
    def identity_key(self) -> tuple[str, str, str | None]:
        """(artist lower-cased and trimmed, date, time): same key = same real event."""
        return (self.artist.strip().lower(), self.date, self.time)

    @property
    def has_source(self) -> bool:
        return bool(self.source_url and self.source_url.strip())

    def is_complete_listing(self) -> bool:
        """Return ``True`` if no required listing field holds a placeholder."""
        return all(getattr(self, f) not in PLACEHOLDER_VALUES for f in REQUIRED_LISTING_FIELDS)

    def to_document(self) -> dict[str, Any]:
        """Serialise with store/wire field names."""
        return self.model_dump(by_alias=True)

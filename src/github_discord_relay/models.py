# models.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_serializer, field_validator

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Upstream feed items are consumed as plain dicts; only a handful of keys are read.
RawEvent = Dict[str, Any]


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def iso_z(value: datetime) -> str:
    return as_utc(value).isoformat().replace("+00:00", "Z")


class Cursor(BaseModel):
    """
    Marker of the last event that was relayed.
    Stored on disk as {"id": 123, "timestamp": "2020-01-02T00:00:00Z"}.
    """
    id: int = 0
    timestamp: datetime = EPOCH

    @field_validator("timestamp")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        return as_utc(v)

    @field_serializer("timestamp")
    def _dump_timestamp(self, v: datetime) -> str:
        return iso_z(v)

    @classmethod
    def zero(cls) -> "Cursor":
        return cls()

    @property
    def is_zero(self) -> bool:
        return self.id == 0 and self.timestamp == EPOCH


class NormalizedEvent(BaseModel):
    """A watched upstream event reduced to the fields the notifier renders."""
    id: int
    user: str = ""
    title: str = ""
    action: str = ""
    url: str = ""
    timestamp: datetime

    @field_validator("user", "title", "action", "url", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("timestamp")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        return as_utc(v)

    def to_cursor(self) -> Cursor:
        return Cursor(id=self.id, timestamp=self.timestamp)


class CycleReport(BaseModel):
    """Outcome of one fetch → notify → persist cycle."""
    fetched: int = 0
    matched: int = 0
    new: int = 0
    delivered: int = 0
    delivery_failed: bool = False
    cursor: Cursor = Field(default_factory=Cursor)
    cursor_advanced: bool = False
    error: Optional[str] = None

    def summary(self) -> str:
        return (
            f"Fetched: {self.fetched}; Matched: {self.matched}; New: {self.new}; "
            f"Delivered: {self.delivered}; Cursor: {self.cursor.id}@{iso_z(self.cursor.timestamp)}"
        )

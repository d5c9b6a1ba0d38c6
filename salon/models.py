# salon/models.py

from datetime import datetime, timezone
from typing import Any, List

from sqlalchemy.types import JSON
from sqlmodel import SQLModel, Field, Column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Snapshot(SQLModel, table=True):
    """One serialized collection (appointments, finances, users) per key."""

    __tablename__ = "snapshots"

    key: str = Field(primary_key=True)
    payload: List[Any] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    updated_at: datetime = Field(default_factory=utcnow)

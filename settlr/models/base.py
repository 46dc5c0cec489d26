from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, Field, ConfigDict


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid4().hex


class LedgerModel(BaseModel):
    """Immutable record handed to the engine by the backing store."""
    id: str = Field(default_factory=_new_id, validation_alias="_id")

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        from_attributes=True
    )

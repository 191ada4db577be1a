from datetime import datetime, timezone
from typing import ClassVar, FrozenSet

from pydantic import BaseModel, Field, ConfigDict

from app.db.store import new_id


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MongoModel(BaseModel):
    """Stored document: ``_id`` in the database, ``id`` in API responses."""

    id: str = Field(default_factory=new_id, validation_alias="_id", serialization_alias="id")
    created_at: datetime = Field(default_factory=_utcnow)

    # Computed fields that must not be persisted
    derived_fields: ClassVar[FrozenSet[str]] = frozenset()

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True
    )

    def to_document(self) -> dict:
        doc = self.model_dump(exclude={"id", *self.derived_fields})
        doc["_id"] = self.id
        return doc

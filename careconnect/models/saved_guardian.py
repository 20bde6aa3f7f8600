import pymongo
from beanie import Document, Indexed
from beanie import PydanticObjectId as OID
from pydantic import Field
from datetime import datetime, timezone
from pymongo import IndexModel


class SavedGuardian(Document):
    """A guardian bookmarked by a vital."""
    vital_id: Indexed(OID)
    guardian_id: Indexed(OID)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "saved_guardians"
        indexes = [
            IndexModel(
                [("vital_id", pymongo.ASCENDING), ("guardian_id", pymongo.ASCENDING)],
                unique=True,
            ),
        ]

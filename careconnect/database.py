from careconnect.config import get_settings
from pymongo import AsyncMongoClient
from beanie import init_beanie

from careconnect.models import (
    User,
    VitalProfile,
    GuardianProfile,
    Booking,
    Review,
    Notification,
    SavedGuardian,
    Message,
)

settings = get_settings()

DOCUMENT_MODELS = [
    User,
    VitalProfile,
    GuardianProfile,
    Booking,
    Review,
    Notification,
    SavedGuardian,
    Message,
]

DEFAULT_DB_NAME = "careconnect"

_mongo_client: AsyncMongoClient | None = None


def _db_name_from_uri(uri: str) -> str:
    # mongodb://host:27017/<db>?opts -> <db>
    tail = uri.split("://", 1)[-1]
    if "/" not in tail:
        return DEFAULT_DB_NAME
    name = tail.split("/", 1)[1].split("?")[0]
    return name or DEFAULT_DB_NAME


async def init_db(client: AsyncMongoClient | None = None, db_name: str | None = None) -> None:
    """Initialize MongoDB (Beanie) and register document models.

    Tests pass their own client and a throwaway database name.
    """
    global _mongo_client
    _mongo_client = client or AsyncMongoClient(
        settings.MONGODB_URI,
        serverSelectionTimeoutMS=5000,
        connectTimeoutMS=10000,
        maxPoolSize=10,
    )
    await init_beanie(
        database=_mongo_client[db_name or _db_name_from_uri(settings.MONGODB_URI)],
        document_models=DOCUMENT_MODELS,
    )


async def ping_db() -> bool:
    """Check MongoDB connectivity."""
    if not _mongo_client:
        return False
    try:
        await _mongo_client.admin.command("ping")
        return True
    except Exception:
        return False


async def close_db() -> None:
    global _mongo_client
    if _mongo_client is not None:
        await _mongo_client.close()
        _mongo_client = None

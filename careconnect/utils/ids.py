from beanie import PydanticObjectId as OID
from fastapi import HTTPException


def to_oid(value: str | OID, label: str = "ID") -> OID:
    """Parse a path/body id, turning malformed values into a 400."""
    if isinstance(value, OID):
        return value
    try:
        return OID(value)
    except Exception:
        raise HTTPException(status_code=400, detail=f"Invalid {label}")

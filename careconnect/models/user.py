from beanie import Document, Indexed
from pydantic import Field
from datetime import datetime, timezone
from careconnect.constants import Role


class User(Document):
    """Account owner; a VITAL or GUARDIAN logging in with e-mail + password.

    Profile data lives in VitalProfile / GuardianProfile, linked by user_id.
    """

    email: Indexed(str, unique=True)  # stored lower-cased
    password_hash: str
    role: Role

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "users"

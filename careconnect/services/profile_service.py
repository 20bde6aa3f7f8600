from datetime import datetime, timezone

from fastapi import HTTPException

from careconnect.models import User, VitalProfile, GuardianProfile
from careconnect.constants import Role
from careconnect.schemas import (
    VitalProfileCreate,
    VitalProfileUpdate,
    GuardianProfileCreate,
    GuardianProfileUpdate,
)
from careconnect.utils import email
from careconnect.utils.logger import get_logger

logger = get_logger("profile_service")


def _clean_photo(value: str | None) -> str:
    return value.strip() if value and value.strip() else ""


async def get_vital_profile_for(user: User) -> VitalProfile:
    """Resolve the VitalProfile of the logged-in user or 404."""
    profile = await VitalProfile.find_one(VitalProfile.user_id == user.id)
    if not profile:
        raise HTTPException(status_code=404, detail="Vital profile not found")
    return profile


async def get_guardian_profile_for(user: User) -> GuardianProfile:
    """Resolve the GuardianProfile of the logged-in user or 404."""
    profile = await GuardianProfile.find_one(GuardianProfile.user_id == user.id)
    if not profile:
        raise HTTPException(status_code=404, detail="Guardian profile not found")
    return profile


async def has_profile(user: User) -> bool:
    if user.role == Role.VITAL:
        return await VitalProfile.find_one(VitalProfile.user_id == user.id) is not None
    return await GuardianProfile.find_one(GuardianProfile.user_id == user.id) is not None


def _apply_update(doc, payload) -> None:
    """Merge explicitly-sent fields into a document and re-run its validators.

    profile_photo: blank clears. null clears optional fields and is ignored
    for the rest.
    """
    model = type(doc)
    changes = {}
    for field in payload.model_fields_set:
        value = getattr(payload, field)
        if field == "profile_photo":
            value = _clean_photo(value)
        elif value is None and model.model_fields[field].default is not None:
            continue
        changes[field] = value

    merged = {**doc.model_dump(exclude={"id", "revision_id"}), **changes}
    try:
        validated = model.model_validate(merged)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    for field in changes:
        setattr(doc, field, getattr(validated, field))
    doc.updated_at = datetime.now(timezone.utc)


# -------------------- Vital --------------------


async def create_vital_profile(user: User, payload: VitalProfileCreate) -> VitalProfile:
    if await VitalProfile.find_one(VitalProfile.user_id == user.id):
        raise HTTPException(status_code=400, detail="Profile already exists")

    data = payload.model_dump()
    data["profile_photo"] = _clean_photo(payload.profile_photo)
    try:
        profile = VitalProfile(user_id=user.id, **data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    await profile.insert()
    logger.info(f"Vital profile created: {profile.id} (user {user.id})")

    await email.send_email(to=user.email, **email.vital_profile_created(profile.name))
    return profile


async def update_vital_profile(user: User, payload: VitalProfileUpdate) -> VitalProfile:
    profile = await VitalProfile.find_one(VitalProfile.user_id == user.id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    _apply_update(profile, payload)
    await profile.save()
    return profile


async def delete_vital_profile(user: User) -> None:
    profile = await VitalProfile.find_one(VitalProfile.user_id == user.id)
    if profile:
        await profile.delete()
        logger.info(f"Vital profile deleted: {profile.id} (user {user.id})")


# -------------------- Guardian --------------------


async def create_guardian_profile(user: User, payload: GuardianProfileCreate) -> GuardianProfile:
    if await GuardianProfile.find_one(GuardianProfile.user_id == user.id):
        raise HTTPException(status_code=400, detail="Profile already exists")

    data = payload.model_dump()
    data["profile_photo"] = _clean_photo(payload.profile_photo)
    try:
        profile = GuardianProfile(user_id=user.id, **data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    await profile.insert()
    logger.info(f"Guardian profile created: {profile.id} (user {user.id})")

    await email.send_email(to=user.email, **email.guardian_profile_activated(profile.name))
    return profile


async def update_guardian_profile(user: User, payload: GuardianProfileUpdate) -> GuardianProfile:
    profile = await GuardianProfile.find_one(GuardianProfile.user_id == user.id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    _apply_update(profile, payload)
    await profile.save()
    return profile

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from beanie.operators import In
from pymongo.errors import DuplicateKeyError

from careconnect.constants import Role
from careconnect.models import GuardianProfile, SavedGuardian, User
from careconnect.schemas import (
    VitalProfileCreate,
    VitalProfileUpdate,
    VitalProfileOut,
    SavedGuardianIn,
    GuardianSummaryOut,
)
from careconnect.security import require_roles, get_current_user
from careconnect.services import profile_service
from careconnect.services.rating_service import rating_overview
from careconnect.utils.ids import to_oid
from careconnect.utils.logger import get_logger
from careconnect.utils.serializers import vital_out, guardian_summary_out, saved_guardian_out

logger = get_logger("vital_router")

router = APIRouter(prefix="/api/vital", tags=["vital"], dependencies=[Depends(require_roles([Role.VITAL]))])


# -------------------- Profile --------------------


@router.get("/profile", response_model=VitalProfileOut)
async def get_profile(current: User = Depends(get_current_user)):
    return vital_out(await profile_service.get_vital_profile_for(current))


@router.post("/profile", response_model=VitalProfileOut, status_code=201)
async def create_profile(payload: VitalProfileCreate, current: User = Depends(get_current_user)):
    return vital_out(await profile_service.create_vital_profile(current, payload))


@router.put("/profile", response_model=VitalProfileOut)
async def update_profile(payload: VitalProfileUpdate, current: User = Depends(get_current_user)):
    return vital_out(await profile_service.update_vital_profile(current, payload))


@router.delete("/profile")
async def delete_profile(current: User = Depends(get_current_user)):
    await profile_service.delete_vital_profile(current)
    return {"ok": True}


# -------------------- Saved guardians --------------------


@router.get("/saved-guardians", response_model=List[GuardianSummaryOut])
async def list_saved_guardians(current: User = Depends(get_current_user)):
    vital = await profile_service.get_vital_profile_for(current)
    saved = await SavedGuardian.find(SavedGuardian.vital_id == vital.id).sort(-SavedGuardian.created_at).to_list()
    if not saved:
        return []
    ids = [s.guardian_id for s in saved]
    guardians = await GuardianProfile.find(In(GuardianProfile.id, ids)).to_list()
    by_id = {g.id: g for g in guardians}
    overview = await rating_overview(ids)
    # keep saved order; skip guardians whose profile has since been removed
    return [
        guardian_summary_out(by_id[gid], *overview.get(gid, (None, 0)))
        for gid in ids
        if gid in by_id
    ]


@router.post("/saved-guardians", status_code=201)
async def save_guardian(payload: SavedGuardianIn, current: User = Depends(get_current_user)):
    vital = await profile_service.get_vital_profile_for(current)
    gid = to_oid(payload.guardian_id, "guardian ID")
    if not await GuardianProfile.get(gid):
        raise HTTPException(status_code=404, detail="Guardian not found")
    if await SavedGuardian.find_one(SavedGuardian.vital_id == vital.id, SavedGuardian.guardian_id == gid):
        raise HTTPException(status_code=400, detail="Guardian already saved")

    saved = SavedGuardian(vital_id=vital.id, guardian_id=gid)
    try:
        await saved.insert()
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="Guardian already saved")
    return saved_guardian_out(saved)


@router.delete("/saved-guardians")
async def unsave_guardian(
    guardian_id: str = Query(...),
    current: User = Depends(get_current_user),
):
    vital = await profile_service.get_vital_profile_for(current)
    gid = to_oid(guardian_id, "guardian ID")
    saved = await SavedGuardian.find_one(SavedGuardian.vital_id == vital.id, SavedGuardian.guardian_id == gid)
    if saved:
        await saved.delete()
    return {"ok": True}

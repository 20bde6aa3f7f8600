import re
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from careconnect.models import GuardianProfile, User
from careconnect.schemas import (
    GuardianSummaryOut,
    GuardianDetailOut,
    GuardianContactOut,
    GuardianMatchOut,
    ReviewOut,
)
from careconnect.security import require_vital, get_current_user
from careconnect.services import review_service
from careconnect.services.booking_service import has_active_booking
from careconnect.services.guardian_metrics import build_guardian_metrics
from careconnect.services.matching_service import MatchingInput, match_guardians
from careconnect.services.profile_service import get_vital_profile_for
from careconnect.services.rating_service import rating_overview
from careconnect.utils.ids import to_oid
from careconnect.utils.serializers import guardian_summary_out, guardian_detail_out

router = APIRouter(prefix="/api/guardians", tags=["guardians"])


async def _get_guardian(guardian_id: str) -> GuardianProfile:
    guardian = await GuardianProfile.get(to_oid(guardian_id, "guardian ID"))
    if not guardian:
        raise HTTPException(status_code=404, detail="Guardian not found")
    return guardian


@router.get("", response_model=List[GuardianSummaryOut])
async def list_guardians(
    city: Optional[str] = Query(None),
    specialization: Optional[str] = Query(None),
    verified: Optional[bool] = Query(None),
    current: User = Depends(require_vital),
):
    """Browse guardians with their average rating and review count."""
    query: dict = {}
    if city and city.strip():
        query["location.city"] = {"$regex": f"^{re.escape(city.strip())}$", "$options": "i"}
    if specialization and specialization.strip():
        query["specialization"] = {"$regex": re.escape(specialization.strip()), "$options": "i"}
    if verified is not None:
        query["is_verified"] = verified

    guardians = await GuardianProfile.find(query).to_list()
    overview = await rating_overview([g.id for g in guardians])
    return [guardian_summary_out(g, *overview.get(g.id, (None, 0))) for g in guardians]


@router.get("/recommended", response_model=List[GuardianMatchOut])
async def recommended_guardians(current: User = Depends(require_vital)):
    """Guardians ranked for the current vital (rating order unless AI matching is on)."""
    vital = await get_vital_profile_for(current)
    return await match_guardians(MatchingInput.from_vital(vital))


@router.get("/{guardian_id}", response_model=GuardianDetailOut)
async def get_guardian(guardian_id: str, current: User = Depends(require_vital)):
    guardian = await _get_guardian(guardian_id)
    overview = await rating_overview([guardian.id])
    average, count = overview.get(guardian.id, (None, 0))
    return guardian_detail_out(guardian, average, count, await build_guardian_metrics(guardian))


@router.get("/{guardian_id}/contact", response_model=GuardianContactOut)
async def get_guardian_contact(guardian_id: str, current: User = Depends(require_vital)):
    """E-mail and phone, shared only once a booking is ACCEPTED or ONGOING."""
    guardian = await _get_guardian(guardian_id)
    vital = await get_vital_profile_for(current)
    if not await has_active_booking(vital.id, guardian.id):
        raise HTTPException(
            status_code=403,
            detail="Contact details are available after the guardian accepts a booking",
        )
    user = await User.get(guardian.user_id)
    return GuardianContactOut(email=user.email if user else "", phone_number=guardian.phone_number)


@router.get("/{guardian_id}/reviews", response_model=List[ReviewOut])
async def get_guardian_reviews(guardian_id: str, current: User = Depends(get_current_user)):
    guardian = await _get_guardian(guardian_id)
    return await review_service.list_guardian_reviews(guardian.id)

from typing import List

from fastapi import APIRouter, Depends

from careconnect.constants import Role
from careconnect.models import User
from careconnect.schemas import (
    GuardianProfileCreate,
    GuardianProfileUpdate,
    GuardianProfileOut,
    GuardianMetricsOut,
    BookingActionIn,
    BookingOut,
    ReviewOut,
)
from careconnect.security import require_roles, get_current_user
from careconnect.services import booking_service, profile_service, review_service
from careconnect.services.guardian_metrics import build_guardian_metrics
from careconnect.utils.serializers import guardian_out, booking_out

router = APIRouter(prefix="/api/guardian", tags=["guardian"], dependencies=[Depends(require_roles([Role.GUARDIAN]))])


# -------------------- Profile --------------------


@router.get("/profile", response_model=GuardianProfileOut)
async def get_profile(current: User = Depends(get_current_user)):
    return guardian_out(await profile_service.get_guardian_profile_for(current))


@router.post("/profile", response_model=GuardianProfileOut, status_code=201)
async def create_profile(payload: GuardianProfileCreate, current: User = Depends(get_current_user)):
    return guardian_out(await profile_service.create_guardian_profile(current, payload))


@router.put("/profile", response_model=GuardianProfileOut)
async def update_profile(payload: GuardianProfileUpdate, current: User = Depends(get_current_user)):
    return guardian_out(await profile_service.update_guardian_profile(current, payload))


# -------------------- Bookings --------------------


@router.get("/bookings", response_model=List[BookingOut])
async def list_bookings(current: User = Depends(get_current_user)):
    guardian = await profile_service.get_guardian_profile_for(current)
    return await booking_service.list_guardian_bookings(guardian)


@router.patch("/bookings/{booking_id}", response_model=BookingOut)
async def update_booking(
    booking_id: str,
    payload: BookingActionIn,
    current: User = Depends(get_current_user),
):
    """Apply accept / reject / start / complete to one of the guardian's bookings."""
    guardian = await profile_service.get_guardian_profile_for(current)
    booking = await booking_service.apply_action(guardian, booking_id, payload.action)
    return booking_out(booking, guardian=guardian)


# -------------------- Reviews & metrics --------------------


@router.get("/reviews", response_model=List[ReviewOut])
async def list_reviews(current: User = Depends(get_current_user)):
    guardian = await profile_service.get_guardian_profile_for(current)
    return await review_service.list_guardian_reviews(guardian.id)


@router.get("/metrics", response_model=GuardianMetricsOut)
async def get_metrics(current: User = Depends(get_current_user)):
    guardian = await profile_service.get_guardian_profile_for(current)
    return await build_guardian_metrics(guardian)

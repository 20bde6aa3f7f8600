from typing import List

from fastapi import APIRouter, Depends, status

from careconnect.constants import Role
from careconnect.models import User
from careconnect.schemas import BookingCreate, BookingOut
from careconnect.security import require_roles, get_current_user
from careconnect.services import booking_service
from careconnect.services.profile_service import get_vital_profile_for
from careconnect.utils.serializers import booking_out

router = APIRouter(prefix="/api/bookings", tags=["bookings"])


@router.post("", response_model=BookingOut, status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: BookingCreate,
    current: User = Depends(require_roles([Role.VITAL])),
):
    vital = await get_vital_profile_for(current)
    booking = await booking_service.create_booking(
        vital,
        payload.guardian_id,
        notes=payload.notes,
        start_date=payload.start_date,
        end_date=payload.end_date,
    )
    return booking_out(booking, vital=vital)


@router.get("", response_model=List[BookingOut])
async def list_my_bookings(current: User = Depends(require_roles([Role.VITAL]))):
    vital = await get_vital_profile_for(current)
    return await booking_service.list_vital_bookings(vital)


@router.get("/{booking_id}", response_model=BookingOut)
async def get_booking(booking_id: str, current: User = Depends(get_current_user)):
    """Visible to the booking's vital and guardian only."""
    return await booking_service.get_booking_for_party(current, booking_id)

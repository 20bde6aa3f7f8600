from fastapi import APIRouter, Depends, HTTPException

from careconnect.models import User, VitalProfile
from careconnect.schemas import VitalProfileOut
from careconnect.security import require_guardian
from careconnect.services.booking_service import vital_booked_guardian
from careconnect.services.profile_service import get_guardian_profile_for
from careconnect.utils.ids import to_oid
from careconnect.utils.serializers import vital_out

router = APIRouter(prefix="/api/vitals", tags=["vitals"])


@router.get("/{vital_id}", response_model=VitalProfileOut)
async def get_vital(vital_id: str, current: User = Depends(require_guardian)):
    """A guardian may view a vital's profile only if that vital has booked them."""
    guardian = await get_guardian_profile_for(current)
    vital = await VitalProfile.get(to_oid(vital_id, "vital ID"))
    if not vital or not await vital_booked_guardian(vital.id, guardian.id):
        raise HTTPException(status_code=404, detail="Vital not found")
    return vital_out(vital)

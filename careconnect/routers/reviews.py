from typing import List

from fastapi import APIRouter, Depends, status

from careconnect.constants import Role
from careconnect.models import User
from careconnect.schemas import ReviewCreate, ReviewOut
from careconnect.security import require_roles, get_current_user
from careconnect.services import review_service
from careconnect.services.profile_service import get_vital_profile_for
from careconnect.utils.serializers import review_out

router = APIRouter(prefix="/api/reviews", tags=["reviews"], dependencies=[Depends(require_roles([Role.VITAL]))])


@router.post("", response_model=ReviewOut, status_code=status.HTTP_201_CREATED)
async def create_review(payload: ReviewCreate, current: User = Depends(get_current_user)):
    """Only COMPLETED bookings can be reviewed, once. Reviews are final."""
    vital = await get_vital_profile_for(current)
    review = await review_service.create_review(vital, payload)
    return review_out(review)


@router.get("", response_model=List[ReviewOut])
async def list_my_reviews(current: User = Depends(get_current_user)):
    vital = await get_vital_profile_for(current)
    return await review_service.list_vital_reviews(vital)

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..core.auth import UserInfo, get_current_user
from ..core.exceptions import MediaRateError, NotFoundError, ValidationError
from ..dependencies import get_media_service, get_rating_service
from ..media.service import MediaService
from .models import RatingSubmission, SavedRating, UserRatings
from .service import RatingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ratings", tags=["ratings"])

@router.get("/me", response_model=UserRatings)
async def get_my_ratings(
    user: UserInfo = Depends(get_current_user),
    rating_service: RatingService = Depends(get_rating_service)
):
    try:
        ratings = await rating_service.list_for_user(user.id)
    except MediaRateError as e:
        logger.error(f"Error loading ratings for {user.id}: {str(e)}")
        raise HTTPException(status_code=502, detail="Failed to load your ratings.")
    return UserRatings(user_id=user.id, ratings=ratings)

@router.put("/{media_id}", response_model=SavedRating)
async def rate_media(
    media_id: str,
    submission: RatingSubmission,
    user: UserInfo = Depends(get_current_user),
    media_service: MediaService = Depends(get_media_service),
    rating_service: RatingService = Depends(get_rating_service)
):
    """
    Create or update the caller's rating for a media item
    A user holds at most one rating per item
    """
    try:
        await media_service.get_media(media_id)
        return await rating_service.submit(user.id, media_id, submission.rating, submission.review)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.message)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Media not found")
    except MediaRateError as e:
        logger.error(f"Error saving rating for media {media_id}: {str(e)}")
        raise HTTPException(status_code=502, detail="Failed to save your rating. Please try again.")

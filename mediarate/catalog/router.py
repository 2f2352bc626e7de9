import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..core.auth import UserInfo, get_current_user
from ..core.config import settings
from ..core.exceptions import MediaRateError
from ..dependencies import get_media_service, get_rating_service
from ..media.models import Vocabulary
from ..media.service import MediaService
from ..ratings.models import ratings_by_media
from ..ratings.service import RatingService
from .browser import cover_image_for, filter_media, rating_button_label, results_label

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/catalog", tags=["catalog"])

@router.get("/")
async def get_catalog(
    query: Optional[str] = Query(None, description="Substring matched against title and description"),
    user: UserInfo = Depends(get_current_user),
    media_service: MediaService = Depends(get_media_service),
    rating_service: RatingService = Depends(get_rating_service)
):
    """
    Most recently added media with the caller's ratings
    Filtering is a literal, case-insensitive substring match
    """
    query = query or ""
    try:
        media = await media_service.list_recent()
        ratings = ratings_by_media(await rating_service.list_for_user(user.id))
    except MediaRateError as e:
        logger.error(f"Error loading catalog for {user.id}: {str(e)}")
        raise HTTPException(status_code=502, detail="Failed to load the catalog. Please try again.")

    filtered = filter_media(media, query)
    return {
        "results_label": results_label(len(filtered), query),
        "total": len(filtered),
        "media": [
            {
                **item.model_dump(mode="json", by_alias=True),
                "coverImage": cover_image_for(item),
                "userRating": ratings[item.id].rating if item.id in ratings else None,
                "buttonLabel": rating_button_label(ratings.get(item.id)),
            }
            for item in filtered
        ],
        "ratings": {
            media_id: rating.model_dump(mode="json", by_alias=True)
            for media_id, rating in ratings.items()
        },
    }

@router.get("/vocabulary")
async def get_vocabulary():
    """Media types, genres per type and countries offered by the forms"""
    return Vocabulary(placeholder_cover_image=settings.PLACEHOLDER_COVER_IMAGE)

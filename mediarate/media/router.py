import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from ..core.auth import UserInfo, get_current_user
from ..core.exceptions import CascadeDeleteError, MediaRateError, NotFoundError, ValidationError
from ..dependencies import get_media_service
from .models import DeleteMediaResult, Media, MediaDraft
from .service import MediaService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/media", tags=["media"])

@router.post("/", response_model=Media, status_code=201)
async def add_media(
    draft: MediaDraft,
    user: UserInfo = Depends(get_current_user),
    media_service: MediaService = Depends(get_media_service)
):
    try:
        return await media_service.create_media(draft)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.message)
    except MediaRateError as e:
        logger.error(f"Error adding media for {user.id}: {str(e)}")
        raise HTTPException(status_code=502, detail="Failed to add media. Please try again.")

@router.get("/{media_id}", response_model=Media)
async def get_media(
    media_id: str,
    user: UserInfo = Depends(get_current_user),
    media_service: MediaService = Depends(get_media_service)
):
    try:
        return await media_service.get_media(media_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Media not found")
    except MediaRateError as e:
        raise HTTPException(status_code=502, detail=str(e))

@router.put("/{media_id}", response_model=Media)
async def edit_media(
    media_id: str,
    draft: MediaDraft,
    user: UserInfo = Depends(get_current_user),
    media_service: MediaService = Depends(get_media_service)
):
    try:
        media = await media_service.get_media(media_id)
        return await media_service.update_media(media, draft)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.message)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Media not found")
    except MediaRateError as e:
        logger.error(f"Error updating media {media_id}: {str(e)}")
        raise HTTPException(status_code=502, detail="Failed to update media. Please try again.")

@router.delete("/{media_id}", response_model=DeleteMediaResult)
async def delete_media(
    media_id: str,
    confirm: bool = Query(False, description="Must be true to actually delete"),
    user: UserInfo = Depends(get_current_user),
    media_service: MediaService = Depends(get_media_service)
):
    """
    Delete a media record and every rating of it
    Without confirm=true nothing is deleted; the response says how many ratings would go
    """
    try:
        await media_service.get_media(media_id)
        if not confirm:
            return DeleteMediaResult(
                media_id=media_id,
                deleted=False,
                ratings_to_delete=await media_service.count_ratings(media_id)
            )
        logger.info(f"User {user.id} deleting media {media_id}")
        return await media_service.delete_media(media_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Media not found")
    except CascadeDeleteError as e:
        raise HTTPException(status_code=502, detail={
            "message": "Failed to delete media. Please try again.",
            "ratings_deleted": e.deleted,
            "ratings_remaining": e.remaining
        })
    except MediaRateError as e:
        logger.error(f"Error deleting media {media_id}: {str(e)}")
        raise HTTPException(status_code=502, detail="Failed to delete media. Please try again.")

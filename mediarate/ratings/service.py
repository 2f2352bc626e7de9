import logging
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError

from ..core.config import settings
from ..core.exceptions import StoreError, ValidationError
from ..core.store import RecordStore
from ..core.utils import generate_id, normalize_optional, utcnow
from .models import MAX_RATING, MIN_RATING, REVIEW_MAX_LENGTH, Rating, SavedRating

logger = logging.getLogger(__name__)

def validate_submission(rating: int, review: Optional[str]) -> Optional[str]:
    """Check a rating submission and return the normalized review."""
    if not rating:
        raise ValidationError("Rating Required", "Please select a rating before submitting.")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError("Invalid Rating", f"Ratings go from {MIN_RATING} to {MAX_RATING} stars.")

    review = normalize_optional(review)
    if review is not None and len(review) > REVIEW_MAX_LENGTH:
        raise ValidationError("Review Too Long", f"Reviews are limited to {REVIEW_MAX_LENGTH} characters.")
    return review

class RatingService:
    def __init__(self, store: RecordStore, collection: str = settings.RATINGS_COLLECTION):
        self.store = store
        self.collection = collection

    async def list_for_user(self, user_id: str) -> List[Rating]:
        records = await self.store.list(self.collection, where={'userId': user_id})
        ratings = []
        for record in records:
            try:
                ratings.append(Rating.model_validate(record))
            except PydanticValidationError as e:
                logger.warning(f"Skipping malformed {self.collection} record {record.get('id')}: {e.error_count()} error(s)")
        return ratings

    async def list_ids_for_media(self, media_id: str) -> List[str]:
        """Ids of every rating that points at a media item, malformed or not."""
        records = await self.store.list(self.collection, where={'mediaId': media_id})
        return [record['id'] for record in records if record.get('id')]

    async def find_user_rating(self, user_id: str, media_id: str) -> Optional[Rating]:
        records = await self.store.list(
            self.collection,
            where={'userId': user_id, 'mediaId': media_id},
            limit=1
        )
        if not records:
            return None
        try:
            return Rating.model_validate(records[0])
        except PydanticValidationError as e:
            # never fall through to a create while a rating exists
            logger.error(f"Malformed {self.collection} record {records[0].get('id')}: {str(e)}")
            raise StoreError(f"Existing rating for {media_id} is malformed") from e

    async def save_rating(
        self,
        user_id: str,
        media_id: str,
        rating: int,
        review: Optional[str],
        existing: Optional[Rating] = None
    ) -> SavedRating:
        """Create or update the single rating a user holds for a media item.

        ``existing`` is the caller's view of the user's current rating; when it
        is given the record is updated in place and keeps its id. Validation
        happens before any store call.
        """
        review = validate_submission(rating, review)

        if existing is not None:
            updated_at = utcnow()
            await self.store.update(self.collection, existing.id, {
                'rating': rating,
                'review': review,
                'updatedAt': updated_at
            })
            logger.info(f"Updated rating {existing.id} for media {media_id} to {rating}")
            saved = existing.model_copy(update={'rating': rating, 'review': review, 'updated_at': updated_at})
            return SavedRating(rating=saved, created=False)

        new_rating = Rating(
            id=generate_id("rating"),
            user_id=user_id,
            media_id=media_id,
            rating=rating,
            review=review
        )
        await self.store.create(self.collection, new_rating.model_dump(by_alias=True, exclude={'updated_at'}))
        logger.info(f"Created rating {new_rating.id} for media {media_id}")
        return SavedRating(rating=new_rating, created=True)

    async def submit(self, user_id: str, media_id: str, rating: int, review: Optional[str]) -> SavedRating:
        """Stateless variant: looks the existing rating up before deciding."""
        validate_submission(rating, review)
        existing = await self.find_user_rating(user_id, media_id)
        return await self.save_rating(user_id, media_id, rating, review, existing)

    async def delete(self, rating_id: str):
        await self.store.delete(self.collection, rating_id)

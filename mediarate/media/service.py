import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from ..core.config import settings
from ..core.exceptions import CascadeDeleteError, NotFoundError, StoreError, ValidationError
from ..core.store import RecordStore
from ..core.utils import generate_id, normalize_optional, utcnow
from ..ratings.service import RatingService
from .models import (
    ADD_DESCRIPTION_MAX, EDIT_DESCRIPTION_MAX, MIN_RELEASE_YEAR,
    DeleteMediaResult, Media, MediaDraft, MediaType
)

logger = logging.getLogger(__name__)

def _check_release_year(year: int, max_year: int):
    if not MIN_RELEASE_YEAR <= year <= max_year:
        raise ValidationError(
            "Invalid Release Year",
            f"Release year must be between {MIN_RELEASE_YEAR} and {max_year}."
        )

def _check_description(description: Optional[str], max_length: int):
    if description is not None and len(description) > max_length:
        raise ValidationError(
            "Description Too Long",
            f"Descriptions are limited to {max_length} characters."
        )

def build_new_media(draft: MediaDraft) -> Media:
    """Validate an add-form draft and turn it into a record ready to create."""
    if not draft.title.strip() or not draft.type or not draft.genre or not draft.release_year:
        raise ValidationError("Missing Information", "Please fill in all required fields.")

    now = utcnow()
    _check_release_year(draft.release_year, now.year)
    description = normalize_optional(draft.description)
    _check_description(description, ADD_DESCRIPTION_MAX)

    return Media(
        id=generate_id("media"),
        title=draft.title.strip(),
        type=draft.type,
        genre=draft.genre,
        release_year=draft.release_year,
        description=description,
        cover_image=normalize_optional(draft.cover_image),
        country=normalize_optional(draft.country),
        created_at=now
    )

def build_media_update(draft: MediaDraft) -> Dict[str, Any]:
    """Validate an edit-form draft; returns every mutable field plus updatedAt."""
    if not draft.title.strip():
        raise ValidationError("Title Required", "Please enter a title for the media.")

    now = utcnow()
    release_year = draft.release_year or now.year
    _check_release_year(release_year, now.year + 5)
    description = normalize_optional(draft.description)
    _check_description(description, EDIT_DESCRIPTION_MAX)

    return {
        'title': draft.title.strip(),
        'type': (draft.type or MediaType.MOVIE).value,
        'genre': draft.genre,
        'releaseYear': release_year,
        'country': normalize_optional(draft.country),
        'description': description,
        'coverImage': normalize_optional(draft.cover_image),
        'updatedAt': now
    }

class MediaService:
    def __init__(
        self,
        store: RecordStore,
        ratings: RatingService,
        collection: str = settings.MEDIA_COLLECTION
    ):
        self.store = store
        self.ratings = ratings
        self.collection = collection

    async def list_recent(self, limit: int = settings.CATALOG_PAGE_SIZE) -> List[Media]:
        records = await self.store.list(self.collection, order_by=('createdAt', 'desc'), limit=limit)
        return self._parse_records(records)

    async def get_media(self, media_id: str) -> Media:
        records = await self.store.list(self.collection, where={'id': media_id}, limit=1)
        if not records:
            raise NotFoundError(self.collection, media_id)
        try:
            return Media.model_validate(records[0])
        except PydanticValidationError as e:
            logger.error(f"Malformed {self.collection} record {media_id}: {str(e)}")
            raise StoreError(f"{self.collection}/{media_id} is malformed") from e

    def _parse_records(self, records) -> List[Media]:
        media = []
        for record in records:
            try:
                media.append(Media.model_validate(record))
            except PydanticValidationError as e:
                logger.warning(f"Skipping malformed {self.collection} record {record.get('id')}: {e.error_count()} error(s)")
        return media

    async def create_media(self, draft: MediaDraft) -> Media:
        media = build_new_media(draft)
        record = media.model_dump(by_alias=True, exclude={'updated_at'})
        record['type'] = media.type.value
        await self.store.create(self.collection, record)
        logger.info(f"Created media {media.id} ({media.type.value}: {media.title})")
        return media

    async def update_media(self, media: Media, draft: MediaDraft) -> Media:
        fields = build_media_update(draft)
        await self.store.update(self.collection, media.id, fields)
        logger.info(f"Updated media {media.id}")
        return Media.model_validate(media.model_dump(by_alias=True) | fields)

    async def count_ratings(self, media_id: str) -> int:
        return len(await self.ratings.list_ids_for_media(media_id))

    async def delete_media(self, media_id: str) -> DeleteMediaResult:
        """Delete a media record after every rating that references it.

        Ratings go one at a time, each awaited, then the media record. There
        is no rollback: if a rating delete fails the ones before it stay
        deleted and the media record is left in place.
        """
        rating_ids = await self.ratings.list_ids_for_media(media_id)
        deleted = 0
        for rating_id in rating_ids:
            try:
                await self.ratings.delete(rating_id)
            except StoreError as e:
                logger.error(
                    f"Cascade delete of media {media_id} failed on rating {rating_id} "
                    f"after {deleted}/{len(rating_ids)} ratings"
                )
                raise CascadeDeleteError(media_id, deleted, len(rating_ids) - deleted, e) from e
            deleted += 1

        await self.store.delete(self.collection, media_id)
        logger.info(f"Deleted media {media_id} and {deleted} rating(s)")
        return DeleteMediaResult(media_id=media_id, deleted=True, ratings_deleted=deleted)

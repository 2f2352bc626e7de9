import logging
from typing import Dict, Optional

from ..core.auth import UserInfo
from ..core.exceptions import MediaRateError, ValidationError
from ..core.notifications import Notifier
from ..media.models import Media
from .models import MAX_RATING, UNSET_RATING, Rating
from .service import RatingService

logger = logging.getLogger(__name__)

class RatingDialog:
    """Closed, or open on one media item with the rating/review being edited.

    ``ratings`` is the owning browser's mediaId -> Rating map; a successful
    submit writes the new value into it.
    """

    def __init__(self, service: RatingService, notifier: Notifier, ratings: Dict[str, Rating]):
        self.service = service
        self.notifier = notifier
        self.ratings = ratings
        self.selected_media: Optional[Media] = None
        self.rating = UNSET_RATING
        self.review = ""

    @property
    def is_open(self) -> bool:
        return self.selected_media is not None

    @property
    def existing(self) -> Optional[Rating]:
        if self.selected_media is None:
            return None
        return self.ratings.get(self.selected_media.id)

    def open(self, media: Media):
        self.selected_media = media
        existing = self.ratings.get(media.id)
        self.rating = existing.rating if existing else UNSET_RATING
        self.review = (existing.review or "") if existing else ""

    def close(self):
        self.selected_media = None

    def set_rating(self, value: int):
        if not UNSET_RATING <= value <= MAX_RATING:
            raise ValidationError("Invalid Rating", f"Pick between 1 and {MAX_RATING} stars.")
        self.rating = value

    def set_review(self, text: str):
        self.review = text or ""

    def _reset(self):
        self.selected_media = None
        self.rating = UNSET_RATING
        self.review = ""

    async def submit(self, user: UserInfo) -> Optional[Rating]:
        if self.selected_media is None:
            return None
        media = self.selected_media
        existing = self.existing

        try:
            saved = await self.service.save_rating(user.id, media.id, self.rating, self.review, existing)
        except ValidationError as e:
            self.notifier.error(e.title, e.message)
            return None
        except MediaRateError as e:
            logger.error(f"Error saving rating for media {media.id}: {str(e)}")
            self.notifier.error("Error", "Failed to save your rating. Please try again.")
            return None

        self.ratings[media.id] = saved.rating
        self.notifier.notify(
            "Rating Added" if saved.created else "Rating Updated",
            f'You rated "{media.title}" {saved.rating.rating}/5 stars.'
        )
        self._reset()
        return saved.rating

import logging
from typing import Dict, List, Optional

from ..core.auth import AuthSession, AuthState, UserInfo
from ..core.config import settings
from ..core.exceptions import MediaRateError, NotFoundError
from ..core.notifications import Notifier
from ..media.models import Media
from ..media.service import MediaService
from ..ratings.models import Rating, ratings_by_media
from ..ratings.service import RatingService
from ..ratings.workflow import RatingDialog

logger = logging.getLogger(__name__)

def matches_query(media: Media, query: str) -> bool:
    """Literal, case-insensitive substring match on title or description."""
    if query == "":
        return True
    needle = query.lower()
    if needle in media.title.lower():
        return True
    return media.description is not None and needle in media.description.lower()

def filter_media(media: List[Media], query: str) -> List[Media]:
    return [item for item in media if matches_query(item, query)]

def cover_image_for(media: Media, placeholder: str = settings.PLACEHOLDER_COVER_IMAGE) -> str:
    return media.cover_image or placeholder

def results_label(count: int, query: str) -> str:
    label = f"{count} {'result' if count == 1 else 'results'}"
    if query:
        label += f' for "{query}"'
    return label

def rating_button_label(rating: Optional[Rating]) -> str:
    return f"Rated {rating.rating}/5" if rating else "Rate This"

class CatalogBrowser:
    def __init__(
        self,
        media_service: MediaService,
        rating_service: RatingService,
        notifier: Notifier,
        page_size: int = settings.CATALOG_PAGE_SIZE
    ):
        self.media_service = media_service
        self.rating_service = rating_service
        self.notifier = notifier
        self.page_size = page_size

        self.user: Optional[UserInfo] = None
        self.auth_loading = True
        self.media: List[Media] = []
        self.user_ratings: Dict[str, Rating] = {}
        self.query = ""
        self.load_error: Optional[str] = None
        self.rating_dialog = RatingDialog(rating_service, notifier, self.user_ratings)
        self._unsubscribe = None

    def attach(self, session: AuthSession):
        self._unsubscribe = session.subscribe(self.on_auth_state)

    def detach(self):
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    async def on_auth_state(self, state: AuthState):
        previous = self.user
        self.user = state.user
        self.auth_loading = state.is_loading
        if state.user is None:
            self.media = []
            self.user_ratings.clear()
            self.rating_dialog.close()
        elif previous is None or previous.id != state.user.id:
            await self.load()

    async def load(self):
        self.load_error = None
        await self.load_media()
        await self.load_user_ratings()

    async def load_media(self):
        try:
            self.media = await self.media_service.list_recent(self.page_size)
        except MediaRateError as e:
            logger.error(f"Error loading media: {str(e)}")
            self._report_load_failure("Couldn't load the catalog.")

    async def load_user_ratings(self):
        if self.user is None:
            return
        try:
            ratings = await self.rating_service.list_for_user(self.user.id)
        except MediaRateError as e:
            logger.error(f"Error loading ratings for {self.user.id}: {str(e)}")
            self._report_load_failure("Couldn't load your ratings.")
            return
        # mutate in place, the rating dialog shares this dict
        self.user_ratings.clear()
        self.user_ratings.update(ratings_by_media(ratings))

    def _report_load_failure(self, message: str):
        self.load_error = message if self.load_error is None else f"{self.load_error} {message}"
        self.notifier.error("Loading Failed", f"{message} Please try again.")

    async def refresh(self):
        self.load_error = None
        await self.load_media()

    def set_query(self, query: str):
        self.query = query or ""

    @property
    def filtered_media(self) -> List[Media]:
        return filter_media(self.media, self.query)

    def find_media(self, media_id: str) -> Media:
        for item in self.media:
            if item.id == media_id:
                return item
        raise NotFoundError(self.media_service.collection, media_id)

    def open_rating(self, media_id: str):
        self.rating_dialog.open(self.find_media(media_id))

    async def submit_rating(self) -> Optional[Rating]:
        if self.user is None:
            return None
        return await self.rating_dialog.submit(self.user)

    def cards(self) -> List[dict]:
        cards = []
        for item in self.filtered_media:
            user_rating = self.user_ratings.get(item.id)
            cards.append({
                'media': item.model_dump(mode='json', by_alias=True),
                'coverImage': cover_image_for(item),
                'userRating': user_rating.rating if user_rating else None,
                'buttonLabel': rating_button_label(user_rating),
            })
        return cards

    def snapshot(self) -> dict:
        filtered = self.filtered_media
        dialog = self.rating_dialog
        return {
            'user': self.user.model_dump() if self.user else None,
            'auth_loading': self.auth_loading,
            'greeting': f"Welcome back, {self.user.greeting_name}!" if self.user else None,
            'query': self.query,
            'results_label': results_label(len(filtered), self.query),
            'cards': self.cards(),
            'load_error': self.load_error,
            'rating_dialog': {
                'open': dialog.is_open,
                'media_id': dialog.selected_media.id if dialog.selected_media else None,
                'title': f'Rate "{dialog.selected_media.title}"' if dialog.selected_media else None,
                'rating': dialog.rating,
                'review': dialog.review,
            },
        }

from fastapi import Depends

from .core.auth import AuthSession
from .core.store import RecordStore, get_store
from .media.service import MediaService
from .ratings.service import RatingService

def get_rating_service(store: RecordStore = Depends(get_store)) -> RatingService:
    return RatingService(store)

def get_media_service(
    store: RecordStore = Depends(get_store),
    ratings: RatingService = Depends(get_rating_service)
) -> MediaService:
    return MediaService(store, ratings)

def get_auth_session() -> AuthSession:
    return AuthSession()

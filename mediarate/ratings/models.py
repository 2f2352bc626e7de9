from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MIN_RATING = 1
MAX_RATING = 5
UNSET_RATING = 0
REVIEW_MAX_LENGTH = 500

class Rating(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    user_id: str
    media_id: str
    rating: int = Field(..., ge=MIN_RATING, le=MAX_RATING)
    review: Optional[str] = None
    updated_at: Optional[datetime] = None

class RatingSubmission(BaseModel):
    # 0 is accepted here so the service can answer with its own message
    rating: int = Field(UNSET_RATING, ge=UNSET_RATING, le=MAX_RATING)
    review: Optional[str] = None

class SavedRating(BaseModel):
    rating: Rating
    created: bool

class UserRatings(BaseModel):
    user_id: str
    ratings: List[Rating]

def ratings_by_media(ratings: List[Rating]) -> Dict[str, Rating]:
    """Index a user's ratings by media id; later records win on duplicates."""
    return {rating.media_id: rating for rating in ratings}

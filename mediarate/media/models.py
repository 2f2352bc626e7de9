from enum import Enum
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

class MediaType(str, Enum):
    MOVIE = "movie"
    TV = "tv"
    BOOK = "book"

MEDIA_TYPE_LABELS = {
    MediaType.MOVIE: "Movie",
    MediaType.TV: "TV Series/Drama",
    MediaType.BOOK: "Book",
}

_SCREEN_GENRES = [
    'Action', 'Adventure', 'Animation', 'Comedy', 'Crime', 'Documentary',
    'Drama', 'Family', 'Fantasy', 'History', 'Horror', 'Music', 'Mystery',
    'Romance', 'Science Fiction', 'Thriller', 'War', 'Western'
]

GENRES: Dict[MediaType, List[str]] = {
    MediaType.MOVIE: list(_SCREEN_GENRES),
    MediaType.TV: _SCREEN_GENRES + [
        'K-Drama', 'C-Drama', 'J-Drama', 'Thai Drama', 'Historical Drama',
        'Medical Drama', 'Legal Drama', 'School Drama', 'Romantic Comedy',
        'Slice of Life', 'Melodrama', 'Makjang'
    ],
    MediaType.BOOK: [
        'Fiction', 'Non-Fiction', 'Mystery', 'Romance', 'Science Fiction',
        'Fantasy', 'Biography', 'History', 'Self-Help', 'Business',
        'Philosophy', 'Poetry', 'Young Adult', 'Children', 'Thriller',
        'Horror', 'Adventure', 'Classic Literature', 'Contemporary Fiction'
    ],
}

COUNTRIES = [
    'United States', 'United Kingdom', 'Canada', 'Australia', 'France', 'Germany',
    'Italy', 'Spain', 'Japan', 'South Korea', 'China', 'Hong Kong', 'Taiwan',
    'Thailand', 'India', 'Brazil', 'Mexico', 'Russia', 'Netherlands', 'Sweden',
    'Norway', 'Denmark', 'Other'
]

MIN_RELEASE_YEAR = 1900
ADD_DESCRIPTION_MAX = 500
EDIT_DESCRIPTION_MAX = 1000

def genre_options(media_type: Optional[MediaType]) -> List[str]:
    if media_type is None:
        return []
    return GENRES[media_type]

class Media(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    # older records can lack these; the edit form fills in defaults
    type: Optional[MediaType] = None
    genre: str = ""
    release_year: Optional[int] = None
    description: Optional[str] = None
    cover_image: Optional[str] = None
    country: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class MediaDraft(BaseModel):
    """Unsaved form state for the add and edit dialogs.

    Free-text fields stay as typed (untrimmed, possibly empty) until submit.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str = ""
    type: Optional[MediaType] = None
    genre: str = ""
    release_year: Optional[int] = None
    description: str = ""
    cover_image: str = ""
    country: str = ""

    @classmethod
    def from_media(cls, media: Media, current_year: int) -> "MediaDraft":
        return cls(
            title=media.title or "",
            type=media.type or MediaType.MOVIE,
            genre=media.genre or "",
            release_year=media.release_year or current_year,
            description=media.description or "",
            cover_image=media.cover_image or "",
            country=media.country or "",
        )

class DeleteMediaResult(BaseModel):
    media_id: str
    deleted: bool
    ratings_deleted: int = 0
    ratings_to_delete: int = 0

class Vocabulary(BaseModel):
    types: Dict[str, str] = Field(default_factory=lambda: {t.value: label for t, label in MEDIA_TYPE_LABELS.items()})
    genres: Dict[str, List[str]] = Field(default_factory=lambda: {t.value: g for t, g in GENRES.items()})
    countries: List[str] = Field(default_factory=lambda: list(COUNTRIES))
    placeholder_cover_image: str

from typing import Optional

class MediaRateError(Exception):
    """Base class for every error the application raises on purpose."""

class ValidationError(MediaRateError):
    """Input rejected locally, before any store call.

    ``title`` is the short headline shown to the user, the message is the
    longer description.
    """

    def __init__(self, title: str, message: str):
        super().__init__(message)
        self.title = title
        self.message = message

class StoreError(MediaRateError):
    """A read or write against the record store failed."""

class NotFoundError(StoreError):
    def __init__(self, collection: str, record_id: str):
        super().__init__(f"{collection}/{record_id} not found")
        self.collection = collection
        self.record_id = record_id

class CascadeDeleteError(StoreError):
    """Deleting a media record failed part way through its ratings.

    Ratings already deleted stay deleted.
    """

    def __init__(self, media_id: str, deleted: int, remaining: int, cause: Optional[Exception] = None):
        super().__init__(
            f"Deleting media {media_id} stopped after {deleted} rating(s); "
            f"{remaining} rating(s) and the media record remain"
        )
        self.media_id = media_id
        self.deleted = deleted
        self.remaining = remaining
        self.cause = cause

class AuthError(MediaRateError):
    """The ID token could not be verified or the session was revoked."""

import logging
from typing import Any, Awaitable, Callable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from ..core.exceptions import CascadeDeleteError, MediaRateError, ValidationError
from ..core.notifications import Notifier
from ..core.utils import utcnow
from .models import Media, MediaDraft, genre_options
from .service import MediaService

logger = logging.getLogger(__name__)

RefreshCallback = Callable[[], Awaitable[None]]

DRAFT_FIELDS = set(MediaDraft.model_fields)

def _apply_field(draft: MediaDraft, field: str, value: Any) -> MediaDraft:
    if field not in DRAFT_FIELDS:
        # also accept the camelCase names the client sends
        field = next((name for name, info in MediaDraft.model_fields.items() if info.alias == field), field)
    if field not in DRAFT_FIELDS:
        raise ValidationError("Unknown Field", f"'{field}' is not a media field.")
    if value == "" and field in ("type", "release_year"):
        value = None
    data = draft.model_dump()
    data[field] = value
    try:
        return MediaDraft.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError("Invalid Value", f"'{field}' cannot be set to {value!r}.") from e

class AddMediaDialog:
    def __init__(self, service: MediaService, notifier: Notifier, on_media_added: RefreshCallback):
        self.service = service
        self.notifier = notifier
        self.on_media_added = on_media_added
        self.is_open = False
        self.loading = False
        self.draft = MediaDraft()

    @property
    def genre_options(self) -> List[str]:
        return genre_options(self.draft.type)

    def open(self):
        self.is_open = True

    def close(self):
        self.is_open = False

    def set_field(self, field: str, value: Any):
        draft = _apply_field(self.draft, field, value)
        # genres depend on the type
        if draft.type != self.draft.type:
            draft.genre = ""
        self.draft = draft

    async def submit(self) -> Optional[Media]:
        try:
            self.loading = True
            media = await self.service.create_media(self.draft)
        except ValidationError as e:
            self.notifier.error(e.title, e.message)
            return None
        except MediaRateError as e:
            logger.error(f"Error adding media: {str(e)}")
            self.notifier.error("Error", "Failed to add media. Please try again.")
            return None
        finally:
            self.loading = False

        self.notifier.notify(
            "Media Added Successfully!",
            f'"{media.title}" has been added to the database.'
        )
        self.draft = MediaDraft()
        self.is_open = False
        await self.on_media_added()
        return media

class EditMediaDialog:
    def __init__(self, media: Media, service: MediaService, notifier: Notifier, on_media_updated: RefreshCallback):
        self.media = media
        self.service = service
        self.notifier = notifier
        self.on_media_updated = on_media_updated
        self.is_open = False
        self.loading = False
        self.show_delete_confirm = False
        self.draft = MediaDraft.from_media(media, utcnow().year)

    @property
    def genre_options(self) -> List[str]:
        return genre_options(self.draft.type)

    def reset(self):
        self.draft = MediaDraft.from_media(self.media, utcnow().year)
        self.show_delete_confirm = False

    def open(self):
        self.reset()
        self.is_open = True

    def close(self):
        self.is_open = False
        self.show_delete_confirm = False

    def set_field(self, field: str, value: Any):
        # unlike the add dialog, genre survives a type change
        self.draft = _apply_field(self.draft, field, value)

    async def submit(self) -> Optional[Media]:
        try:
            self.loading = True
            media = await self.service.update_media(self.media, self.draft)
        except ValidationError as e:
            self.notifier.error(e.title, e.message)
            return None
        except MediaRateError as e:
            logger.error(f"Error updating media {self.media.id}: {str(e)}")
            self.notifier.error("Error", "Failed to update media. Please try again.")
            return None
        finally:
            self.loading = False

        self.media = media
        self.notifier.notify("Media Updated", f'"{media.title}" has been updated successfully.')
        self.is_open = False
        await self.on_media_updated()
        return media

    def request_delete(self):
        self.show_delete_confirm = True

    def cancel_delete(self):
        self.show_delete_confirm = False

    async def confirm_delete(self) -> bool:
        if not self.show_delete_confirm:
            logger.warning(f"Delete of media {self.media.id} attempted without confirmation")
            return False

        try:
            self.loading = True
            await self.service.delete_media(self.media.id)
        except CascadeDeleteError as e:
            logger.error(str(e))
            self.notifier.error(
                "Error",
                f"Failed to delete media. {e.deleted} rating(s) were removed and {e.remaining} remain. Please try again."
            )
            return False
        except MediaRateError as e:
            logger.error(f"Error deleting media {self.media.id}: {str(e)}")
            self.notifier.error("Error", "Failed to delete media. Please try again.")
            return False
        finally:
            self.loading = False

        self.notifier.notify("Media Deleted", f'"{self.media.title}" has been deleted successfully.')
        self.is_open = False
        self.show_delete_confirm = False
        await self.on_media_updated()
        return True

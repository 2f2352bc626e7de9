import logging
from typing import Any, Dict, Optional

from ..catalog.browser import CatalogBrowser
from ..core.auth import AuthSession
from ..core.exceptions import AuthError, ValidationError
from ..core.notifications import Notifier
from ..media.dialogs import AddMediaDialog, EditMediaDialog
from ..media.service import MediaService
from ..ratings.service import RatingService

logger = logging.getLogger(__name__)

class UnknownAction(Exception):
    pass

class Session:
    """Everything one connected client sees: catalog, rating dialog and the two media forms."""

    def __init__(self, auth: AuthSession, media_service: MediaService, rating_service: RatingService):
        self.auth = auth
        self.media_service = media_service
        self.notifier = Notifier()
        self.browser = CatalogBrowser(media_service, rating_service, self.notifier)
        self.browser.attach(auth)
        self.add_dialog = AddMediaDialog(media_service, self.notifier, self.browser.refresh)
        self.edit_dialog: Optional[EditMediaDialog] = None

    def close(self):
        self.browser.detach()

    def _require_user(self):
        if self.auth.user is None:
            raise AuthError("Sign in first")

    async def handle(self, action: str, data: Dict[str, Any]):
        if action == "sign_in":
            await self.auth.sign_in(data.get("token", ""))
            return
        if action == "logout":
            await self.auth.logout()
            self.edit_dialog = None
            self.add_dialog.close()
            return

        self._require_user()
        try:
            await self._dispatch(action, data)
        except ValidationError as e:
            self.notifier.error(e.title, e.message)

    async def _dispatch(self, action: str, data: Dict[str, Any]):
        if action == "refresh":
            await self.browser.load()

        elif action == "search":
            self.browser.set_query(data.get("query", ""))

        elif action == "open_rating":
            self.browser.open_rating(data["media_id"])

        elif action == "set_rating":
            self.browser.rating_dialog.set_rating(int(data.get("rating", 0)))

        elif action == "set_review":
            self.browser.rating_dialog.set_review(data.get("review", ""))

        elif action == "submit_rating":
            await self.browser.submit_rating()

        elif action == "close_rating":
            self.browser.rating_dialog.close()

        elif action == "open_add":
            self.add_dialog.open()

        elif action == "set_add_field":
            self.add_dialog.set_field(data["field"], data.get("value"))

        elif action == "submit_add":
            await self.add_dialog.submit()

        elif action == "close_add":
            self.add_dialog.close()

        elif action == "open_edit":
            media = self.browser.find_media(data["media_id"])
            self.edit_dialog = EditMediaDialog(media, self.media_service, self.notifier, self.browser.refresh)
            self.edit_dialog.open()

        elif action in ("set_edit_field", "submit_edit", "request_delete", "cancel_delete", "confirm_delete", "close_edit"):
            await self._dispatch_edit(action, data)

        else:
            raise UnknownAction(action)

    async def _dispatch_edit(self, action: str, data: Dict[str, Any]):
        dialog = self.edit_dialog
        if dialog is None or not dialog.is_open:
            raise ValidationError("No Media Selected", "Open a media item for editing first.")

        if action == "set_edit_field":
            dialog.set_field(data["field"], data.get("value"))
        elif action == "submit_edit":
            await dialog.submit()
        elif action == "request_delete":
            dialog.request_delete()
        elif action == "cancel_delete":
            dialog.cancel_delete()
        elif action == "confirm_delete":
            await dialog.confirm_delete()
        elif action == "close_edit":
            dialog.close()

        if not dialog.is_open:
            self.edit_dialog = None

    def snapshot(self) -> dict:
        state = self.browser.snapshot()
        state["add_dialog"] = {
            "open": self.add_dialog.is_open,
            "draft": self.add_dialog.draft.model_dump(mode="json", by_alias=True),
            "genre_options": self.add_dialog.genre_options,
        }
        edit = self.edit_dialog
        state["edit_dialog"] = {
            "open": edit.is_open,
            "media_id": edit.media.id,
            "draft": edit.draft.model_dump(mode="json", by_alias=True),
            "genre_options": edit.genre_options,
            "show_delete_confirm": edit.show_delete_confirm,
        } if edit else {"open": False}
        return state

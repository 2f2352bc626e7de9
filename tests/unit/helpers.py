from datetime import datetime, timezone
from typing import List, Optional, Tuple

from mediarate.core.auth import UserInfo
from mediarate.core.exceptions import AuthError, StoreError
from mediarate.core.store import MemoryRecordStore
from mediarate.media.service import MediaService
from mediarate.ratings.service import RatingService

USER = UserInfo(id="user_ada", email="ada@example.com", display_name="Ada")
OTHER_USER = UserInfo(id="user_bob", email="bob@example.com")

class RecordingStore(MemoryRecordStore):
    """Memory store that logs every call and can be told to fail the nth one."""

    def __init__(self):
        super().__init__()
        self.calls: List[Tuple[str, str, Optional[str]]] = []
        self.failures = set()

    def fail(self, op: str, collection: str, nth: int = 1):
        self.failures.add((op, collection, nth))

    def count(self, op: str, collection: Optional[str] = None) -> int:
        return sum(1 for c in self.calls if c[0] == op and (collection is None or c[1] == collection))

    def _record(self, op, collection, record_id=None):
        self.calls.append((op, collection, record_id))
        if (op, collection, self.count(op, collection)) in self.failures:
            raise StoreError(f"injected {op} failure on {collection}")

    async def list(self, collection, where=None, order_by=None, limit=None):
        self._record("list", collection)
        return await super().list(collection, where, order_by, limit)

    async def create(self, collection, record):
        self._record("create", collection, record.get("id"))
        await super().create(collection, record)

    async def update(self, collection, record_id, fields):
        self._record("update", collection, record_id)
        await super().update(collection, record_id, fields)

    async def delete(self, collection, record_id):
        self._record("delete", collection, record_id)
        await super().delete(collection, record_id)

def make_services(store):
    ratings = RatingService(store, collection="ratings")
    return MediaService(store, ratings, collection="media"), ratings

def media_record(media_id, title, created_day=1, **fields):
    record = {
        "id": media_id,
        "title": title,
        "type": "movie",
        "genre": "Drama",
        "releaseYear": 2001,
        "description": None,
        "coverImage": None,
        "country": None,
        "createdAt": datetime(2024, 1, created_day, tzinfo=timezone.utc),
    }
    record.update(fields)
    return record

def rating_record(rating_id, media_id, rating, user_id=USER.id, review=None):
    return {"id": rating_id, "userId": user_id, "mediaId": media_id, "rating": rating, "review": review}

def seed(store, collection, *records):
    for record in records:
        store.collections.setdefault(collection, {})[record["id"]] = dict(record)

def fake_verifier(token):
    if token == "good-token":
        return USER
    raise AuthError("Invalid or expired ID token")

import copy
import logging
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple

from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from google.api_core.exceptions import NotFound

from .config import settings
from .exceptions import NotFoundError, StoreError

logger = logging.getLogger(__name__)

Record = Dict[str, Any]
OrderBy = Tuple[str, str]  # (field, "asc" | "desc")

class RecordStore(ABC):
    """Generic create/list/update/delete over named collections.

    Records are flat dicts keyed by their persisted (camelCase) field names
    and always carry their own ``id``.
    """

    @abstractmethod
    async def list(
        self,
        collection: str,
        where: Optional[Dict[str, Any]] = None,
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None
    ) -> List[Record]:
        ...

    @abstractmethod
    async def create(self, collection: str, record: Record) -> None:
        ...

    @abstractmethod
    async def update(self, collection: str, record_id: str, fields: Record) -> None:
        ...

    @abstractmethod
    async def delete(self, collection: str, record_id: str) -> None:
        ...

class FirestoreRecordStore(RecordStore):
    def __init__(self, db):
        self.db = db

    async def list(self, collection, where=None, order_by=None, limit=None):
        try:
            query = self.db.collection(collection)
            for field, value in (where or {}).items():
                query = query.where(filter=FieldFilter(field, "==", value))
            if order_by:
                field, direction = order_by
                query = query.order_by(
                    field,
                    direction=firestore.Query.DESCENDING if direction == "desc" else firestore.Query.ASCENDING
                )
            if limit is not None:
                query = query.limit(limit)
            return [doc.to_dict() for doc in query.stream()]
        except Exception as e:
            logger.error(f"Failed to list {collection} (where={where}): {str(e)}")
            raise StoreError(f"Failed to list {collection}: {str(e)}") from e

    async def create(self, collection, record):
        if not record.get('id'):
            raise StoreError(f"Refusing to create a {collection} record without an id")
        try:
            self.db.collection(collection).document(record['id']).set(record)
        except Exception as e:
            logger.error(f"Failed to create {collection}/{record['id']}: {str(e)}")
            raise StoreError(f"Failed to create {collection} record: {str(e)}") from e

    async def update(self, collection, record_id, fields):
        try:
            self.db.collection(collection).document(record_id).update(fields)
        except NotFound as e:
            raise NotFoundError(collection, record_id) from e
        except Exception as e:
            logger.error(f"Failed to update {collection}/{record_id}: {str(e)}")
            raise StoreError(f"Failed to update {collection} record: {str(e)}") from e

    async def delete(self, collection, record_id):
        try:
            self.db.collection(collection).document(record_id).delete()
        except Exception as e:
            logger.error(f"Failed to delete {collection}/{record_id}: {str(e)}")
            raise StoreError(f"Failed to delete {collection} record: {str(e)}") from e

class MemoryRecordStore(RecordStore):
    """In-process store for local runs and tests. Not shared between workers."""

    def __init__(self):
        self.collections: Dict[str, Dict[str, Record]] = {}

    def _collection(self, name: str) -> Dict[str, Record]:
        return self.collections.setdefault(name, {})

    async def list(self, collection, where=None, order_by=None, limit=None):
        records = [
            copy.deepcopy(record)
            for record in self._collection(collection).values()
            if all(record.get(field) == value for field, value in (where or {}).items())
        ]
        if order_by:
            field, direction = order_by
            # records missing the field sort last either way
            present = [r for r in records if r.get(field) is not None]
            missing = [r for r in records if r.get(field) is None]
            present.sort(key=lambda r: r[field], reverse=(direction == "desc"))
            records = present + missing
        if limit is not None:
            records = records[:limit]
        return records

    async def create(self, collection, record):
        if not record.get('id'):
            raise StoreError(f"Refusing to create a {collection} record without an id")
        self._collection(collection)[record['id']] = copy.deepcopy(record)

    async def update(self, collection, record_id, fields):
        records = self._collection(collection)
        if record_id not in records:
            raise NotFoundError(collection, record_id)
        records[record_id].update(copy.deepcopy(fields))

    async def delete(self, collection, record_id):
        self._collection(collection).pop(record_id, None)

@lru_cache
def get_store() -> RecordStore:
    if settings.STORE_BACKEND == "memory":
        logger.info("Using in-memory record store")
        return MemoryRecordStore()

    from .firebase import get_db
    return FirestoreRecordStore(get_db())

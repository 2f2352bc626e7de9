import random
import string
import time
from datetime import datetime, timezone
from typing import Optional

ID_ALPHABET = string.ascii_lowercase + string.digits

def generate_id(prefix: str) -> str:
    """Client-side record id: ``<prefix>_<epoch ms>_<9 random base36 chars>``"""
    suffix = ''.join(random.choices(ID_ALPHABET, k=9))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def normalize_optional(value: Optional[str]) -> Optional[str]:
    """Trim a free-text value; blank becomes None."""
    if value is None:
        return None
    value = value.strip()
    return value or None

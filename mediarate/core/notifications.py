from enum import Enum
from typing import List

from pydantic import BaseModel

class Variant(str, Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"

class Notification(BaseModel):
    title: str
    description: str
    variant: Variant = Variant.DEFAULT

class Notifier:
    """Collects notifications emitted by components until the client drains them."""

    def __init__(self):
        self.pending: List[Notification] = []

    def notify(self, title: str, description: str, variant: Variant = Variant.DEFAULT) -> Notification:
        notification = Notification(title=title, description=description, variant=variant)
        self.pending.append(notification)
        return notification

    def error(self, title: str, description: str) -> Notification:
        return self.notify(title, description, Variant.DESTRUCTIVE)

    def drain(self) -> List[Notification]:
        drained, self.pending = self.pending, []
        return drained

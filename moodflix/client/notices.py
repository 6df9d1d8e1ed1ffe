"""
User-facing notices (the toasts of the web client).
"""
from typing import Callable, List, Literal, Optional
import logging

from pydantic import BaseModel

logger = logging.getLogger(__name__)

Variant = Literal["success", "info", "error"]


class Notice(BaseModel):
    title: str
    description: Optional[str] = None
    variant: Variant = "info"


class Notifier:
    """Collects notices and forwards them to subscribed listeners"""

    def __init__(self):
        self.notices: List[Notice] = []
        self._listeners: List[Callable[[Notice], None]] = []

    def subscribe(self, listener: Callable[[Notice], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self, title: str, description: Optional[str] = None, variant: Variant = "info") -> Notice:
        notice = Notice(title=title, description=description, variant=variant)
        self.notices.append(notice)
        if variant == "error":
            logger.warning(f"{title}: {description}" if description else title)
        else:
            logger.info(f"{title}: {description}" if description else title)
        for listener in list(self._listeners):
            listener(notice)
        return notice

    def success(self, title: str, description: Optional[str] = None) -> Notice:
        return self.notify(title, description, "success")

    def info(self, title: str, description: Optional[str] = None) -> Notice:
        return self.notify(title, description, "info")

    def error(self, title: str, description: Optional[str] = None) -> Notice:
        return self.notify(title, description, "error")

    @property
    def last(self) -> Optional[Notice]:
        return self.notices[-1] if self.notices else None

    def clear(self):
        self.notices = []

import asyncio
import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Dict, Optional

from jntuh_bot.dialogs import Dialog

logger = logging.getLogger(__name__)


class SessionStore(ABC):
    """Holds at most one open dialog per chat."""

    @abstractmethod
    def get(self, chat_id: int) -> Optional[Dialog]:
        ...

    @abstractmethod
    def put(self, chat_id: int, dialog: Dialog) -> None:
        """Store ``dialog``, discarding any dialog already open for the chat."""

    @abstractmethod
    def remove(self, chat_id: int) -> Optional[Dialog]:
        ...

    @abstractmethod
    def lock(self, chat_id: int) -> asyncio.Lock:
        """Lock that serializes event handling for one chat."""


class InMemorySessionStore(SessionStore):
    """Process-local store. Dialogs are lost on restart."""

    def __init__(self):
        self._dialogs: Dict[int, Dialog] = {}
        self._locks: Dict[int, asyncio.Lock] = defaultdict(asyncio.Lock)

    def get(self, chat_id: int) -> Optional[Dialog]:
        return self._dialogs.get(chat_id)

    def put(self, chat_id: int, dialog: Dialog) -> None:
        previous = self._dialogs.get(chat_id)
        if previous is not None and previous.kind is not dialog.kind:
            logger.debug(f"Chat {chat_id}: {previous.kind.value} dialog replaced by {dialog.kind.value}")
        self._dialogs[chat_id] = dialog

    def remove(self, chat_id: int) -> Optional[Dialog]:
        return self._dialogs.pop(chat_id, None)

    def lock(self, chat_id: int) -> asyncio.Lock:
        return self._locks[chat_id]

    def __len__(self) -> int:
        return len(self._dialogs)

    def __contains__(self, chat_id: int) -> bool:
        return chat_id in self._dialogs

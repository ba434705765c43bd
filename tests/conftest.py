"""
Shared fixtures for the bot test suite.

Provides: a sqlite catalog in a temp dir, settings with two admins, an
AsyncMock standing in for telegram.Bot, and the conversation engine.
"""

from itertools import count
from unittest.mock import AsyncMock, MagicMock

import pytest
from telegram import User

from jntuh_bot.catalog import Catalog
from jntuh_bot.config import Settings
from jntuh_bot.conversation import ConversationEngine
from jntuh_bot.sessions import InMemorySessionStore

from helpers import ADMIN_ID, OTHER_ADMIN_ID, STUDENT_ID


@pytest.fixture
def catalog(tmp_path) -> Catalog:
    cat = Catalog(str(tmp_path / "catalog.db"))
    cat.init_db()
    return cat


@pytest.fixture
def settings() -> Settings:
    return Settings(
        token="test-token",
        admin_ids=frozenset({ADMIN_ID, OTHER_ADMIN_ID}),
        must_join_channel="@testchannel",
    )


@pytest.fixture
def bot() -> AsyncMock:
    mock = AsyncMock()
    mock.get_chat_member.return_value = MagicMock(status="member")
    message_ids = count(500)
    mock.send_message.side_effect = lambda **kwargs: MagicMock(message_id=next(message_ids))
    return mock


@pytest.fixture
def sessions() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def engine(bot, catalog, settings, sessions) -> ConversationEngine:
    return ConversationEngine(bot, catalog, settings, sessions=sessions)


@pytest.fixture
def admin() -> User:
    return User(id=ADMIN_ID, first_name="Asha", is_bot=False, username="asha_admin")


@pytest.fixture
def student() -> User:
    return User(id=STUDENT_ID, first_name="Ravi", is_bot=False, username="ravi")


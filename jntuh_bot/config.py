import logging
import os
from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_DB_NAME = "jntuh_helper.db"
DEFAULT_CHANNEL = "@jntuhupdates26"
DEFAULT_PORT = 10000


class ConfigError(Exception):
    """Raised when a required setting is missing."""


@dataclass(frozen=True)
class Settings:
    token: str
    db_name: str = DEFAULT_DB_NAME
    admin_ids: FrozenSet[int] = field(default_factory=frozenset)
    must_join_channel: str = DEFAULT_CHANNEL
    port: int = DEFAULT_PORT
    log_level: str = "INFO"

    def is_admin(self, user_id: int) -> bool:
        return user_id in self.admin_ids

    @property
    def channel_url(self) -> str:
        return f"https://t.me/{self.must_join_channel.lstrip('@')}"


def parse_admin_ids(raw: Optional[str]) -> FrozenSet[int]:
    ids = set()
    for item in (raw or "").split(","):
        item = item.strip()
        if not item:
            continue
        try:
            ids.add(int(item))
        except ValueError:
            logger.warning(f"Ignoring invalid admin id: {item!r}")
    return frozenset(ids)


def load_settings(env=None) -> Settings:
    """Read settings from the environment (and a local .env file)."""
    if env is None:
        load_dotenv()
        env = os.environ

    token = env.get("BOT_TOKEN")
    if not token:
        raise ConfigError("BOT_TOKEN is required. Set it in the environment or a .env file.")

    admin_ids = parse_admin_ids(env.get("ADMIN_IDS"))
    if not admin_ids:
        logger.warning("No admin IDs configured. Add ADMIN_IDS to your environment.")

    return Settings(
        token=token,
        db_name=env.get("DB_NAME") or DEFAULT_DB_NAME,
        admin_ids=admin_ids,
        must_join_channel=env.get("MUST_JOIN_CHANNEL") or DEFAULT_CHANNEL,
        port=int(env.get("PORT") or DEFAULT_PORT),
        log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
    )

"""JNTUH Student Helper Bot: notes and previous papers over Telegram."""

__version__ = "0.2.0"

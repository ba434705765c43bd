"""Assertion helpers shared by the test modules."""

import json
import sqlite3

from jntuh_bot.catalog import Catalog

ADMIN_ID = 1
OTHER_ADMIN_ID = 2
STUDENT_ID = 100


def sent_texts(bot) -> list:
    return [c.kwargs["text"] for c in bot.send_message.await_args_list]


def sent_to(bot, chat_id) -> list:
    return [c.kwargs["text"] for c in bot.send_message.await_args_list if c.kwargs["chat_id"] == chat_id]


def answers(bot) -> list:
    return [c.kwargs.get("text") for c in bot.answer_callback_query.await_args_list]


def insert_legacy_file(catalog: Catalog, subject: str, branch, branches=None, file_type="notes"):
    """Write a row the way older deployments stored it (single branch column)."""
    conn = sqlite3.connect(catalog.db_name)
    try:
        cur = conn.execute(
            """INSERT INTO files (file_name, file_id, subject_name, branch, branches, regulation,
                                  type, upload_date, uploaded_by, downloads)
               VALUES (?, ?, ?, ?, ?, 'R16', ?, '2023-01-01 10:00:00', 1, 0)""",
            (f"{subject}.pdf", f"tg-{subject}", subject, branch,
             json.dumps(branches) if branches is not None else None, file_type),
        )
        conn.commit()
        return cur.lastrowid
    finally:
        conn.close()

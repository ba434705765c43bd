"""Catalog of files, requests and users, stored in sqlite.

Each method opens its own connection, so the bot's event loop and the Flask
thread can share one ``Catalog``. Errors are raised as ``sqlite3.Error``; the
caller decides what the user sees.
"""

import json
import logging
import sqlite3
from collections import Counter
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from jntuh_bot.models import (
    AdminStats,
    AllUsersSummary,
    FileRecord,
    FileStatusSummary,
    FileType,
    RequestRecord,
    RequestStatus,
    UserRecord,
    UserStatusSummary,
    format_date,
    parse_date,
)

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 10
BRANCH_LIMIT = 20
ACTIVE_WINDOW = timedelta(days=7)

SCHEMA = (
    # branch is the legacy single-branch column; branches is a JSON array.
    """CREATE TABLE IF NOT EXISTS files (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        file_name TEXT,
        file_id TEXT,
        subject_name TEXT,
        branch TEXT,
        branches TEXT,
        regulation TEXT,
        type TEXT,
        upload_date TEXT,
        uploaded_by INTEGER,
        downloads INTEGER DEFAULT 0
    )""",
    """CREATE TABLE IF NOT EXISTS requests (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER,
        username TEXT,
        first_name TEXT,
        subject_name TEXT,
        branch TEXT,
        regulation TEXT,
        type TEXT,
        description TEXT,
        request_date TEXT,
        status TEXT DEFAULT 'pending'
    )""",
    """CREATE TABLE IF NOT EXISTS users (
        user_id INTEGER PRIMARY KEY,
        username TEXT,
        first_name TEXT,
        last_name TEXT,
        join_date TEXT,
        last_active TEXT,
        download_count INTEGER DEFAULT 0
    )""",
)

BRANCH_MATCH = (
    "(branch = ? OR EXISTS (SELECT 1 FROM json_each(files.branches) WHERE json_each.value = ?))"
)


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def normalize_branches(branches_json: Optional[str], legacy_branch: Optional[str]) -> List[str]:
    """Collapse the legacy column and the JSON set into one list."""
    if branches_json:
        try:
            branches = json.loads(branches_json)
        except ValueError:
            logger.warning(f"Unreadable branches value: {branches_json!r}")
            branches = []
        if branches:
            return [str(b) for b in branches]
    if legacy_branch:
        return [legacy_branch]
    return []


def _file_from_row(row: sqlite3.Row) -> FileRecord:
    return FileRecord(
        id=row["id"],
        file_name=row["file_name"],
        file_id=row["file_id"],
        subject=row["subject_name"],
        branches=normalize_branches(row["branches"], row["branch"]),
        regulation=row["regulation"] or "",
        type=row["type"],
        upload_date=parse_date(row["upload_date"]),
        uploaded_by=row["uploaded_by"],
        downloads=row["downloads"] or 0,
    )


def _request_from_row(row: sqlite3.Row) -> RequestRecord:
    return RequestRecord(
        id=row["id"],
        user_id=row["user_id"],
        username=row["username"],
        first_name=row["first_name"],
        subject=row["subject_name"],
        branch=row["branch"],
        regulation=row["regulation"],
        type=row["type"],
        description=row["description"] or "",
        status=row["status"],
        request_date=parse_date(row["request_date"]),
    )


def _user_from_row(row: sqlite3.Row) -> UserRecord:
    return UserRecord(
        user_id=row["user_id"],
        username=row["username"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        join_date=parse_date(row["join_date"]),
        last_active=parse_date(row["last_active"]),
        download_count=row["download_count"] or 0,
    )


class Catalog:
    def __init__(self, db_name: str):
        self.db_name = db_name

    @contextmanager
    def _connection(self):
        conn = sqlite3.connect(self.db_name)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def init_db(self) -> None:
        with self._connection() as conn:
            for statement in SCHEMA:
                conn.execute(statement)
        logger.info(f"Catalog ready at {self.db_name}")

    # --- Files ---

    def save_file(
        self,
        file_name: str,
        file_id: str,
        subject: str,
        branches: Iterable[str],
        regulation: str,
        file_type: str,
        uploaded_by: int,
        now: Optional[datetime] = None,
    ) -> int:
        with self._connection() as conn:
            cur = conn.execute(
                """INSERT INTO files (file_name, file_id, subject_name, branches, regulation, type,
                                      upload_date, uploaded_by, downloads)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, 0)""",
                (file_name, file_id, subject, json.dumps(list(branches)), regulation, file_type,
                 format_date(now or datetime.now()), uploaded_by),
            )
            return cur.lastrowid

    def get_file(self, file_id: int) -> Optional[FileRecord]:
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM files WHERE id = ?", (file_id,)).fetchone()
        return _file_from_row(row) if row else None

    def delete_file(self, file_id: int) -> bool:
        with self._connection() as conn:
            cur = conn.execute("DELETE FROM files WHERE id = ?", (file_id,))
            return cur.rowcount > 0

    def search_by_kind_and_subject(self, kind: str, substring: str) -> List[FileRecord]:
        pattern = f"%{_escape_like(substring.strip())}%"
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT * FROM files WHERE type = ? AND subject_name LIKE ? ESCAPE '\\' LIMIT ?",
                (FileType(kind).value, pattern, SEARCH_LIMIT),
            ).fetchall()
        return [_file_from_row(r) for r in rows]

    def list_by_branch(self, branch_code: str) -> List[FileRecord]:
        with self._connection() as conn:
            rows = conn.execute(
                f"SELECT * FROM files WHERE {BRANCH_MATCH} LIMIT ?",
                (branch_code, branch_code, BRANCH_LIMIT),
            ).fetchall()
        return [_file_from_row(r) for r in rows]

    def list_files(
        self,
        branch: Optional[str] = None,
        regulation: Optional[str] = None,
        file_type: Optional[str] = None,
        subject: Optional[str] = None,
    ) -> List[FileRecord]:
        clauses, params = [], []
        if branch:
            clauses.append(BRANCH_MATCH)
            params += [branch, branch]
        if regulation:
            clauses.append("regulation = ?")
            params.append(regulation)
        if file_type:
            clauses.append("type = ?")
            params.append(file_type)
        if subject:
            clauses.append("subject_name LIKE ? ESCAPE '\\'")
            params.append(f"%{_escape_like(subject)}%")
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with self._connection() as conn:
            rows = conn.execute(
                f"SELECT * FROM files {where} ORDER BY upload_date DESC, id DESC", params
            ).fetchall()
        return [_file_from_row(r) for r in rows]

    def record_download(self, file_id: int, user_id: int) -> None:
        # Two independent increments; no transaction spans both records.
        with self._connection() as conn:
            conn.execute("UPDATE files SET downloads = downloads + 1 WHERE id = ?", (file_id,))
        with self._connection() as conn:
            conn.execute(
                "UPDATE users SET download_count = download_count + 1 WHERE user_id = ?",
                (user_id,),
            )

    def file_status_summary(self) -> FileStatusSummary:
        with self._connection() as conn:
            total = conn.execute("SELECT COUNT(*) FROM files").fetchone()[0]
            notes = conn.execute(
                "SELECT COUNT(*) FROM files WHERE type = ?", (FileType.NOTES.value,)
            ).fetchone()[0]
            papers = conn.execute(
                "SELECT COUNT(*) FROM files WHERE type = ?", (FileType.PAPER.value,)
            ).fetchone()[0]
            recent = conn.execute(
                "SELECT * FROM files ORDER BY upload_date DESC, id DESC LIMIT 5"
            ).fetchall()
            top = conn.execute(
                "SELECT * FROM files ORDER BY downloads DESC, id ASC LIMIT 5"
            ).fetchall()
        return FileStatusSummary(
            total=total,
            notes=notes,
            papers=papers,
            recent=[_file_from_row(r) for r in recent],
            top_downloaded=[_file_from_row(r) for r in top],
        )

    def branch_counts(self) -> List[tuple]:
        with self._connection() as conn:
            rows = conn.execute("SELECT branch, branches FROM files").fetchall()
        counts = Counter()
        for row in rows:
            counts.update(normalize_branches(row["branches"], row["branch"]))
        return counts.most_common()

    def migrate_branches(self) -> int:
        """Copy the legacy branch column into the branch set. Safe to re-run."""
        with self._connection() as conn:
            cur = conn.execute(
                """UPDATE files
                   SET branches = CASE WHEN branch != '' THEN json_array(branch) ELSE '[]' END
                   WHERE branch IS NOT NULL AND branches IS NULL"""
            )
            modified = cur.rowcount
        logger.info(f"Branch migration modified {modified} file(s)")
        return modified

    # --- Requests ---

    def save_request(
        self,
        user_id: int,
        username: Optional[str],
        first_name: Optional[str],
        subject: str,
        branch: str,
        regulation: str,
        file_type: str,
        description: str = "",
        now: Optional[datetime] = None,
    ) -> int:
        with self._connection() as conn:
            cur = conn.execute(
                """INSERT INTO requests (user_id, username, first_name, subject_name, branch,
                                         regulation, type, description, request_date, status)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (user_id, username, first_name, subject, branch, regulation, file_type,
                 description, format_date(now or datetime.now()), RequestStatus.PENDING.value),
            )
            return cur.lastrowid

    def pending_requests(self, limit: int = 10) -> List[RequestRecord]:
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT * FROM requests WHERE status = ? ORDER BY id LIMIT ?",
                (RequestStatus.PENDING.value, limit),
            ).fetchall()
        return [_request_from_row(r) for r in rows]

    # --- Users ---

    def upsert_user(
        self,
        user_id: int,
        username: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> None:
        stamp = format_date(now or datetime.now())
        with self._connection() as conn:
            conn.execute(
                """INSERT INTO users (user_id, username, first_name, last_name, join_date,
                                      last_active, download_count)
                   VALUES (?, ?, ?, ?, ?, ?, 0)
                   ON CONFLICT(user_id) DO UPDATE SET
                       last_active = excluded.last_active,
                       username = excluded.username,
                       first_name = excluded.first_name,
                       last_name = excluded.last_name""",
                (user_id, username, first_name, last_name, stamp, stamp),
            )

    def get_user(self, user_id: int) -> Optional[UserRecord]:
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM users WHERE user_id = ?", (user_id,)).fetchone()
        return _user_from_row(row) if row else None

    def _user_counts(self, conn, now: Optional[datetime]) -> tuple:
        cutoff = format_date((now or datetime.now()) - ACTIVE_WINDOW)
        total = conn.execute("SELECT COUNT(*) FROM users").fetchone()[0]
        active = conn.execute(
            "SELECT COUNT(*) FROM users WHERE last_active >= ?", (cutoff,)
        ).fetchone()[0]
        return total, active

    def user_status_summary(self, user_id: int, now: Optional[datetime] = None) -> UserStatusSummary:
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM users WHERE user_id = ?", (user_id,)).fetchone()
            total, active = self._user_counts(conn, now)
        return UserStatusSummary(
            user=_user_from_row(row) if row else None,
            total_users=total,
            active_users=active,
        )

    def all_users_summary(self, now: Optional[datetime] = None) -> AllUsersSummary:
        with self._connection() as conn:
            total, active = self._user_counts(conn, now)
            recent = conn.execute(
                "SELECT * FROM users ORDER BY join_date DESC, user_id DESC LIMIT 10"
            ).fetchall()
            top = conn.execute(
                "SELECT * FROM users ORDER BY download_count DESC, user_id ASC LIMIT 10"
            ).fetchall()
        return AllUsersSummary(
            total_users=total,
            active_users=active,
            recent=[_user_from_row(r) for r in recent],
            top_downloaders=[_user_from_row(r) for r in top],
        )

    def count_files(self) -> int:
        with self._connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM files").fetchone()[0]

    def count_users(self) -> int:
        with self._connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM users").fetchone()[0]

    def admin_stats(self) -> AdminStats:
        with self._connection() as conn:
            total_users = conn.execute("SELECT COUNT(*) FROM users").fetchone()[0]
            total_files = conn.execute("SELECT COUNT(*) FROM files").fetchone()[0]
            pending = conn.execute(
                "SELECT COUNT(*) FROM requests WHERE status = ?", (RequestStatus.PENDING.value,)
            ).fetchone()[0]
            downloads = conn.execute("SELECT COALESCE(SUM(downloads), 0) FROM files").fetchone()[0]
        return AdminStats(
            total_users=total_users,
            total_files=total_files,
            pending_requests=pending,
            total_downloads=downloads,
            branch_counts=self.branch_counts(),
        )

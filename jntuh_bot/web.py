"""Read-only web API over the catalog, plus the branch migration job."""

import logging
import sqlite3
import time
from datetime import datetime, timezone
from typing import Iterable

from flask import Flask, jsonify, request

from jntuh_bot.catalog import Catalog

logger = logging.getLogger(__name__)


def create_app(catalog: Catalog, admin_ids: Iterable[int]) -> Flask:
    app = Flask(__name__)
    admins = frozenset(admin_ids)
    started = time.monotonic()

    @app.errorhandler(sqlite3.Error)
    def store_error(e):
        logger.error(f"Catalog error in {request.path}: {e}")
        return jsonify(error=str(e)), 500

    @app.route("/")
    def home():
        return "Bot is Running!"

    @app.route("/health")
    def health():
        return jsonify(
            status="healthy",
            timestamp=datetime.now(timezone.utc).isoformat(),
            uptime=round(time.monotonic() - started, 3),
        )

    @app.route("/api/files")
    def files():
        records = catalog.list_files(
            branch=request.args.get("branch"),
            regulation=request.args.get("regulation"),
            file_type=request.args.get("type"),
            subject=request.args.get("subject"),
        )
        return jsonify([r.to_dict() for r in records])

    @app.route("/api/stats")
    def stats():
        return jsonify(
            totalFiles=catalog.count_files(),
            totalUsers=catalog.count_users(),
            branches=[{"branchCode": code, "count": n} for code, n in catalog.branch_counts()],
        )

    @app.route("/api/migrate-branches", methods=["POST"])
    def migrate_branches():
        body = request.get_json(silent=True) or {}
        try:
            user_id = int(body.get("userId"))
        except (TypeError, ValueError):
            user_id = None
        if user_id not in admins:
            logger.info(f"Rejected branch migration for caller {body.get('userId')!r}")
            return jsonify(error="Unauthorized"), 403
        modified = catalog.migrate_branches()
        return jsonify(message="Migration completed", modifiedCount=modified)

    return app


def run_flask(app: Flask, port: int) -> None:
    app.run(host="0.0.0.0", port=port)

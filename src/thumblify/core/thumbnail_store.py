"""SQLite persistence for thumbnail generation records.

Each record tracks one generation request from creation to its terminal
state:

- ``generating`` - created, provider call not finished (``isGenerating`` true)
- ``completed`` - image uploaded, ``image_url`` set
- ``failed`` - provider or upload error, or abandoned past the timeout

A record leaves ``generating`` exactly once.  :meth:`ThumbnailStore.complete`
and :meth:`ThumbnailStore.fail` only touch rows that are still generating,
so the image reference is written at most once and ``isGenerating`` never
goes back to true.

Reads and deletes are always scoped by owner.  Records are returned as
plain dictionaries in the JSON shape served to clients.
"""

from __future__ import annotations

import logging
import sqlite3
import time
import uuid
from pathlib import Path

from thumblify.core.media_host import to_download_url

logger = logging.getLogger(__name__)

STATUS_GENERATING = "generating"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"

TIMED_OUT_MESSAGE = "Generation timed out"


class ThumbnailStore:
    """Manage generation records using SQLite."""

    def __init__(self, db_path: Path):
        """Initialize the record store.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialize_db()
        logger.info(f"Initialized thumbnail store at {self.db_path}")

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _initialize_db(self) -> None:
        """Create database schema if it doesn't exist."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS thumbnails (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    user_prompt TEXT,
                    prompt_used TEXT,
                    style TEXT NOT NULL,
                    aspect_ratio TEXT NOT NULL,
                    color_scheme TEXT,
                    text_overlay INTEGER NOT NULL DEFAULT 0,
                    is_generating INTEGER NOT NULL DEFAULT 1,
                    status TEXT NOT NULL,
                    image_url TEXT,
                    error TEXT,
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL
                )
                """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_thumbnails_user
                ON thumbnails(user_id)
                """)
            conn.commit()

    @staticmethod
    def _to_record(row: sqlite3.Row) -> dict:
        image_url = row["image_url"]
        return {
            "_id": row["id"],
            "userId": row["user_id"],
            "title": row["title"],
            "user_prompt": row["user_prompt"],
            "prompt_used": row["prompt_used"],
            "style": row["style"],
            "aspect_ratio": row["aspect_ratio"],
            "color_scheme": row["color_scheme"],
            "text_overlay": bool(row["text_overlay"]),
            "isGenerating": bool(row["is_generating"]),
            "status": row["status"],
            "image_url": image_url,
            "download_url": to_download_url(image_url) if image_url else None,
            "error": row["error"],
            "createdAt": row["created_at"],
            "updatedAt": row["updated_at"],
        }

    def _fetch(self, record_id: str) -> dict | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM thumbnails WHERE id = ?", (record_id,)
            ).fetchone()
        return self._to_record(row) if row else None

    def create(
        self,
        user_id: str,
        *,
        title: str,
        style: str,
        aspect_ratio: str,
        color_scheme: str | None = None,
        user_prompt: str | None = None,
        prompt_used: str | None = None,
        text_overlay: bool = False,
    ) -> dict:
        """Insert a new record in the generating state.

        Returns:
            The created record.
        """
        record_id = uuid.uuid4().hex
        now = time.time()
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO thumbnails (
                    id, user_id, title, user_prompt, prompt_used, style,
                    aspect_ratio, color_scheme, text_overlay, is_generating,
                    status, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, 1, ?, ?, ?)
                """,
                (
                    record_id,
                    user_id,
                    title,
                    user_prompt,
                    prompt_used,
                    style,
                    aspect_ratio,
                    color_scheme,
                    int(text_overlay),
                    STATUS_GENERATING,
                    now,
                    now,
                ),
            )
            conn.commit()

        logger.debug(f"Created thumbnail record {record_id} for user {user_id}")
        return self._fetch(record_id)

    def complete(self, record_id: str, image_url: str) -> bool:
        """Store the image URL and leave the generating state.

        Args:
            record_id: Record identifier
            image_url: Delivery URL of the uploaded image

        Returns:
            True if the record was still generating and is now completed
        """
        with self._connect() as conn:
            cursor = conn.execute(
                """
                UPDATE thumbnails
                SET image_url = ?, is_generating = 0, status = ?, updated_at = ?
                WHERE id = ? AND is_generating = 1
                """,
                (image_url, STATUS_COMPLETED, time.time(), record_id),
            )
            conn.commit()
            changed = cursor.rowcount > 0

        if not changed:
            logger.warning(f"Record {record_id} was not generating; completion ignored")
        return changed

    def fail(self, record_id: str, message: str) -> bool:
        """Mark a generating record as failed.

        Args:
            record_id: Record identifier
            message: Error message shown to the owner

        Returns:
            True if the record was still generating and is now failed
        """
        with self._connect() as conn:
            cursor = conn.execute(
                """
                UPDATE thumbnails
                SET is_generating = 0, status = ?, error = ?, updated_at = ?
                WHERE id = ? AND is_generating = 1
                """,
                (STATUS_FAILED, message, time.time(), record_id),
            )
            conn.commit()
            return cursor.rowcount > 0

    def expire_stale(
        self,
        max_age_seconds: float,
        *,
        user_id: str | None = None,
        now: float | None = None,
    ) -> int:
        """Fail records that have been generating for too long.

        A request handler that dies mid-flow never finishes its record, so
        abandoned records are swept into the failed state instead of staying
        in progress forever.

        Args:
            max_age_seconds: Maximum time a record may stay generating
            user_id: Restrict the sweep to one owner
            now: Reference timestamp (defaults to the current time)

        Returns:
            Number of records marked as failed
        """
        current = time.time() if now is None else now
        cutoff = current - max_age_seconds

        query = """
            UPDATE thumbnails
            SET is_generating = 0, status = ?, error = ?, updated_at = ?
            WHERE is_generating = 1 AND created_at < ?
            """
        params: list = [STATUS_FAILED, TIMED_OUT_MESSAGE, current, cutoff]
        if user_id is not None:
            query += " AND user_id = ?"
            params.append(user_id)

        with self._connect() as conn:
            cursor = conn.execute(query, params)
            conn.commit()
            expired = cursor.rowcount

        if expired:
            logger.info(f"Marked {expired} stale thumbnail record(s) as failed")
        return expired

    def get(self, user_id: str, record_id: str) -> dict | None:
        """Return one record if it belongs to ``user_id``.

        Returns:
            The record, or None if missing or owned by someone else
        """
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM thumbnails WHERE id = ? AND user_id = ?",
                (record_id, user_id),
            ).fetchone()
        return self._to_record(row) if row else None

    def list_for_owner(self, user_id: str) -> list[dict]:
        """Return every record owned by ``user_id`` in storage order."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM thumbnails WHERE user_id = ? ORDER BY rowid",
                (user_id,),
            ).fetchall()
        return [self._to_record(row) for row in rows]

    def delete(self, user_id: str, record_id: str) -> bool:
        """Delete one record if it belongs to ``user_id``.

        Returns:
            True if a row was removed, False if nothing matched
        """
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM thumbnails WHERE id = ? AND user_id = ?",
                (record_id, user_id),
            )
            conn.commit()
            was_deleted = cursor.rowcount > 0

        if was_deleted:
            logger.info(f"Deleted thumbnail {record_id}")
        else:
            logger.debug(f"No thumbnail {record_id} for user {user_id}")
        return was_deleted

"""SQLite-backed user accounts and server-side login sessions.

Sessions live on the server; the browser only holds an opaque session id in
a cookie.  Resolving a session id yields the owning user id, which is then
passed explicitly to every handler that reads or writes thumbnails.
"""

from __future__ import annotations

import logging
import secrets
import sqlite3
import time
import uuid
from pathlib import Path

from passlib.context import CryptContext

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class EmailAlreadyRegistered(Exception):
    """Raised when registering an email that already has an account."""


class UserStore:
    """Manage user accounts using SQLite."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialize_db()

    def _initialize_db(self) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    email TEXT NOT NULL UNIQUE,
                    password_hash TEXT NOT NULL,
                    created_at REAL NOT NULL
                )
                """)
            conn.commit()

    @staticmethod
    def _normalize_email(email: str) -> str:
        return email.strip().lower()

    def create_user(self, name: str, email: str, password: str) -> dict:
        """Register a new account.

        Args:
            name: Display name
            email: Login email (case-insensitive)
            password: Plain-text password, stored hashed

        Returns:
            Public user dictionary (``_id``, ``name``, ``email``)

        Raises:
            EmailAlreadyRegistered: If the email is taken
        """
        user_id = uuid.uuid4().hex
        normalized = self._normalize_email(email)
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute(
                    """
                    INSERT INTO users (id, name, email, password_hash, created_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (user_id, name.strip(), normalized, pwd_context.hash(password), time.time()),
                )
                conn.commit()
        except sqlite3.IntegrityError as e:
            raise EmailAlreadyRegistered(normalized) from e

        logger.info(f"Registered user {user_id}")
        return {"_id": user_id, "name": name.strip(), "email": normalized}

    def authenticate(self, email: str, password: str) -> dict | None:
        """Check credentials.

        Returns:
            Public user dictionary, or None if the credentials are wrong
        """
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT id, name, email, password_hash FROM users WHERE email = ?",
                (self._normalize_email(email),),
            ).fetchone()

        if row is None or not pwd_context.verify(password, row[3]):
            return None
        return {"_id": row[0], "name": row[1], "email": row[2]}

    def get_user(self, user_id: str) -> dict | None:
        """Return the public user dictionary for ``user_id``."""
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT id, name, email FROM users WHERE id = ?", (user_id,)
            ).fetchone()
        if row is None:
            return None
        return {"_id": row[0], "name": row[1], "email": row[2]}


class SessionStore:
    """Manage server-side login sessions using SQLite."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialize_db()

    def _initialize_db(self) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS sessions (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    expires_at REAL NOT NULL
                )
                """)
            conn.commit()

    def create(self, user_id: str, max_age_seconds: int, *, now: float | None = None) -> str:
        """Open a session for ``user_id`` and return its id.

        Sessions that expired without a logout are purged on the way.
        """
        session_id = secrets.token_urlsafe(32)
        current = time.time() if now is None else now
        with sqlite3.connect(self.db_path) as conn:
            purged = conn.execute(
                "DELETE FROM sessions WHERE expires_at <= ?", (current,)
            ).rowcount
            conn.execute(
                "INSERT INTO sessions (id, user_id, expires_at) VALUES (?, ?, ?)",
                (session_id, user_id, current + max_age_seconds),
            )
            conn.commit()

        if purged:
            logger.debug(f"Purged {purged} expired session(s)")
        return session_id

    def resolve(self, session_id: str | None, *, now: float | None = None) -> str | None:
        """Return the user id for a live session.

        Expired sessions are removed and resolve to None.
        """
        if not session_id:
            return None

        current = time.time() if now is None else now
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT user_id, expires_at FROM sessions WHERE id = ?",
                (session_id,),
            ).fetchone()
            if row is None:
                return None
            if row[1] <= current:
                conn.execute("DELETE FROM sessions WHERE id = ?", (session_id,))
                conn.commit()
                return None
        return row[0]

    def destroy(self, session_id: str | None) -> None:
        """Remove a session; unknown ids are ignored."""
        if not session_id:
            return
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("DELETE FROM sessions WHERE id = ?", (session_id,))
            conn.commit()

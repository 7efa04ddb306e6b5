"""Persistent storage of registered users in SQLite."""

from __future__ import annotations

import os
import sqlite3
import threading
from dataclasses import dataclass

DEFAULT_PATH = "Titans_vanguard.sqlite"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS players (
    username TEXT PRIMARY KEY NOT NULL,
    score INTEGER NOT NULL,
    points INTEGER NOT NULL,
    canDoubleBulletSpeed INTEGER NOT NULL,
    canReduceReloadTime INTEGER NOT NULL
)
"""

_COLUMNS = "username, score, points, canDoubleBulletSpeed, canReduceReloadTime"


@dataclass
class DataUser:
    """A registered user and their progress."""

    username: str
    score: int = 0
    points: int = 0
    can_double_bullet_speed: bool = False
    can_reduce_reload_time: int = -1

    def _row(self) -> tuple:
        return (
            self.username,
            self.score,
            self.points,
            int(self.can_double_bullet_speed),
            self.can_reduce_reload_time,
        )

    @classmethod
    def _from_row(cls, row: tuple) -> DataUser:
        username, score, points, double_speed, reduce_reload = row
        return cls(username, score, points, bool(double_speed), reduce_reload)


class UserDatabase:
    """User table kept in an SQLite file; safe to share between threads."""

    def __init__(self, path: str | os.PathLike = DEFAULT_PATH) -> None:
        self._conn = sqlite3.connect(os.fspath(path), check_same_thread=False)
        self._lock = threading.Lock()
        with self._lock, self._conn:
            self._conn.execute(_SCHEMA)

    def add_user(self, user: DataUser) -> None:
        """Insert a user, replacing any user of the same name."""
        with self._lock, self._conn:
            self._conn.execute(
                f"INSERT OR REPLACE INTO players ({_COLUMNS}) VALUES (?, ?, ?, ?, ?)",
                user._row(),
            )

    def get_user(self, username: str) -> DataUser | None:
        with self._lock:
            row = self._conn.execute(
                f"SELECT {_COLUMNS} FROM players WHERE username = ?", (username,)
            ).fetchone()
        return DataUser._from_row(row) if row else None

    def all_users(self) -> list[DataUser]:
        with self._lock:
            rows = self._conn.execute(f"SELECT {_COLUMNS} FROM players").fetchall()
        return [DataUser._from_row(row) for row in rows]

    def update_user(self, user: DataUser) -> None:
        """Overwrite the stored fields of an existing user."""
        _, score, points, double_speed, reduce_reload = user._row()
        with self._lock, self._conn:
            self._conn.execute(
                "UPDATE players SET score = ?, points = ?, canDoubleBulletSpeed = ?, "
                "canReduceReloadTime = ? WHERE username = ?",
                (score, points, double_speed, reduce_reload, user.username),
            )

    def delete_user(self, username: str) -> None:
        with self._lock, self._conn:
            self._conn.execute("DELETE FROM players WHERE username = ?", (username,))

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __enter__(self) -> UserDatabase:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
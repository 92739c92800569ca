"""
Saved quiz storage.

Quizzes are kept in a key-value store keyed by title. SQLiteQuizStore is the
persistent store; MemoryQuizStore backs tests and throwaway sessions.
"""

import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from config import DATABASE_PATH
from pipeline.schemas import QuizDocument


SCHEMA = """
CREATE TABLE IF NOT EXISTS saved_quizzes (
    title TEXT PRIMARY KEY,
    document TEXT NOT NULL,          -- QuizDocument JSON (camelCase keys)
    question_count INTEGER NOT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""


class QuizStore(Protocol):
    """Key-value store of saved quizzes."""

    def get(self, key: str) -> Optional[QuizDocument]: ...

    def put(self, key: str, value: QuizDocument) -> None: ...

    def delete(self, key: str) -> bool: ...

    def list(self) -> List[QuizDocument]: ...


@contextmanager
def get_connection(db_path: Path = DATABASE_PATH):
    """Context manager for database connections."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db(db_path: Path = DATABASE_PATH):
    """Initialize the database with schema."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    with get_connection(db_path) as conn:
        conn.executescript(SCHEMA)


def _to_json(document: QuizDocument) -> str:
    return json.dumps(document.model_dump(mode="json", by_alias=True))


def _from_json(text: str) -> QuizDocument:
    return QuizDocument.model_validate(json.loads(text))


class SQLiteQuizStore:
    """Saved quizzes in a SQLite file."""

    def __init__(self, db_path: Path = DATABASE_PATH):
        self.db_path = Path(db_path)
        init_db(self.db_path)

    def get(self, key: str) -> Optional[QuizDocument]:
        with get_connection(self.db_path) as conn:
            row = conn.execute(
                "SELECT document FROM saved_quizzes WHERE title = ?", (key,)
            ).fetchone()
        return _from_json(row["document"]) if row else None

    def put(self, key: str, value: QuizDocument) -> None:
        with get_connection(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO saved_quizzes (title, document, question_count)
                VALUES (?, ?, ?)
                ON CONFLICT(title) DO UPDATE SET
                    document = excluded.document,
                    question_count = excluded.question_count,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (key, _to_json(value), len(value.questions)),
            )

    def delete(self, key: str) -> bool:
        with get_connection(self.db_path) as conn:
            cursor = conn.execute("DELETE FROM saved_quizzes WHERE title = ?", (key,))
            return cursor.rowcount > 0

    def list(self) -> List[QuizDocument]:
        """All saved quizzes, oldest first."""
        with get_connection(self.db_path) as conn:
            rows = conn.execute(
                "SELECT document FROM saved_quizzes ORDER BY created_at, rowid"
            ).fetchall()
        return [_from_json(row["document"]) for row in rows]


class MemoryQuizStore:
    """Saved quizzes in a dict, insertion ordered."""

    def __init__(self):
        self._items: Dict[str, QuizDocument] = {}

    def get(self, key: str) -> Optional[QuizDocument]:
        return self._items.get(key)

    def put(self, key: str, value: QuizDocument) -> None:
        self._items[key] = value

    def delete(self, key: str) -> bool:
        return self._items.pop(key, None) is not None

    def list(self) -> List[QuizDocument]:
        return list(self._items.values())


class SavedQuizzes:
    """Save, replace, delete and list quizzes by title."""

    def __init__(self, store: QuizStore):
        self.store = store

    def save(self, document: QuizDocument) -> bool:
        """
        Save a quiz under its title.

        Returns:
            True if an existing quiz with the same title was replaced
        """
        existed = self.store.get(document.title) is not None
        self.store.put(document.title, document)
        return existed

    def load(self, title: str) -> Optional[QuizDocument]:
        return self.store.get(title)

    def delete(self, title: str) -> bool:
        return self.store.delete(title)

    def all(self) -> List[QuizDocument]:
        return self.store.list()

    def __len__(self) -> int:
        return len(self.store.list())

from __future__ import annotations

import json
import logging
import os
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .palette import Swatch

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SwatchSnapshot:
    """Color and label copied at declaration time; the slot is redrawn right after."""
    color: str
    label: str

    @classmethod
    def of(cls, swatch: Swatch) -> 'SwatchSnapshot':
        return cls(color=swatch.css, label=swatch.label)


@dataclass(frozen=True)
class DeclaredCollection:
    rule_name: str
    slot_ids: Tuple[str, ...]
    swatches: Tuple[SwatchSnapshot, ...]
    declared_at: str  # ISO-8601, UTC

    def same_as(self, other: 'DeclaredCollection') -> bool:
        """Same rule over the same slots, in any order."""
        return self.rule_name == other.rule_name and set(self.slot_ids) == set(other.slot_ids)

    def to_json(self) -> Dict[str, Any]:
        return {
            'name': self.rule_name,
            'ids': list(self.slot_ids),
            'swatches': [{'color': s.color, 'label': s.label} for s in self.swatches],
            'ts': self.declared_at,
        }

    @classmethod
    def from_json(cls, obj: Dict[str, Any]) -> 'DeclaredCollection':
        return cls(
            rule_name=str(obj['name']),
            slot_ids=tuple(str(x) for x in obj['ids']),
            swatches=tuple(SwatchSnapshot(color=str(s['color']), label=str(s['label'])) for s in obj.get('swatches') or []),
            declared_at=str(obj['ts']),
        )


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec='seconds').replace('+00:00', 'Z')


def contains_record(records: Iterable[DeclaredCollection], record: DeclaredCollection) -> bool:
    return any(r.same_as(record) for r in records)


class MemoryCollectionStore:
    """Keeps declared collections in process memory."""

    def __init__(self, records: Optional[Sequence[DeclaredCollection]] = None) -> None:
        self._records: List[DeclaredCollection] = list(records or [])

    def load(self) -> List[DeclaredCollection]:
        return list(self._records)

    def save(self, records: Sequence[DeclaredCollection]) -> bool:
        self._records = list(records)
        return True

    def clear(self) -> bool:
        self._records = []
        return True


# ---------- SQLite store ----------

def _ensure_db_dir(db_path: str) -> None:
    """Ensures the directory for the SQLite DB exists before connecting."""
    directory = os.path.dirname(db_path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory, exist_ok=True)


def _resolve_db_path(db_path: str) -> str:
    """Resolves a potentially unwritable DB path to a writable one, creating the directory if needed."""
    try:
        _ensure_db_dir(db_path)
        return db_path
    except PermissionError:
        pass
    candidates = [
        os.getenv('CHROMA_DB_DIR'),
        os.path.join(os.getcwd(), 'data'),
        '/tmp',
    ]
    base = os.path.basename(db_path) or 'collections.db'
    for d in candidates:
        if not d:
            continue
        try:
            os.makedirs(d, exist_ok=True)
            return os.path.join(d, base)
        except OSError:
            continue
    return base


def _ensure_db(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS collections (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            rule_name TEXT NOT NULL,
            slot_ids TEXT NOT NULL,
            swatches TEXT NOT NULL,
            declared_at TEXT NOT NULL
        )
        """
    )
    conn.commit()


def _row_to_record(row: Tuple[Any, ...]) -> DeclaredCollection:
    rule_name, slot_ids_json, swatches_json, declared_at = row
    return DeclaredCollection.from_json({
        'name': rule_name,
        'ids': json.loads(slot_ids_json),
        'swatches': json.loads(swatches_json),
        'ts': declared_at,
    })


class SqliteCollectionStore:
    """
    Declared collections in a single SQLite table, in declaration order.

    Reads never raise: an unreadable file or a malformed row yields an empty
    list. Writes report success as a bool.
    """

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        resolved = _resolve_db_path(self.db_path)
        _ensure_db_dir(resolved)
        conn = sqlite3.connect(resolved)
        try:
            _ensure_db(conn)
        except sqlite3.Error:
            conn.close()
            raise
        return conn

    def load(self) -> List[DeclaredCollection]:
        try:
            conn = self._connect()
        except sqlite3.Error as e:
            logger.warning('Collection store %s unreadable, treating as empty: %s', self.db_path, e)
            return []
        try:
            rows = conn.execute(
                'SELECT rule_name, slot_ids, swatches, declared_at FROM collections ORDER BY id'
            ).fetchall()
            return [_row_to_record(row) for row in rows]
        except (sqlite3.Error, ValueError, TypeError, KeyError) as e:
            logger.warning('Collection store %s corrupt, treating as empty: %s', self.db_path, e)
            return []
        finally:
            conn.close()

    def save(self, records: Sequence[DeclaredCollection]) -> bool:
        try:
            conn = self._connect()
        except sqlite3.Error as e:
            logger.warning('Could not open collection store %s: %s', self.db_path, e)
            return False
        try:
            with conn:
                conn.execute('DELETE FROM collections')
                conn.executemany(
                    'INSERT INTO collections (rule_name, slot_ids, swatches, declared_at) VALUES (?, ?, ?, ?)',
                    [
                        (
                            r.rule_name,
                            json.dumps(list(r.slot_ids)),
                            json.dumps([{'color': s.color, 'label': s.label} for s in r.swatches]),
                            r.declared_at,
                        )
                        for r in records
                    ],
                )
            return True
        except sqlite3.Error as e:
            logger.warning('Could not save collections to %s: %s', self.db_path, e)
            return False
        finally:
            conn.close()

    def clear(self) -> bool:
        try:
            conn = self._connect()
        except sqlite3.Error as e:
            logger.warning('Could not open collection store %s: %s', self.db_path, e)
            return False
        try:
            with conn:
                conn.execute('DELETE FROM collections')
            return True
        except sqlite3.Error as e:
            logger.warning('Could not clear collection store %s: %s', self.db_path, e)
            return False
        finally:
            conn.close()

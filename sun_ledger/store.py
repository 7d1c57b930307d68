"""
The Record Store - append-only persistence for Sun Ledger

A single SQLite table holds every observation ever collected. There is no
uniqueness constraint: the same location/date may appear once per responding
source, and repeated collections simply add more rows.

Usage:
    from sun_ledger.store import AstronomicalStore

    store = AstronomicalStore()
    store.append(record)
    records = store.read_all(RecordFilter(location="oslo"))
"""

import logging
import sqlite3
from datetime import date, datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

from sun_ledger import config
from sun_ledger.models import AstronomicalRecord, RecordFilter, fold_case, parse_utc

logger = logging.getLogger(__name__)


class AstronomicalStore:
    """
    Append-only store for AstronomicalRecord rows.

    Each append is independent: a failure storing one source's record never
    affects its siblings, and nothing is ever updated or deleted.
    """

    def __init__(self, db_path: Optional[Union[str, Path]] = None):
        """
        Initialize the store.

        Args:
            db_path: Path to SQLite database, or ":memory:". Defaults to
                SUN_LEDGER_DB_PATH.
        """
        self.db_path = str(db_path or config.DB_PATH)
        logger.info(f"[AstronomicalStore] Initializing with database: {self.db_path}")

        self.conn = sqlite3.connect(self.db_path)
        # Unicode case folding, same as RecordFilter.matches
        self.conn.create_function("fold_case", 1, fold_case)
        self._init_db()

        logger.info("[AstronomicalStore] Database connection established")

    def _init_db(self):
        """Create the table if it doesn't exist."""
        cursor = self.conn.cursor()

        # No UNIQUE constraint: sibling sources for a location/date coexist
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS astronomical_data (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                location TEXT NOT NULL,            -- As entered, not normalized
                latitude REAL NOT NULL,
                longitude REAL NOT NULL,
                date TEXT NOT NULL,                -- YYYY-MM-DD
                sunrise TEXT NOT NULL,             -- UTC ISO-8601
                sunset TEXT NOT NULL,              -- UTC ISO-8601
                day_length INTEGER NOT NULL,       -- Seconds
                solar_noon TEXT NOT NULL,          -- UTC ISO-8601
                source TEXT NOT NULL,              -- Provider domain
                created_at TEXT NOT NULL           -- UTC ISO-8601, assigned on append
            )
        ''')

        cursor.execute('''
            CREATE INDEX IF NOT EXISTS idx_astronomical_created
            ON astronomical_data(created_at)
        ''')

        self.conn.commit()
        logger.debug("[AstronomicalStore] Schema initialized")

    def append(self, record: AstronomicalRecord) -> bool:
        """
        Append one record.

        Sets record.created_at and record.id on success.

        Returns:
            True if stored, False on error
        """
        created_at = datetime.now(timezone.utc)
        row = record.to_row()
        row["created_at"] = created_at.isoformat(timespec="microseconds")

        try:
            cursor = self.conn.cursor()
            cursor.execute('''
                INSERT INTO astronomical_data
                (location, latitude, longitude, date, sunrise, sunset,
                 day_length, solar_noon, source, created_at)
                VALUES (:location, :latitude, :longitude, :date, :sunrise, :sunset,
                        :day_length, :solar_noon, :source, :created_at)
            ''', row)
            self.conn.commit()
        except sqlite3.Error as e:
            logger.error(f"[AstronomicalStore] Failed to save {record.source} record "
                         f"for {record.location} {record.date}: {e}")
            return False

        record.id = cursor.lastrowid
        record.created_at = created_at
        logger.info(f"[AstronomicalStore] Saved {record.source} -> {record.location} {record.date} "
                    f"(day length {record.day_length}s)")
        return True

    def read_all(self, filters: Optional[RecordFilter] = None) -> List[AstronomicalRecord]:
        """
        Read the record set, newest first.

        Args:
            filters: Optional location substring (case-insensitive) and
                inclusive date range

        Returns:
            List of AstronomicalRecord ordered by created_at descending
        """
        clauses = []
        params: List[object] = []

        if filters is not None:
            if filters.location:
                clauses.append("fold_case(location) LIKE ? ESCAPE '\\'")
                params.append(f"%{_escape_like(fold_case(filters.location))}%")
            if filters.start_date is not None:
                clauses.append("date >= ?")
                params.append(filters.start_date.isoformat())
            if filters.end_date is not None:
                clauses.append("date <= ?")
                params.append(filters.end_date.isoformat())

        query = '''
            SELECT id, location, latitude, longitude, date, sunrise, sunset,
                   day_length, solar_noon, source, created_at
            FROM astronomical_data
        '''
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY created_at DESC, id DESC"

        cursor = self.conn.cursor()
        rows = cursor.execute(query, params).fetchall()

        records = [
            AstronomicalRecord(
                id=row[0],
                location=row[1],
                latitude=row[2],
                longitude=row[3],
                date=date.fromisoformat(row[4]),
                sunrise=parse_utc(row[5]),
                sunset=parse_utc(row[6]),
                day_length=row[7],
                solar_noon=parse_utc(row[8]),
                source=row[9],
                created_at=parse_utc(row[10]),
            )
            for row in rows
        ]

        logger.info(f"[AstronomicalStore] Read {len(records)} records")
        return records

    def count(self) -> int:
        cursor = self.conn.cursor()
        return cursor.execute("SELECT COUNT(*) FROM astronomical_data").fetchone()[0]

    def close(self):
        """Close the database connection."""
        if self.conn:
            self.conn.close()
            logger.info("[AstronomicalStore] Database connection closed")


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")

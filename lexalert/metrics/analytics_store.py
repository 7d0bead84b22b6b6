"""
SQLite store for raw product analytics records.
"""

import sqlite3
import logging
import threading
from datetime import datetime
from typing import Dict, List, Optional
from pathlib import Path

from lexalert.exceptions import MetricQueryError
from lexalert.utils.helpers import timestamp_millis

logger = logging.getLogger(__name__)

PERFORMANCE_METRICS = (
    'largest_contentful_paint',
    'first_input_delay',
    'cumulative_layout_shift',
)


class AnalyticsStore:
    """
    SQLite tables for performance samples, errors, events and sessions.

    Instants are stored as epoch milliseconds, so aware datetimes with any
    offset and naive local datetimes land in the same windows.
    """

    def __init__(self, config: Dict):
        """
        Initialize analytics store.

        Args:
            config: Metrics configuration dict with 'sqlite_path' key
        """
        self.db_path = config.get('sqlite_path', './data/analytics.db')

        if self.db_path != ':memory:':
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        # Queries may run on the evaluator's worker threads
        self._lock = threading.Lock()
        self.conn = None
        self._init_db()

        logger.info(f"Initialized analytics store at {self.db_path}")

    def _init_db(self):
        """Create database tables and indexes"""
        self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row

        if self.db_path != ':memory:':
            self.conn.execute("PRAGMA journal_mode=WAL")

        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS analytics_performance (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp INTEGER NOT NULL,
                largest_contentful_paint REAL,
                first_input_delay REAL,
                cumulative_layout_shift REAL,
                page_url TEXT
            )
        """)
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS analytics_errors (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp INTEGER NOT NULL,
                error_type VARCHAR(100),
                message TEXT
            )
        """)
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS analytics_events (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp INTEGER NOT NULL,
                event_name VARCHAR(255)
            )
        """)
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS analytics_sessions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                start_time INTEGER NOT NULL,
                end_time INTEGER
            )
        """)

        for table, column in (
            ('analytics_performance', 'timestamp'),
            ('analytics_errors', 'timestamp'),
            ('analytics_events', 'timestamp'),
            ('analytics_sessions', 'start_time'),
        ):
            self.conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{table}_{column} ON {table}({column})"
            )

        self.conn.commit()

    def _write(self, sql: str, params: tuple) -> None:
        with self._lock:
            try:
                self.conn.execute(sql, params)
                self.conn.commit()
            except sqlite3.Error as e:
                logger.error(f"Failed to write analytics record: {e}")
                self.conn.rollback()
                raise

    def _read(self, metric: str, sql: str, params: tuple) -> List[sqlite3.Row]:
        with self._lock:
            try:
                return self.conn.execute(sql, params).fetchall()
            except sqlite3.Error as e:
                raise MetricQueryError(metric, str(e)) from e

    def record_performance(self, timestamp: datetime,
                           largest_contentful_paint: Optional[float] = None,
                           first_input_delay: Optional[float] = None,
                           cumulative_layout_shift: Optional[float] = None,
                           page_url: Optional[str] = None) -> None:
        """Store one web-vitals sample; unmeasured vitals stay NULL"""
        self._write("""
            INSERT INTO analytics_performance (
                timestamp, largest_contentful_paint, first_input_delay,
                cumulative_layout_shift, page_url
            ) VALUES (?, ?, ?, ?, ?)
        """, (timestamp_millis(timestamp), largest_contentful_paint, first_input_delay,
              cumulative_layout_shift, page_url))

    def record_error(self, timestamp: datetime, error_type: str = 'error',
                     message: str = '') -> None:
        self._write(
            "INSERT INTO analytics_errors (timestamp, error_type, message) VALUES (?, ?, ?)",
            (timestamp_millis(timestamp), error_type, message)
        )

    def record_event(self, timestamp: datetime, event_name: str = 'page_view') -> None:
        self._write(
            "INSERT INTO analytics_events (timestamp, event_name) VALUES (?, ?)",
            (timestamp_millis(timestamp), event_name)
        )

    def record_session(self, start_time: datetime, end_time: Optional[datetime] = None) -> None:
        """Store a session; leave end_time empty while it is in progress"""
        self._write(
            "INSERT INTO analytics_sessions (start_time, end_time) VALUES (?, ?)",
            (timestamp_millis(start_time), timestamp_millis(end_time) if end_time else None)
        )

    def performance_samples(self, metric: str, start: datetime, end: datetime) -> List[float]:
        """Non-null samples of one performance metric inside the window"""
        if metric not in PERFORMANCE_METRICS:
            raise MetricQueryError(metric, "not a performance metric")

        rows = self._read(metric, f"""
            SELECT {metric} AS value FROM analytics_performance
            WHERE timestamp >= ? AND timestamp <= ?
            AND {metric} IS NOT NULL
        """, (timestamp_millis(start), timestamp_millis(end)))
        return [row['value'] for row in rows]

    def count_errors(self, start: datetime, end: datetime) -> int:
        rows = self._read('error_rate', """
            SELECT COUNT(*) AS n FROM analytics_errors
            WHERE timestamp >= ? AND timestamp <= ?
        """, (timestamp_millis(start), timestamp_millis(end)))
        return rows[0]['n']

    def count_events(self, start: datetime, end: datetime) -> int:
        rows = self._read('error_rate', """
            SELECT COUNT(*) AS n FROM analytics_events
            WHERE timestamp >= ? AND timestamp <= ?
        """, (timestamp_millis(start), timestamp_millis(end)))
        return rows[0]['n']

    def completed_session_durations(self, start: datetime, end: datetime) -> List[float]:
        """Durations in milliseconds of finished sessions started inside the window"""
        rows = self._read('avg_session_duration', """
            SELECT start_time, end_time FROM analytics_sessions
            WHERE start_time >= ? AND start_time <= ?
            AND end_time IS NOT NULL
        """, (timestamp_millis(start), timestamp_millis(end)))

        return [float(row['end_time'] - row['start_time']) for row in rows]

    def close(self) -> None:
        """Close database connection"""
        if self.conn:
            try:
                self.conn.close()
                logger.debug("Closed analytics SQLite connection")
            except sqlite3.Error as e:
                logger.error(f"Error closing SQLite connection: {e}")

"""
Result store for Motor Screen.

Persists scored test results keyed by user and timestamp so progress can be
tracked across sessions.

Key features:
- SQLite database, one row per scored test
- Full result record stored as JSON next to indexed summary columns
- Optional raw capture buffer stored for audit
- Dashboard and progress aggregates (daily averages, period-over-period trend)
"""

import json
import logging
import sqlite3
import uuid
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from scoring.results import ScoreStatus

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = '%Y-%m-%dT%H:%M:%S.%f'


class ResultStore:
    """
    SQLite-backed store for scored test results.

    Scoring never touches the store: results are computed first and handed
    over afterwards.
    """

    def __init__(self, db_path: str = "data/results/motor_screen.db"):
        """
        Initialize result store.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_database()

        logger.info(f"Result store initialized: {self.db_path}")

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_database(self):
        """Create tables if they don't exist."""
        with self._connect() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS test_results (
                    result_id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    test_type TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    status TEXT NOT NULL,
                    overall_score REAL NOT NULL,
                    risk_level TEXT NOT NULL,
                    recommendation TEXT,
                    score_data TEXT NOT NULL,
                    raw_data TEXT
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_test_results_user_time
                ON test_results(user_id, created_at)
            """)

            conn.commit()

    def save_result(
        self,
        user_id: str,
        result,
        raw_data: Any = None,
        created_at: Optional[datetime] = None
    ) -> str:
        """
        Save a scored result.

        Args:
            user_id: Owner of the result
            result: Any modality result exposing to_dict()
            raw_data: Optional raw capture buffer (JSON-serializable)
            created_at: Timestamp (defaults to now, UTC)

        Returns:
            Generated result id
        """
        if not user_id:
            raise ValueError("user_id is required")

        record = result.to_dict()
        result_id = uuid.uuid4().hex
        timestamp = _format_timestamp(created_at or datetime.now(timezone.utc))

        with self._connect() as conn:
            conn.execute("""
                INSERT INTO test_results (
                    result_id, user_id, test_type, created_at, status,
                    overall_score, risk_level, recommendation, score_data, raw_data
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                result_id,
                user_id,
                record['test_type'],
                timestamp,
                record['status'],
                record.get('overall_score', 0.0),
                record.get('risk_level', ''),
                record.get('recommendation'),
                json.dumps(record),
                json.dumps(raw_data) if raw_data is not None else None
            ))
            conn.commit()

        logger.info(f"✓ Saved {record['test_type']} result {result_id} for user {user_id}")

        return result_id

    def get_result(self, result_id: str, user_id: Optional[str] = None) -> Optional[Dict]:
        """
        Get a single result.

        Args:
            result_id: Result identifier
            user_id: When given, results owned by other users are not returned

        Returns:
            Result record or None
        """
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM test_results WHERE result_id = ?", (result_id,)
            ).fetchone()

        if row is None:
            return None

        if user_id is not None and row['user_id'] != user_id:
            logger.warning(f"User {user_id} requested result {result_id} owned by another user")
            return None

        return _row_to_record(row)

    def list_results(
        self,
        user_id: str,
        test_type: Optional[str] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[Dict]:
        """List a user's results, newest first."""
        query = "SELECT * FROM test_results WHERE user_id = ?"
        params: List[Any] = [user_id]

        if test_type:
            query += " AND test_type = ?"
            params.append(test_type)

        query += " ORDER BY created_at DESC LIMIT ? OFFSET ?"
        params.extend([limit, offset])

        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()

        return [_row_to_record(row) for row in rows]

    def get_dashboard_stats(self, user_id: str) -> Dict:
        """
        Summary for a user's dashboard.

        Returns:
            Dictionary with total_tests, average_score (computed results only),
            current_risk (latest result), recent_tests (5 newest) and
            tests_by_type counts
        """
        results = self.list_results(user_id, limit=-1)

        scored = [r for r in results if r['status'] == ScoreStatus.OK.value]
        average = (
            sum(r['overall_score'] for r in scored) / len(scored) if scored else 0.0
        )

        tests_by_type: Dict[str, int] = defaultdict(int)
        for record in results:
            tests_by_type[record['test_type']] += 1

        return {
            'total_tests': len(results),
            'average_score': average,
            'current_risk': results[0]['risk_level'] if results else None,
            'recent_tests': results[:5],
            'tests_by_type': dict(tests_by_type),
        }

    def get_progress(self, user_id: str, days: int = 30, now: Optional[datetime] = None) -> Dict:
        """
        Daily per-test-type averages over the last `days` days.

        The trend compares the period average with the preceding period of
        the same length, in percent.

        Returns:
            {'progress': [{'date', <test_type>: avg, ...}], 'stats': {'total', 'average', 'trend'}}
        """
        if days <= 0:
            raise ValueError(f"days must be positive, got {days}")

        now = now or datetime.now(timezone.utc)
        start = now - timedelta(days=days)
        previous_start = now - timedelta(days=days * 2)

        current = self._scored_between(user_id, start, now)
        previous = self._scored_between(user_id, previous_start, start)

        daily: Dict[str, Dict[str, List[float]]] = defaultdict(lambda: defaultdict(list))
        for record in current:
            date_key = record['created_at'][:10]
            daily[date_key][record['test_type']].append(record['overall_score'])

        progress = []
        for date_key in sorted(daily):
            day = {'date': date_key}
            for test_type, scores in daily[date_key].items():
                day[test_type] = sum(scores) / len(scores)
            progress.append(day)

        average = _average_score(current)
        previous_average = _average_score(previous)

        if previous_average > 0:
            trend = (average - previous_average) / previous_average * 100.0
        else:
            trend = 100.0 if average > 0 else 0.0

        return {
            'progress': progress,
            'stats': {
                'total': len(current),
                'average': average,
                'trend': trend,
            }
        }

    def _scored_between(self, user_id: str, start: datetime, end: datetime) -> List[Dict]:
        with self._connect() as conn:
            rows = conn.execute("""
                SELECT * FROM test_results
                WHERE user_id = ? AND status = ? AND created_at >= ? AND created_at < ?
                ORDER BY created_at ASC
            """, (
                user_id,
                ScoreStatus.OK.value,
                _format_timestamp(start),
                _format_timestamp(end)
            )).fetchall()

        return [_row_to_record(row) for row in rows]


def _format_timestamp(value: datetime) -> str:
    """UTC, timezone-naive, fixed width so string order is time order."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.strftime(TIMESTAMP_FORMAT)


def _average_score(records: List[Dict]) -> float:
    if not records:
        return 0.0
    return sum(r['overall_score'] for r in records) / len(records)


def _row_to_record(row: sqlite3.Row) -> Dict:
    record = json.loads(row['score_data'])
    record.update({
        'result_id': row['result_id'],
        'user_id': row['user_id'],
        'created_at': row['created_at'],
    })
    if row['raw_data'] is not None:
        record['raw_data'] = json.loads(row['raw_data'])
    return record

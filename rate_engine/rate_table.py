"""
Rate Table Module

Read contract for the published interest rate table plus in-memory (testing)
and SQLite adapters. Rows are keyed by (account key, lookup type code) and
carry an effective period; the engine only ever reads from a rate table.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union
import logging
import sqlite3
import threading

logger = logging.getLogger(__name__)

# End date of an open-ended period
INFINITE_END_DATE = date(9999, 12, 31)


@dataclass(frozen=True)
class InterestRateRecord:
    """Published rate for one effective period"""
    account_key: str
    type_code: str
    start_date: date
    rate: Decimal
    end_date: date = INFINITE_END_DATE

    def __post_init__(self):
        if not isinstance(self.rate, Decimal):
            object.__setattr__(self, 'rate', Decimal(str(self.rate)))
        if self.end_date < self.start_date:
            raise ValueError(
                f"Rate period ends ({self.end_date}) before it starts ({self.start_date})"
            )

    def covers(self, as_of: date) -> bool:
        return self.start_date <= as_of <= self.end_date


class RateTable(ABC):
    """Abstract interface for rate table backends"""

    @abstractmethod
    def find_effective_rate(self, account_key: str, type_code: str,
                            as_of: date) -> Optional[InterestRateRecord]:
        """
        Find the row in effect on `as_of`

        Resolution order: the row whose period contains `as_of`, else the row
        with the latest start date not after `as_of`, else None.
        """
        pass

    @abstractmethod
    def add_rate(self, record: InterestRateRecord) -> InterestRateRecord:
        """Insert a row, closing the preceding period the day before it starts"""
        pass

    @abstractmethod
    def rates_for(self, account_key: str, type_code: str) -> List[InterestRateRecord]:
        """All rows for a key and type, ordered by start date"""
        pass

    def close(self) -> None:
        """Release backend resources (default no-op)"""
        pass


def _closed_predecessor(existing: List[InterestRateRecord],
                        record: InterestRateRecord) -> Optional[InterestRateRecord]:
    """Predecessor row whose period must end the day before `record` starts"""
    earlier = [row for row in existing if row.start_date < record.start_date]
    if not earlier:
        return None
    latest = max(earlier, key=lambda row: row.start_date)
    if latest.end_date < record.start_date:
        return None
    return replace(latest, end_date=record.start_date - timedelta(days=1))


def _bounded_by_successor(existing: List[InterestRateRecord],
                          record: InterestRateRecord) -> InterestRateRecord:
    """Trim `record` so it ends the day before the next existing period starts"""
    later = [row for row in existing if row.start_date > record.start_date]
    if not later:
        return record
    successor = min(later, key=lambda row: row.start_date)
    if record.end_date < successor.start_date:
        return record
    return replace(record, end_date=successor.start_date - timedelta(days=1))


class InMemoryRateTable(RateTable):
    """In-memory rate table for testing and embedded use"""

    def __init__(self, records: Optional[List[InterestRateRecord]] = None):
        self._rows: Dict[Tuple[str, str], List[InterestRateRecord]] = {}
        self._lock = threading.RLock()
        for record in records or []:
            self.add_rate(record)

    def find_effective_rate(self, account_key: str, type_code: str,
                            as_of: date) -> Optional[InterestRateRecord]:
        with self._lock:
            rows = self._rows.get((account_key, type_code), [])
            for row in rows:
                if row.covers(as_of):
                    return row
            earlier = [row for row in rows if row.start_date <= as_of]
            if earlier:
                return max(earlier, key=lambda row: row.start_date)
            return None

    def add_rate(self, record: InterestRateRecord) -> InterestRateRecord:
        with self._lock:
            key = (record.account_key, record.type_code)
            rows = self._rows.setdefault(key, [])
            if any(row.start_date == record.start_date for row in rows):
                raise ValueError(
                    f"Rate period starting {record.start_date} already exists "
                    f"for {record.account_key}/{record.type_code}"
                )

            predecessor = _closed_predecessor(rows, record)
            if predecessor:
                rows[:] = [predecessor if row.start_date == predecessor.start_date else row
                           for row in rows]

            record = _bounded_by_successor(rows, record)
            rows.append(record)
            rows.sort(key=lambda row: row.start_date)
            return record

    def rates_for(self, account_key: str, type_code: str) -> List[InterestRateRecord]:
        with self._lock:
            return list(self._rows.get((account_key, type_code), []))

    def clear(self) -> None:
        with self._lock:
            self._rows = {}


class SQLiteRateTable(RateTable):
    """SQLite-backed rate table"""

    TABLE = "interest_rates"

    def __init__(self, db_path: Union[str, Path] = ":memory:"):
        self.db_path = str(db_path)
        self._connection = sqlite3.connect(self.db_path, check_same_thread=False)
        self._connection.row_factory = sqlite3.Row
        self._lock = threading.RLock()
        self._ensure_table()

    def _ensure_table(self) -> None:
        with self._lock:
            self._connection.execute(f"""
                CREATE TABLE IF NOT EXISTS {self.TABLE} (
                    account_key TEXT NOT NULL,
                    type_code TEXT NOT NULL,
                    start_date TEXT NOT NULL,
                    end_date TEXT NOT NULL,
                    rate TEXT NOT NULL,
                    PRIMARY KEY (account_key, type_code, start_date)
                )
            """)
            self._connection.commit()

    @staticmethod
    def _record_from_row(row: sqlite3.Row) -> InterestRateRecord:
        return InterestRateRecord(
            account_key=row['account_key'],
            type_code=row['type_code'],
            start_date=date.fromisoformat(row['start_date']),
            end_date=date.fromisoformat(row['end_date']),
            rate=Decimal(row['rate'])
        )

    def find_effective_rate(self, account_key: str, type_code: str,
                            as_of: date) -> Optional[InterestRateRecord]:
        day = as_of.isoformat()
        with self._lock:
            row = self._connection.execute(f"""
                SELECT * FROM {self.TABLE}
                WHERE account_key = ? AND type_code = ?
                  AND start_date <= ? AND end_date >= ?
                ORDER BY start_date DESC LIMIT 1
            """, (account_key, type_code, day, day)).fetchone()
            if row is None:
                row = self._connection.execute(f"""
                    SELECT * FROM {self.TABLE}
                    WHERE account_key = ? AND type_code = ? AND start_date <= ?
                    ORDER BY start_date DESC LIMIT 1
                """, (account_key, type_code, day)).fetchone()
            return self._record_from_row(row) if row else None

    def add_rate(self, record: InterestRateRecord) -> InterestRateRecord:
        with self._lock:
            existing = self.rates_for(record.account_key, record.type_code)
            if any(row.start_date == record.start_date for row in existing):
                raise ValueError(
                    f"Rate period starting {record.start_date} already exists "
                    f"for {record.account_key}/{record.type_code}"
                )

            try:
                predecessor = _closed_predecessor(existing, record)
                if predecessor:
                    self._connection.execute(f"""
                        UPDATE {self.TABLE} SET end_date = ?
                        WHERE account_key = ? AND type_code = ? AND start_date = ?
                    """, (predecessor.end_date.isoformat(), predecessor.account_key,
                          predecessor.type_code, predecessor.start_date.isoformat()))

                record = _bounded_by_successor(existing, record)
                self._connection.execute(f"""
                    INSERT INTO {self.TABLE} (account_key, type_code, start_date, end_date, rate)
                    VALUES (?, ?, ?, ?, ?)
                """, (record.account_key, record.type_code, record.start_date.isoformat(),
                      record.end_date.isoformat(), str(record.rate)))
                self._connection.commit()
            except sqlite3.Error:
                self._connection.rollback()
                raise

            logger.debug(
                f"Rate added: key={record.account_key}, type={record.type_code}, "
                f"start={record.start_date}, rate={record.rate}"
            )
            return record

    def rates_for(self, account_key: str, type_code: str) -> List[InterestRateRecord]:
        with self._lock:
            cursor = self._connection.execute(f"""
                SELECT * FROM {self.TABLE}
                WHERE account_key = ? AND type_code = ?
                ORDER BY start_date
            """, (account_key, type_code))
            return [self._record_from_row(row) for row in cursor.fetchall()]

    def close(self) -> None:
        with self._lock:
            self._connection.close()

"""
Ledger - recorded entries and their aggregation queries

Entries are append-only with two exceptions: `undo_last` pops the most
recent entry and `amend_receipt` fills in the value of the most recent
pending receipt. Each mutation writes the full `entries` collection before
returning. Queries never mutate.
"""
from collections import defaultdict
from datetime import datetime, timedelta, timezone, tzinfo
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from pydantic import ValidationError

from finbot.database import ENTRIES, CollectionStore
from finbot.errors import EmptyLedger, NoReceiptPending
from finbot.logger import ErrorType, create_logger
from finbot.schemas.ledger import Entry, EntryKind

logger = create_logger("ledger")


class Period(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


def period_start(period: Period, now: datetime) -> datetime:
    """
    Start of the reporting window ending at `now`.

    DAY is the last 24 hours; WEEK (from Sunday), MONTH and YEAR are
    calendar-aligned in now's time zone.
    """
    if period == Period.DAY:
        return now - timedelta(days=1)
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == Period.WEEK:
        # weekday(): Monday=0 ... Sunday=6
        return midnight - timedelta(days=(midnight.weekday() + 1) % 7)
    if period == Period.MONTH:
        return midnight.replace(day=1)
    return midnight.replace(month=1, day=1)


def totals_by_category(entries: Iterable[Entry]) -> Dict[str, Decimal]:
    """Sum values per category in first-appearance order, no kind filter"""
    totals: Dict[str, Decimal] = defaultdict(Decimal)
    for entry in entries:
        totals[entry.category] += entry.value
    return dict(totals)


def total_value(entries: Iterable[Entry]) -> Decimal:
    return sum((entry.value for entry in entries), Decimal("0"))


class Ledger:
    """In-memory entry collection bound to a persistence store"""

    def __init__(
        self,
        store: CollectionStore,
        entries: Optional[List[Entry]] = None,
        tz: Optional[tzinfo] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.entries: List[Entry] = list(entries or [])
        self.tz = tz
        self._clock = clock

    @classmethod
    def from_records(cls, store: CollectionStore, records: Any, **kwargs) -> "Ledger":
        entries = []
        for index, record in enumerate(records if isinstance(records, list) else []):
            try:
                entries.append(Entry.model_validate(record))
            except ValidationError as e:
                logger.warn("Skipping unreadable entry", {
                    "index": index,
                    "error_type": ErrorType.PARSE_ERROR.value,
                    "error": str(e),
                })
        return cls(store, entries, **kwargs)

    def to_records(self) -> List[Dict[str, Any]]:
        return [entry.to_record() for entry in self.entries]

    def __len__(self) -> int:
        return len(self.entries)

    def now(self) -> datetime:
        current = self._clock() if self._clock is not None else datetime.now(timezone.utc)
        return current.astimezone(self.tz)

    def local(self, moment: datetime) -> datetime:
        return moment.astimezone(self.tz)

    def _save(self) -> None:
        self.store.save(ENTRIES, self.to_records())

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def append(self, entry: Entry) -> Entry:
        self.entries.append(entry)
        self._save()
        return entry

    def undo_last(self) -> Entry:
        if not self.entries:
            raise EmptyLedger()
        entry = self.entries.pop()
        self._save()
        return entry

    def amend_receipt(self, value: Decimal, category: str) -> Entry:
        for entry in reversed(self.entries):
            if entry.kind == EntryKind.RECEIPT_PENDING:
                entry.value = value
                entry.category = category
                entry.kind = EntryKind.RECEIPT
                self._save()
                return entry
        raise NoReceiptPending()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def expenses(self, entries: Optional[Iterable[Entry]] = None) -> List[Entry]:
        return [e for e in (self.entries if entries is None else entries) if not e.is_income]

    def incomes(self) -> List[Entry]:
        return [e for e in self.entries if e.is_income]

    def by_category(self) -> Dict[str, Decimal]:
        """Expense totals per category; income entries are excluded"""
        return totals_by_category(self.expenses())

    def by_period(self, period: Period) -> List[Entry]:
        """Entries of every kind recorded between the period start and now"""
        now = self.now()
        start = period_start(period, now)
        return [e for e in self.entries if start <= e.timestamp <= now]

    def entries_in_month_number(self, month: int) -> List[Entry]:
        """Entries whose local calendar month is `month`, whatever the year"""
        return [e for e in self.entries if self.local(e.timestamp).month == month]

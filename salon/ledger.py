# salon/ledger.py

import logging
import threading
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Sequence, Union

from .core import new_id
from .data import COMMON_OWNER, FINANCE_CATEGORIES, FINANCES_KEY
from .errors import UnknownCategory
from .schemas import FinanceRecord, FinanceRecordCreate, FinanceTotals, FinanceType

logger = logging.getLogger(__name__)


class FinanceLedger:
    """Append-only income/expense records.

    Entries come from two places: manual input (`add`) and completed
    appointments, which the appointment store hands over through
    `staged` + `commit` so both snapshots are written together.
    """

    def __init__(self, storage, lock=None, clock: Optional[Callable[[], datetime]] = None):
        self.storage = storage
        self.lock = lock if lock is not None else threading.RLock()
        self.clock = clock or datetime.now
        self._records: List[FinanceRecord] = []
        self.reload()

    def reload(self) -> None:
        with self.lock:
            raw = self.storage.load(FINANCES_KEY) or []
            self._records = [FinanceRecord.model_validate(r) for r in raw]
            logger.info(f"Loaded {len(self._records)} finance records")

    # ---------- queries ----------

    def list(
        self,
        owner: Optional[str] = None,
        type: Optional[FinanceType] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        visible_to: Union[str, Sequence[str], None] = None,
        newest_first: bool = False,
    ) -> List[FinanceRecord]:
        with self.lock:
            records = list(self._records)
        if owner is not None:
            records = [r for r in records if r.owner == owner]
        if visible_to is not None:
            # owner may hold the provider id or, in older records, the display name
            identities = {visible_to} if isinstance(visible_to, str) else set(visible_to)
            records = [r for r in records if r.owner == COMMON_OWNER or r.owner in identities]
        if type is not None:
            records = [r for r in records if r.type == type]
        # ISO dates compare correctly as strings
        if date_from is not None:
            records = [r for r in records if r.date >= date_from]
        if date_to is not None:
            records = [r for r in records if r.date <= date_to]
        if newest_first:
            records.sort(key=lambda r: r.date, reverse=True)
        return [r.model_copy() for r in records]

    def for_appointment(self, appointment_id: str) -> List[FinanceRecord]:
        with self.lock:
            return [r.model_copy() for r in self._records if r.appointment_id == appointment_id]

    @staticmethod
    def totals(records: Iterable[FinanceRecord]) -> FinanceTotals:
        income = 0.0
        expenses = 0.0
        for r in records:
            if r.type == FinanceType.income:
                income += r.amount
            else:
                expenses += r.amount
        return FinanceTotals(income=income, expenses=expenses, profit=income - expenses)

    # ---------- mutations ----------

    def add(self, entry: FinanceRecordCreate, created_by: Optional[str] = None) -> FinanceRecord:
        if entry.category not in FINANCE_CATEGORIES[entry.type.value]:
            raise UnknownCategory(entry.type, entry.category)

        now = self.clock()
        record = FinanceRecord(
            id=new_id(),
            type=entry.type,
            category=entry.category,
            amount=entry.amount,
            description=entry.description,
            date=entry.date or now.date().isoformat(),
            owner=entry.owner or COMMON_OWNER,
            created_by=created_by,
            created_at=now,
        )
        with self.lock:
            records = self.staged(record)
            self.storage.save(FINANCES_KEY, [r.to_snapshot() for r in records])
            self.commit(records)
        logger.info(f"Added {record.type.value} record {record.id} ({record.category}, {record.amount})")
        return record.model_copy()

    def staged(self, *new_records: FinanceRecord) -> List[FinanceRecord]:
        """The collection as it would be after appending `new_records`; nothing is applied."""
        with self.lock:
            return self._records + list(new_records)

    def commit(self, records: List[FinanceRecord]) -> None:
        """Install a collection that has already been written to storage."""
        with self.lock:
            self._records = records

    def __len__(self) -> int:
        return len(self._records)

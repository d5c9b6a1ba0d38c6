# salon/store.py

import logging
from datetime import datetime
from typing import Callable, List, Optional

from .availability import find_conflict
from .core import new_id, to_interval
from .data import APPOINTMENTS_KEY, FINANCES_KEY
from .errors import Conflict, NotFound
from .lifecycle import apply_transition
from .schemas import Appointment, AppointmentCreate, AppointmentStatus

logger = logging.getLogger(__name__)


class AppointmentStore:
    """Single source of truth for appointments.

    Every mutation builds the new collection, writes it to storage and only
    then swaps it in, so a failed write leaves memory untouched. The lock is
    shared with the finance ledger; conflict check and insert happen under it.
    """

    def __init__(self, storage, ledger, clock: Optional[Callable[[], datetime]] = None):
        self.storage = storage
        self.ledger = ledger
        self.lock = ledger.lock
        self.clock = clock or datetime.now
        self._appointments: List[Appointment] = []
        self.reload()

    def reload(self) -> None:
        with self.lock:
            raw = self.storage.load(APPOINTMENTS_KEY) or []
            self._appointments = [Appointment.model_validate(a) for a in raw]
            logger.info(f"Loaded {len(self._appointments)} appointments")

    def close(self) -> None:
        with self.lock:
            self._appointments = []

    # ---------- queries ----------

    def list(
        self,
        provider_id: Optional[str] = None,
        date: Optional[str] = None,
        status: Optional[AppointmentStatus] = None,
        sort_by_time: bool = False,
    ) -> List[Appointment]:
        with self.lock:
            result = list(self._appointments)
        if provider_id is not None:
            result = [a for a in result if a.provider_id == provider_id]
        if date is not None:
            result = [a for a in result if a.date == date]
        if status is not None:
            result = [a for a in result if a.status == status]
        if sort_by_time:
            result.sort(key=lambda a: (a.date, to_interval(a.time, a.duration_minutes).start))
        return [a.model_copy() for a in result]

    def get(self, appt_id: str) -> Appointment:
        with self.lock:
            return self._find(appt_id).model_copy()

    def _find(self, appt_id: str) -> Appointment:
        for a in self._appointments:
            if a.id == appt_id:
                return a
        raise NotFound("Appointment", appt_id)

    # ---------- mutations ----------

    def create(self, draft: AppointmentCreate) -> Appointment:
        # re-validate here, the draft may have been built without validation
        to_interval(draft.time, draft.duration_minutes)

        with self.lock:
            clash = find_conflict(
                self._appointments, draft.provider_id, draft.date, draft.time, draft.duration_minutes
            )
            if clash is not None:
                logger.warning(
                    f"Rejected booking for provider {draft.provider_id} on {draft.date} {draft.time}: "
                    f"overlaps appointment {clash.id}"
                )
                raise Conflict(clash.model_copy())

            now = self.clock()
            appt = Appointment(
                **draft.model_dump(),
                id=new_id(),
                status=AppointmentStatus.scheduled,
                finance_recorded=False,
                created_at=now,
                updated_at=now,
            )
            updated = self._appointments + [appt]
            self._persist(updated)
            self._appointments = updated

        logger.info(f"Created appointment {appt.id} for provider {appt.provider_id} on {appt.date} {appt.time}")
        return appt.model_copy()

    def update_status(
        self, appt_id: str, new_status: AppointmentStatus, changed_by: Optional[str] = None
    ) -> Appointment:
        with self.lock:
            current = self._find(appt_id)
            result = apply_transition(current, new_status, self.clock(), created_by=changed_by)

            updated = [result.appointment if a.id == appt_id else a for a in self._appointments]
            if result.finance_record is None:
                self._persist(updated)
                self._appointments = updated
            else:
                finances = self.ledger.staged(result.finance_record)
                self.storage.save_many({
                    APPOINTMENTS_KEY: [a.to_snapshot() for a in updated],
                    FINANCES_KEY: [r.to_snapshot() for r in finances],
                })
                self._appointments = updated
                self.ledger.commit(finances)
                logger.info(
                    f"Recorded income {result.finance_record.id} ({result.finance_record.amount}) "
                    f"for appointment {appt_id}"
                )

        return result.appointment.model_copy()

    def delete(self, appt_id: str) -> None:
        """Remove the appointment. Finance records derived from it are kept."""
        with self.lock:
            self._find(appt_id)
            updated = [a for a in self._appointments if a.id != appt_id]
            self._persist(updated)
            self._appointments = updated
        logger.info(f"Deleted appointment {appt_id}")

    def _persist(self, appointments: List[Appointment]) -> None:
        self.storage.save(APPOINTMENTS_KEY, [a.to_snapshot() for a in appointments])

    def __len__(self) -> int:
        return len(self._appointments)

# salon/lifecycle.py

import logging
from datetime import datetime
from typing import NamedTuple, Optional, Tuple

from .core import new_id
from .data import COMMON_OWNER
from .errors import IllegalTransition
from .schemas import Appointment, AppointmentStatus, FinanceRecord, FinanceType

logger = logging.getLogger(__name__)

SERVICE_CATEGORY = "service"

# completed and cancelled are status-locked; the record can only be deleted
ALLOWED_TRANSITIONS = {
    AppointmentStatus.scheduled: (AppointmentStatus.confirmed, AppointmentStatus.cancelled),
    AppointmentStatus.confirmed: (AppointmentStatus.completed, AppointmentStatus.cancelled),
    AppointmentStatus.completed: (),
    AppointmentStatus.cancelled: (),
}


class TransitionResult(NamedTuple):
    appointment: Appointment
    finance_record: Optional[FinanceRecord]


def allowed_transitions(status: AppointmentStatus) -> Tuple[AppointmentStatus, ...]:
    return ALLOWED_TRANSITIONS[status]


def can_transition(current: AppointmentStatus, new: AppointmentStatus) -> bool:
    return new in ALLOWED_TRANSITIONS[current]


def check_transition(current: AppointmentStatus, new: AppointmentStatus) -> None:
    if not can_transition(current, new):
        raise IllegalTransition(current, new)


def build_service_income(
    appt: Appointment, now: datetime, created_by: Optional[str] = None
) -> Optional[FinanceRecord]:
    """Income record for a completed appointment, or None once one was recorded."""
    if appt.finance_recorded:
        return None
    owner = appt.provider_id or COMMON_OWNER
    parts = [p for p in (appt.service_name, appt.client_name) if p]
    return FinanceRecord(
        id=new_id(),
        type=FinanceType.income,
        category=SERVICE_CATEGORY,
        amount=appt.price,
        description=" - ".join(parts) or f"Appointment {appt.id}",
        date=appt.date,
        owner=owner,
        created_by=created_by or appt.provider_id,
        created_at=now,
        appointment_id=appt.id,
    )


def apply_transition(
    appt: Appointment,
    new_status: AppointmentStatus,
    now: datetime,
    created_by: Optional[str] = None,
) -> TransitionResult:
    """Validate and apply a status change on a copy of `appt`.

    Entering `completed` yields the derived income record and marks the copy
    as financeRecorded in the same step. The input is never modified.
    """
    check_transition(appt.status, new_status)

    updates = {"status": new_status, "updated_at": now}
    record = None
    if new_status == AppointmentStatus.completed:
        record = build_service_income(appt, now, created_by)
        if record is not None:
            updates["finance_recorded"] = True

    updated = appt.model_copy(update=updates)
    logger.info(f"Appointment {appt.id}: {appt.status.value} -> {new_status.value}")
    return TransitionResult(updated, record)

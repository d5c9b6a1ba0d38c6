# salon/routers/finances_routes.py

from typing import List, Optional

from fastapi import APIRouter, Depends

from salon.auth import get_current_user
from salon.core import validate_date
from salon.data import COMMON_OWNER
from salon.deps import get_ledger, require_role
from salon.ledger import FinanceLedger
from salon.schemas import (
    FinanceRecord,
    FinanceRecordCreate,
    FinanceTotals,
    FinanceType,
    Provider,
    ProviderRole,
)

router = APIRouter(
    prefix="/finances",
    tags=["finances"],
)


def _visible_records(ledger, user, owner, type, date_from, date_to):
    for d in (date_from, date_to):
        if d is not None:
            validate_date(d)
    # providers see common records and their own; other owners are admin-only
    identities = (user.id, user.name)
    visible_to = None if user.role == ProviderRole.admin else identities
    if owner is not None and owner not in (COMMON_OWNER,) + identities:
        require_role(user, ProviderRole.admin.value)
    return ledger.list(
        owner=owner,
        type=type,
        date_from=date_from,
        date_to=date_to,
        visible_to=visible_to,
        newest_first=True,
    )


@router.get("", response_model=List[FinanceRecord])
def list_finances(
    owner: Optional[str] = None,
    type: Optional[FinanceType] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    ledger: FinanceLedger = Depends(get_ledger),
    current_user: Provider = Depends(get_current_user),
):
    return _visible_records(ledger, current_user, owner, type, date_from, date_to)


@router.get("/summary", response_model=FinanceTotals)
def finance_summary(
    owner: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    ledger: FinanceLedger = Depends(get_ledger),
    current_user: Provider = Depends(get_current_user),
):
    records = _visible_records(ledger, current_user, owner, None, date_from, date_to)
    return ledger.totals(records)


@router.get("/by-appointment/{appointment_id}", response_model=List[FinanceRecord])
def appointment_finances(
    appointment_id: str,
    ledger: FinanceLedger = Depends(get_ledger),
    current_user: Provider = Depends(get_current_user),
):
    return ledger.for_appointment(appointment_id)


@router.post("", response_model=FinanceRecord, status_code=201)
def add_finance_record(
    record: FinanceRecordCreate,
    ledger: FinanceLedger = Depends(get_ledger),
    current_user: Provider = Depends(get_current_user),
):
    if record.owner not in (COMMON_OWNER, current_user.id, current_user.name):
        require_role(current_user, ProviderRole.admin.value)
    return ledger.add(record, created_by=current_user.id)

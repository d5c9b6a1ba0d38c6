# salon/routers/appointments_routes.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response

from salon.auth import ProviderDirectory, get_current_user
from salon.core import validate_date
from salon.deps import get_providers, get_store
from salon.lifecycle import allowed_transitions
from salon.schemas import (
    Appointment,
    AppointmentCreate,
    AppointmentStatus,
    Provider,
    StatusUpdate,
    TransitionsPublic,
)
from salon.store import AppointmentStore

router = APIRouter(
    prefix="/appointments",
    tags=["appointments"],
)


@router.get("", response_model=List[Appointment])
def list_appointments(
    provider_id: Optional[str] = None,
    date: Optional[str] = None,
    status: Optional[AppointmentStatus] = None,
    sort: Optional[str] = None,
    store: AppointmentStore = Depends(get_store),
    current_user: Provider = Depends(get_current_user),
):
    if sort not in (None, "time"):
        raise HTTPException(status_code=422, detail="sort must be 'time'")
    if date is not None:
        validate_date(date)
    return store.list(provider_id=provider_id, date=date, status=status, sort_by_time=sort == "time")


@router.post("", response_model=Appointment, status_code=201)
def create_appointment(
    appt: AppointmentCreate,
    store: AppointmentStore = Depends(get_store),
    providers: ProviderDirectory = Depends(get_providers),
    current_user: Provider = Depends(get_current_user),
):
    provider = providers.get(appt.provider_id)
    if provider is None:
        raise HTTPException(status_code=422, detail="Unknown provider")
    if appt.provider_name is None:
        appt = appt.model_copy(update={"provider_name": provider.name})

    # Conflict surfaces as 409 through the app's exception handlers
    return store.create(appt)


@router.get("/{appt_id}", response_model=Appointment)
def get_appointment(
    appt_id: str,
    store: AppointmentStore = Depends(get_store),
    current_user: Provider = Depends(get_current_user),
):
    return store.get(appt_id)


@router.get("/{appt_id}/transitions", response_model=TransitionsPublic)
def list_transitions(
    appt_id: str,
    store: AppointmentStore = Depends(get_store),
    current_user: Provider = Depends(get_current_user),
):
    appt = store.get(appt_id)
    return {"id": appt.id, "status": appt.status, "allowed": list(allowed_transitions(appt.status))}


@router.patch("/{appt_id}/status", response_model=Appointment)
def change_status(
    appt_id: str,
    body: StatusUpdate,
    store: AppointmentStore = Depends(get_store),
    current_user: Provider = Depends(get_current_user),
):
    return store.update_status(appt_id, body.status, changed_by=current_user.id)


@router.patch("/{appt_id}/cancel", response_model=Appointment)
def cancel_appointment(
    appt_id: str,
    store: AppointmentStore = Depends(get_store),
    current_user: Provider = Depends(get_current_user),
):
    return store.update_status(appt_id, AppointmentStatus.cancelled, changed_by=current_user.id)


@router.delete("/{appt_id}", status_code=204)
def delete_appointment(
    appt_id: str,
    store: AppointmentStore = Depends(get_store),
    current_user: Provider = Depends(get_current_user),
):
    store.delete(appt_id)
    return Response(status_code=204)

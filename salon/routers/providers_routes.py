# salon/routers/providers_routes.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from salon.auth import ProviderDirectory, get_current_user
from salon.availability import classify_slots
from salon.core import validate_date
from salon.data import shop_settings
from salon.deps import get_providers, get_store
from salon.schemas import (
    Appointment,
    AppointmentCreate,
    AppointmentStatus,
    AvailabilityResponse,
    Provider,
    ProviderAppointmentCreate,
    ProviderPublic,
    SlotStatus,
)
from salon.store import AppointmentStore

router = APIRouter(
    prefix="/providers",
    tags=["providers"],
)


@router.get("", response_model=List[ProviderPublic])
def list_providers(providers: ProviderDirectory = Depends(get_providers)):
    return [
        {"id": p.id, "username": p.username, "name": p.name, "role": p.role}
        for p in providers.all()
    ]


@router.get("/me/appointments", response_model=List[Appointment])
def list_my_appointments(
    date: Optional[str] = None,
    status: Optional[AppointmentStatus] = None,
    store: AppointmentStore = Depends(get_store),
    current_user: Provider = Depends(get_current_user),
):
    if date is not None:
        validate_date(date)
    return store.list(provider_id=current_user.id, date=date, status=status, sort_by_time=True)


@router.post("/me/appointments", response_model=Appointment, status_code=201)
def book_my_appointment(
    appt: ProviderAppointmentCreate,
    store: AppointmentStore = Depends(get_store),
    current_user: Provider = Depends(get_current_user),
):
    draft = AppointmentCreate(
        **appt.model_dump(exclude={"provider_name"}),
        provider_id=current_user.id,
        provider_name=current_user.name,
    )
    return store.create(draft)


@router.get("/{provider_id}/availability", response_model=AvailabilityResponse)
def provider_availability(
    provider_id: str,
    date: str,
    duration: int = shop_settings["default_duration_minutes"],
    store: AppointmentStore = Depends(get_store),
    providers: ProviderDirectory = Depends(get_providers),
):
    # 1) Lookup provider
    if providers.get(provider_id) is None:
        raise HTTPException(status_code=404, detail="Provider Not Found")

    # 2) Validate input
    validate_date(date)
    if duration <= 0:
        raise HTTPException(status_code=422, detail="duration must be a positive number of minutes")

    # 3) Classify the grid against every booking of that day
    slots = classify_slots(store.list(date=date), date, provider_id, duration)

    return {
        "provider_id": provider_id,
        "date": date,
        "duration_minutes": duration,
        "slots": slots,
        "available_starts": [s.time for s in slots if s.status == SlotStatus.available],
    }

# salon/data.py

import os
from dataclasses import dataclass

from .core import parse_time

DB_URL = os.getenv("SALON_DB_URL", "sqlite:///./salon.db")

LOG_LEVEL = os.getenv("SALON_LOG_LEVEL", "INFO")

# Storage keys of the snapshot collections
APPOINTMENTS_KEY = "appointments"
FINANCES_KEY = "finances"
USERS_KEY = "users"

COMMON_OWNER = "common"

shop_settings = {
    "open_time": os.getenv("SALON_OPEN_TIME", "09:00"),
    "close_time": os.getenv("SALON_CLOSE_TIME", "20:30"),
    "slot_minutes": int(os.getenv("SALON_SLOT_MINUTES", "30")),
    # legacy records were saved without a duration
    "default_duration_minutes": 60,
}

FINANCE_CATEGORIES = {
    "income": ("service", "product"),
    "expense": ("rent", "water", "supplies", "equipment", "marketing", "other"),
}

# Seeded on first start, same staff as the mobile app shipped with
DEFAULT_PROVIDERS = [
    {"id": "1", "username": "anna", "password": "anna123", "name": "Анна", "role": "cosmetologist"},
    {"id": "2", "username": "maria", "password": "maria123", "name": "Мария", "role": "cosmetologist"},
]


@dataclass(frozen=True)
class ScheduleSettings:
    open_minute: int
    close_minute: int
    slot_minutes: int
    default_duration_minutes: int = 60

    @classmethod
    def from_dict(cls, settings: dict) -> "ScheduleSettings":
        return cls(
            open_minute=parse_time(settings["open_time"]),
            close_minute=parse_time(settings["close_time"]),
            slot_minutes=settings["slot_minutes"],
            default_duration_minutes=settings.get("default_duration_minutes", 60),
        )


def get_schedule_settings() -> ScheduleSettings:
    return ScheduleSettings.from_dict(shop_settings)

# salon/errors.py

class SalonError(Exception):
    """Base class for every error the scheduling core reports to its caller."""


class InvalidTimeFormat(SalonError, ValueError):
    def __init__(self, value):
        super().__init__(f"Invalid time '{value}', expected HH:MM (00:00-23:59)")
        self.value = value


class InvalidDuration(SalonError, ValueError):
    def __init__(self, value):
        super().__init__(f"Duration must be a positive number of minutes, got {value!r}")
        self.value = value


class InvalidDate(SalonError, ValueError):
    def __init__(self, value):
        super().__init__(f"Invalid date '{value}', expected YYYY-MM-DD")
        self.value = value


class Conflict(SalonError):
    """The candidate interval overlaps an active appointment.

    This is an expected outcome: the caller should pick a different time.
    """

    def __init__(self, existing):
        super().__init__(
            f"Time slot overlaps appointment {existing.id} "
            f"({existing.time}, {existing.duration_minutes} min)"
        )
        self.existing = existing


class IllegalTransition(SalonError):
    def __init__(self, current, requested):
        super().__init__(f"Cannot change status from '{current.value}' to '{requested.value}'")
        self.current = current
        self.requested = requested


class NotFound(SalonError):
    def __init__(self, kind: str, ident: str):
        super().__init__(f"{kind} not found")
        self.kind = kind
        self.ident = ident


class UnknownCategory(SalonError, ValueError):
    def __init__(self, record_type, category: str):
        super().__init__(f"Unknown {record_type.value} category '{category}'")
        self.category = category


class PersistenceError(SalonError):
    """Writing a snapshot to durable storage failed; nothing was applied in memory."""

    def __init__(self, keys, cause=None):
        super().__init__(f"Could not persist {', '.join(keys)}")
        self.keys = list(keys)
        self.cause = cause

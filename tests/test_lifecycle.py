from datetime import datetime

import pytest

from salon.errors import IllegalTransition
from salon.lifecycle import (
    ALLOWED_TRANSITIONS,
    allowed_transitions,
    apply_transition,
    build_service_income,
    can_transition,
)
from salon.schemas import AppointmentStatus, FinanceType

S = AppointmentStatus
LATER = datetime(2025, 3, 12, 18, 0)


class TestTransitionTable:

    def test_legal_moves(self):
        assert set(allowed_transitions(S.scheduled)) == {S.confirmed, S.cancelled}
        assert set(allowed_transitions(S.confirmed)) == {S.completed, S.cancelled}

    def test_terminal_states_are_locked(self):
        assert allowed_transitions(S.completed) == ()
        assert allowed_transitions(S.cancelled) == ()

    def test_every_status_has_an_entry(self):
        assert set(ALLOWED_TRANSITIONS) == set(S)

    @pytest.mark.parametrize(
        "current, new",
        [
            (S.cancelled, S.confirmed),
            (S.completed, S.scheduled),
            (S.completed, S.completed),
            (S.scheduled, S.completed),
            (S.scheduled, S.scheduled),
            (S.cancelled, S.cancelled),
        ],
    )
    def test_illegal(self, current, new):
        assert not can_transition(current, new)


class TestApplyTransition:

    def test_confirm_has_no_side_effect(self, make_appointment):
        appt = make_appointment(price=1200)
        result = apply_transition(appt, S.confirmed, LATER)
        assert result.appointment.status == S.confirmed
        assert result.appointment.updated_at == LATER
        assert result.finance_record is None
        assert appt.status == S.scheduled

    def test_complete_creates_income(self, make_appointment):
        appt = make_appointment(status="confirmed", price=1200, service_name="Peeling", client_name="Irina")
        result = apply_transition(appt, S.completed, LATER)

        record = result.finance_record
        assert result.appointment.finance_recorded is True
        assert record.type == FinanceType.income
        assert record.category == "service"
        assert record.amount == 1200
        assert record.appointment_id == appt.id
        assert record.owner == appt.provider_id
        assert record.date == appt.date
        assert "Peeling" in record.description
        assert appt.finance_recorded is False

    def test_complete_with_record_already_made(self, make_appointment):
        appt = make_appointment(status="confirmed", price=1200, finance_recorded=True)
        result = apply_transition(appt, S.completed, LATER)
        assert result.appointment.status == S.completed
        assert result.finance_record is None

    def test_build_income_is_idempotent(self, make_appointment):
        appt = make_appointment(status="confirmed", price=900)
        first = apply_transition(appt, S.completed, LATER)
        assert build_service_income(first.appointment, LATER) is None

    def test_common_owner_kept(self, make_appointment):
        appt = make_appointment(status="confirmed", provider_id="common", price=500)
        result = apply_transition(appt, S.completed, LATER)
        assert result.finance_record.owner == "common"

    def test_illegal_raises_without_mutation(self, make_appointment):
        appt = make_appointment(status="cancelled")
        with pytest.raises(IllegalTransition):
            apply_transition(appt, S.confirmed, LATER)
        assert appt.status == S.cancelled

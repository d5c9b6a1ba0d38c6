import pytest

from salon.errors import PersistenceError, UnknownCategory
from salon.ledger import FinanceLedger
from salon.schemas import FinanceRecordCreate, FinanceType


def _entry(type="expense", category="rent", amount=100.0, owner="common", date="2025-03-01", **extra):
    return FinanceRecordCreate(
        type=type, category=category, amount=amount, owner=owner, date=date,
        description=extra.pop("description", "March"), **extra
    )


class TestManualEntries:

    def test_add(self, ledger):
        record = ledger.add(_entry(), created_by="1")
        assert record.type == FinanceType.expense
        assert record.created_by == "1"
        assert record.appointment_id is None
        assert ledger.list() == [record]

    def test_date_defaults_to_today(self, ledger):
        record = ledger.add(_entry(date=None))
        assert record.date == "2025-03-10"

    def test_unknown_category(self, ledger):
        with pytest.raises(UnknownCategory):
            ledger.add(_entry(type="income", category="rent"))
        assert len(ledger) == 0

    def test_failed_write(self, storage, ledger):
        storage.fail_writes = True
        with pytest.raises(PersistenceError):
            ledger.add(_entry())
        assert len(ledger) == 0

    def test_persisted(self, storage, ledger):
        ledger.add(_entry())
        assert len(FinanceLedger(storage)) == 1


class TestQueries:

    @pytest.fixture
    def filled(self, ledger):
        ledger.add(_entry(amount=300, date="2025-03-01"))
        ledger.add(_entry(type="income", category="product", amount=1000, owner="1", date="2025-03-05"))
        ledger.add(_entry(type="expense", category="supplies", amount=50, owner="2", date="2025-03-07"))
        return ledger

    def test_visible_to_provider(self, filled):
        owners = {r.owner for r in filled.list(visible_to="1")}
        assert owners == {"common", "1"}

    def test_filters(self, filled):
        assert len(filled.list(type=FinanceType.income)) == 1
        assert len(filled.list(owner="2")) == 1
        assert [r.date for r in filled.list(date_from="2025-03-02", date_to="2025-03-06")] == ["2025-03-05"]

    def test_newest_first(self, filled):
        dates = [r.date for r in filled.list(newest_first=True)]
        assert dates == ["2025-03-07", "2025-03-05", "2025-03-01"]

    def test_totals(self, filled):
        totals = filled.totals(filled.list(visible_to="1"))
        assert totals.income == 1000
        assert totals.expenses == 300
        assert totals.profit == 700

    def test_visible_by_name(self, filled):
        filled.add(_entry(type="income", category="service", amount=200, owner="Анна", date="2025-03-08"))
        owners = {r.owner for r in filled.list(visible_to=("1", "Анна"))}
        assert owners == {"common", "1", "Анна"}
        assert "Анна" not in {r.owner for r in filled.list(visible_to="2")}

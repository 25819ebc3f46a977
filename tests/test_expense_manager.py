"""
Tests for ExpenseManager.

Covers participant and expense mutations, their validation order,
balance upkeep, persistence through a store and store failures.
"""
from datetime import datetime, timezone

import pytest

from errors import (
    CapacityExceeded,
    DuplicateName,
    InvalidAmount,
    InvalidDescription,
    InvalidName,
    LedgerError,
    NotFound,
    ParticipantInUse,
    PayerNotFound,
)
from expense_manager import ExpenseManager
from models import Expense
from storage import MemoryStore


class BrokenStore(MemoryStore):
    """Store whose writes always fail."""

    def save(self, key, state):
        raise OSError("disk full")

    def clear(self, key):
        raise OSError("read-only")


class UnreadableStore(MemoryStore):
    def load(self, key):
        raise ValueError("garbage")


class TestAddParticipant:
    """Tests for ExpenseManager.add_participant()."""

    def test_adds_with_zeroed_fields(self, manager):
        p = manager.add_participant("Alice")

        assert p.name == "Alice"
        assert p.id
        assert (p.total_paid, p.should_pay, p.balance) == (0.0, 0.0, 0.0)
        assert manager.participants == (p,)

    def test_fifth_succeeds_sixth_fails(self, manager):
        for name in ["A", "B", "C", "D", "E"]:
            manager.add_participant(name)

        with pytest.raises(CapacityExceeded):
            manager.add_participant("F")
        assert len(manager.participants) == 5

    def test_duplicate_name_rejected(self, manager):
        manager.add_participant("Alice")

        with pytest.raises(DuplicateName):
            manager.add_participant("Alice")
        with pytest.raises(DuplicateName):
            manager.add_participant("  Alice ")

    def test_names_are_case_sensitive(self, manager):
        manager.add_participant("Alice")
        manager.add_participant("alice")

        assert [p.name for p in manager.participants] == ["Alice", "alice"]

    def test_blank_name_rejected(self, manager):
        with pytest.raises(InvalidName):
            manager.add_participant("   ")
        assert manager.participants == ()

    def test_capacity_checked_before_name(self, manager):
        for name in ["A", "B", "C", "D", "E"]:
            manager.add_participant(name)

        with pytest.raises(CapacityExceeded):
            manager.add_participant("A")

    def test_ids_are_unique(self, manager):
        ids = {manager.add_participant(n).id for n in ["A", "B", "C", "D", "E"]}
        assert len(ids) == 5

    def test_new_participant_shares_existing_expenses(self, manager):
        a = manager.add_participant("A")
        manager.add_participant("B")
        manager.add_expense("Dinner", 90, a.id)

        c = manager.add_participant("C")

        assert c.should_pay == pytest.approx(30.0)
        assert c.balance == pytest.approx(-30.0)
        assert a.balance == pytest.approx(60.0)


class TestRemoveParticipant:
    """Tests for ExpenseManager.remove_participant()."""

    def test_removes_unused_participant(self, manager):
        a = manager.add_participant("A")
        b = manager.add_participant("B")

        manager.remove_participant(b.id)

        assert manager.participants == (a,)

    def test_in_use_rejected_and_expenses_untouched(self, trip):
        alice = trip.find_participant("Alice")
        before = trip.expenses

        with pytest.raises(ParticipantInUse):
            trip.remove_participant(alice.id)

        assert trip.expenses == before
        assert len(trip.participants) == 3

    def test_unknown_id_raises_not_found(self, manager):
        with pytest.raises(NotFound):
            manager.remove_participant("missing")

    def test_recomputes_share_for_remaining(self, manager):
        a = manager.add_participant("A")
        b = manager.add_participant("B")
        c = manager.add_participant("C")
        manager.add_expense("Hotel", 300, a.id)
        assert a.should_pay == pytest.approx(100.0)

        manager.remove_participant(c.id)

        assert a.should_pay == pytest.approx(150.0)
        assert a.balance == pytest.approx(150.0)
        assert b.balance == pytest.approx(-150.0)


class TestAddExpense:
    """Tests for ExpenseManager.add_expense()."""

    def test_adds_and_recomputes(self, manager):
        a = manager.add_participant("A")
        b = manager.add_participant("B")

        e = manager.add_expense("  Groceries ", 80, a.id, "  weekly ")

        assert e.description == "Groceries"
        assert e.note == "weekly"
        assert e.amount == 80.0
        assert e.paid_by == a.id
        assert e.timestamp.tzinfo is not None
        assert a.balance == pytest.approx(40.0)
        assert b.balance == pytest.approx(-40.0)

    def test_accepts_numeric_string(self, manager):
        a = manager.add_participant("A")
        assert manager.add_expense("Snacks", "12.5", a.id).amount == 12.5

    @pytest.mark.parametrize("amount", [0, -5, "abc", None, float("nan"), float("inf"), True])
    def test_invalid_amount(self, manager, amount):
        a = manager.add_participant("A")

        with pytest.raises(InvalidAmount):
            manager.add_expense("Thing", amount, a.id)
        assert manager.expenses == ()
        assert a.total_paid == 0.0

    def test_blank_description(self, manager):
        a = manager.add_participant("A")
        with pytest.raises(InvalidDescription):
            manager.add_expense("   ", 10, a.id)

    def test_unknown_payer(self, manager):
        manager.add_participant("A")
        with pytest.raises(PayerNotFound):
            manager.add_expense("Thing", 10, "nobody")
        assert manager.expenses == ()

    def test_validation_order(self, manager):
        with pytest.raises(InvalidDescription):
            manager.add_expense("", 0, "nobody")
        with pytest.raises(InvalidAmount):
            manager.add_expense("Thing", 0, "nobody")
        with pytest.raises(PayerNotFound):
            manager.add_expense("Thing", 1, "nobody")

    def test_errors_share_base_class(self, manager):
        with pytest.raises(LedgerError):
            manager.add_expense("", 1, "x")

    def test_insertion_order_kept(self, trip):
        assert [e.description for e in trip.expenses] == ["Lunch", "Drinks", "Taxi"]


class TestRemoveExpense:
    """Tests for ExpenseManager.remove_expense()."""

    def test_removes_and_recomputes(self, trip):
        lunch = trip.expenses[0]

        trip.remove_expense(lunch.id)

        assert [e.description for e in trip.expenses] == ["Drinks", "Taxi"]
        assert trip.find_participant("Alice").balance == pytest.approx(-350 / 3)

    def test_unknown_id_is_noop(self, trip):
        before = trip.expenses
        trip.remove_expense("missing")
        trip.remove_expense("missing")
        assert trip.expenses == before

    def test_removing_everything_zeroes_balances(self, trip):
        for e in trip.expenses:
            trip.remove_expense(e.id)

        for p in trip.participants:
            assert (p.total_paid, p.should_pay, p.balance) == (0.0, 0.0, 0.0)


class TestBalances:
    """Balance invariants and the three-friends scenario."""

    def test_scenario_balances(self, trip):
        alice, bob, charlie = trip.participants

        assert trip.total_expense() == 650.0
        assert trip.per_person_share() == pytest.approx(216.67, abs=0.01)
        assert alice.balance == pytest.approx(83.33, abs=0.01)
        assert bob.balance == pytest.approx(-66.67, abs=0.01)
        assert charlie.balance == pytest.approx(-16.67, abs=0.01)

    def test_balances_sum_to_zero(self, trip):
        assert abs(sum(p.balance for p in trip.participants)) < 0.01

    def test_calculate_balances_idempotent(self, trip):
        first = [(p.total_paid, p.should_pay, p.balance) for p in trip.participants]
        trip.calculate_balances()
        trip.calculate_balances()
        assert [(p.total_paid, p.should_pay, p.balance) for p in trip.participants] == first

    def test_transfer_suggestions(self, trip):
        transfers = trip.transfer_suggestions()

        assert [(t.from_name, t.to_name, t.amount) for t in transfers] == [
            ("Bob", "Alice", 67),
            ("Charlie", "Alice", 17),
        ]

    def test_transfer_suggestions_leave_live_balances_alone(self, trip):
        before = [p.balance for p in trip.participants]
        trip.transfer_suggestions()
        ExpenseManager.generate_transfer_suggestions(trip.participants)
        assert [p.balance for p in trip.participants] == before

    def test_snapshot_is_detached(self, trip):
        snap = trip.snapshot()
        snap.participants[0].balance = 0
        snap.expenses.clear()

        assert trip.participants[0].balance != 0
        assert len(trip.expenses) == 3
        assert snap.currency == trip.currency


class TestImportExpenses:
    """Tests for ExpenseManager.import_expenses()."""

    def test_appends_and_recomputes(self, trip):
        bob = trip.find_participant("Bob")
        ts = datetime(2024, 5, 1, tzinfo=timezone.utc)

        count = trip.import_expenses([Expense("x1", " Museum ", 100.0, bob.id, timestamp=ts)])

        assert count == 1
        assert trip.expenses[-1].description == "Museum"
        assert trip.expenses[-1].timestamp == ts
        assert trip.total_expense() == 750.0

    def test_invalid_record_rejects_whole_batch(self, trip):
        bob = trip.find_participant("Bob")
        batch = [Expense("x1", "Ok", 10.0, bob.id), Expense("x2", "Bad", 10.0, "ghost")]

        with pytest.raises(PayerNotFound):
            trip.import_expenses(batch)
        assert len(trip.expenses) == 3

    def test_replace(self, trip):
        bob = trip.find_participant("Bob")
        trip.import_expenses([Expense("x1", "Only", 30.0, bob.id)], replace=True)

        assert [e.description for e in trip.expenses] == ["Only"]
        assert bob.balance == pytest.approx(20.0)

    def test_colliding_ids_get_fresh_ones(self, trip):
        bob = trip.find_participant("Bob")
        existing = trip.expenses[0].id

        trip.import_expenses([Expense(existing, "Dup", 5.0, bob.id), Expense("", "Blank", 5.0, bob.id)])

        ids = [e.id for e in trip.expenses]
        assert len(set(ids)) == len(ids) == 5
        assert all(ids)


class TestCurrencyAndClear:
    """Tests for set_currency() and clear_all_data()."""

    def test_default_currency(self, manager):
        assert manager.currency == "TWD"

    def test_set_currency_does_not_touch_balances(self, trip):
        before = [p.balance for p in trip.participants]
        trip.set_currency("USD")
        assert trip.currency == "USD"
        assert [p.balance for p in trip.participants] == before

    def test_clear_all_data(self, trip, store):
        trip.set_currency("JPY")

        trip.clear_all_data()

        assert trip.participants == ()
        assert trip.expenses == ()
        assert trip.currency == "TWD"
        assert "expenseData" not in store


class TestPersistence:
    """State survives through the store and store failures are not fatal."""

    def test_reload_from_store(self, trip, store):
        trip.set_currency("USD")

        reloaded = ExpenseManager(store=store)

        assert [p.name for p in reloaded.participants] == ["Alice", "Bob", "Charlie"]
        assert [e.description for e in reloaded.expenses] == ["Lunch", "Drinks", "Taxi"]
        assert reloaded.currency == "USD"
        assert reloaded.find_participant("Alice").balance == pytest.approx(83.33, abs=0.01)
        assert reloaded.expenses[0].note == "team lunch"
        assert reloaded.expenses[0].timestamp == trip.expenses[0].timestamp

    def test_every_mutation_is_saved(self, manager, store):
        a = manager.add_participant("A")
        assert len(store.load("expenseData")["participants"]) == 1

        e = manager.add_expense("X", 10, a.id)
        assert store.load("expenseData")["expenses"][0]["paidBy"] == a.id

        manager.remove_expense(e.id)
        assert store.load("expenseData")["expenses"] == []

    def test_missing_fields_fall_back(self, store):
        store.save("expenseData", {"participants": [{"id": "1", "name": "Solo"}]})

        m = ExpenseManager(store=store)

        assert m.currency == "TWD"
        assert m.expenses == ()
        assert m.participants[0].name == "Solo"

    def test_custom_key(self, store):
        m = ExpenseManager(store=store, key="trip-2024")
        m.add_participant("A")
        assert "trip-2024" in store
        assert "expenseData" not in store

    def test_save_failure_keeps_memory_state(self):
        messages = []
        m = ExpenseManager(store=BrokenStore(), notify=lambda level, msg: messages.append((level, msg)))

        a = m.add_participant("A")
        m.add_expense("X", 10, a.id)

        assert len(m.expenses) == 1
        assert messages and all(level == "error" for level, _ in messages)
        assert "disk full" in messages[0][1]

    def test_clear_failure_still_clears_memory(self):
        m = ExpenseManager(store=BrokenStore())
        m.add_participant("A")

        m.clear_all_data()

        assert m.participants == ()

    def test_load_failure_starts_empty(self):
        messages = []
        m = ExpenseManager(store=UnreadableStore(), notify=lambda level, msg: messages.append(msg))

        assert m.participants == ()
        assert messages == ["Could not load data: garbage"]

    def test_without_store(self):
        m = ExpenseManager()
        a = m.add_participant("A")
        m.add_expense("X", 10, a.id)
        m.clear_all_data()
        assert m.expenses == ()

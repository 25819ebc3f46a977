import pytest

from expense_manager import ExpenseManager
from storage import MemoryStore


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def manager(store):
    return ExpenseManager(store=store)


@pytest.fixture
def trip(manager):
    """Alice, Bob and Charlie after three shared expenses (total 650)."""
    alice = manager.add_participant("Alice")
    bob = manager.add_participant("Bob")
    charlie = manager.add_participant("Charlie")
    manager.add_expense("Lunch", 300, alice.id, "team lunch")
    manager.add_expense("Drinks", 150, bob.id)
    manager.add_expense("Taxi", 200, charlie.id, "airport")
    return manager

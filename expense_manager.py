"""
Reconciliation engine for GroupSplit: owns participants and expenses,
validates every mutation, keeps balances current and proposes transfers.
"""
from __future__ import annotations
import copy
import logging
import os
from typing import Callable, Iterable, List, Optional, Tuple

from computations import (
    calculate_balances,
    generate_transfer_suggestions,
    per_person_share,
    total_expense,
)
from config import (
    DEFAULT_CURRENCY,
    MAX_PARTICIPANTS,
    STORAGE_KEY,
    Settings,
    dict_to_ledger,
    ledger_to_dict,
    load_settings,
)
from errors import (
    CapacityExceeded,
    DuplicateName,
    InvalidAmount,
    InvalidDescription,
    InvalidName,
    NotFound,
    ParticipantInUse,
    PayerNotFound,
)
from models import Expense, Ledger, Participant, Transfer
from storage import JsonFileStore, LedgerStore
from utils import app_dir, new_id, now_utc, safe_float, setup_logging

logger = logging.getLogger(__name__)

# notify(level, message); level is "info" or "error"
Notifier = Callable[[str, str], None]


class ExpenseManager:
    """
    Single-session ledger engine.

    Not thread-safe; callers serialize access. Store failures are logged and
    reported through ``notify`` but never undo an in-memory change.
    """

    def __init__(
        self,
        store: Optional[LedgerStore] = None,
        key: str = STORAGE_KEY,
        default_currency: str = DEFAULT_CURRENCY,
        notify: Optional[Notifier] = None,
    ):
        self.store = store
        self.key = key
        self.default_currency = default_currency
        self.notify = notify
        self._participants: List[Participant] = []
        self._expenses: List[Expense] = []
        self.currency = default_currency
        self.load_data()

    # ---------- Read accessors ----------
    @property
    def participants(self) -> Tuple[Participant, ...]:
        return tuple(self._participants)

    @property
    def expenses(self) -> Tuple[Expense, ...]:
        return tuple(self._expenses)

    def get_participant(self, participant_id: str) -> Optional[Participant]:
        return next((p for p in self._participants if p.id == participant_id), None)

    def find_participant(self, name: str) -> Optional[Participant]:
        """Exact, case-sensitive name lookup"""
        return next((p for p in self._participants if p.name == name), None)

    def total_expense(self) -> float:
        return total_expense(self._expenses)

    def per_person_share(self) -> float:
        return per_person_share(self._expenses, len(self._participants))

    def snapshot(self) -> Ledger:
        """Deep copy of the current state for exporters and other readers"""
        return Ledger(
            participants=copy.deepcopy(self._participants),
            expenses=copy.deepcopy(self._expenses),
            currency=self.currency,
        )

    def transfer_suggestions(self) -> List[Transfer]:
        return generate_transfer_suggestions(copy.deepcopy(self._participants))

    def to_dict(self) -> dict:
        return ledger_to_dict(Ledger(self._participants, self._expenses, self.currency))

    # ---------- Participants ----------
    def add_participant(self, name: str) -> Participant:
        if len(self._participants) >= MAX_PARTICIPANTS:
            raise CapacityExceeded(MAX_PARTICIPANTS)
        name = (name or "").strip()
        if not name:
            raise InvalidName()
        if self.find_participant(name) is not None:
            raise DuplicateName(name)

        participant = Participant(id=new_id(), name=name)
        self._participants.append(participant)
        # the divisor changed
        self.calculate_balances()
        logger.info("Added participant %s (%s)", name, participant.id)
        self.save_data()
        return participant

    def remove_participant(self, participant_id: str) -> None:
        participant = self.get_participant(participant_id)
        if participant is None:
            raise NotFound("Participant", participant_id)
        if any(e.paid_by == participant_id for e in self._expenses):
            raise ParticipantInUse(participant_id, participant.name)

        self._participants = [p for p in self._participants if p.id != participant_id]
        self.calculate_balances()
        logger.info("Removed participant %s (%s)", participant.name, participant_id)
        self.save_data()

    # ---------- Expenses ----------
    def _validate_expense(self, description: str, amount, paid_by: str) -> Tuple[str, float]:
        description = (description or "").strip()
        if not description:
            raise InvalidDescription()
        value = safe_float(amount, None)
        if value is None or value <= 0:
            raise InvalidAmount(amount)
        if self.get_participant(paid_by) is None:
            raise PayerNotFound(paid_by)
        return description, value

    def add_expense(self, description: str, amount, paid_by: str, note: str = "") -> Expense:
        description, value = self._validate_expense(description, amount, paid_by)

        expense = Expense(
            id=new_id(),
            description=description,
            amount=value,
            paid_by=paid_by,
            note=(note or "").strip(),
            timestamp=now_utc(),
        )
        self._expenses.append(expense)
        self.calculate_balances()
        logger.info("Added expense %r of %.2f paid by %s", description, value, paid_by)
        self.save_data()
        return expense

    def remove_expense(self, expense_id: str) -> None:
        """Remove an expense; unknown ids are ignored"""
        before = len(self._expenses)
        self._expenses = [e for e in self._expenses if e.id != expense_id]
        self.calculate_balances()
        if len(self._expenses) != before:
            logger.info("Removed expense %s", expense_id)
        self.save_data()

    def import_expenses(self, expenses: Iterable[Expense], replace: bool = False) -> int:
        """
        Bulk-load expenses (e.g. from CSV). All records are validated before
        anything changes; ids already in use get a fresh one.
        """
        incoming = []
        for e in expenses:
            description, value = self._validate_expense(e.description, e.amount, e.paid_by)
            incoming.append(Expense(
                id=e.id,
                description=description,
                amount=value,
                paid_by=e.paid_by,
                note=(e.note or "").strip(),
                timestamp=e.timestamp,
            ))

        kept = [] if replace else list(self._expenses)
        seen = {e.id for e in kept}
        for e in incoming:
            if not e.id or e.id in seen:
                e.id = new_id()
            seen.add(e.id)
        self._expenses = kept + incoming
        self.calculate_balances()
        logger.info("Imported %d expenses (%s)", len(incoming), "replace" if replace else "append")
        self.save_data()
        return len(incoming)

    # ---------- Balances ----------
    def calculate_balances(self) -> None:
        calculate_balances(self._participants, self._expenses)

    @staticmethod
    def generate_transfer_suggestions(participants: Iterable[Participant]) -> List[Transfer]:
        return generate_transfer_suggestions(participants)

    # ---------- Settings ----------
    def set_currency(self, label: str) -> None:
        self.currency = label
        logger.info("Currency set to %s", label)
        self.save_data()

    def clear_all_data(self) -> None:
        self._participants = []
        self._expenses = []
        self.currency = self.default_currency
        logger.info("Cleared all ledger data")
        if self.store is None:
            return
        try:
            self.store.clear(self.key)
        except Exception as ex:
            self._report_store_failure("clear", ex)

    # ---------- Persistence ----------
    def save_data(self) -> None:
        if self.store is None:
            return
        try:
            self.store.save(self.key, self.to_dict())
        except Exception as ex:
            self._report_store_failure("save", ex)

    def load_data(self) -> None:
        """Replace in-memory state with the stored ledger, if any"""
        if self.store is None:
            return
        try:
            data = self.store.load(self.key)
            ledger = dict_to_ledger(data) if data else None
        except Exception as ex:
            self._report_store_failure("load", ex)
            return
        if ledger is None:
            return
        self._participants = ledger.participants
        self._expenses = ledger.expenses
        self.currency = ledger.currency
        self.calculate_balances()
        logger.info(
            "Loaded ledger %s: %d participants, %d expenses",
            self.key, len(self._participants), len(self._expenses),
        )

    def _report_store_failure(self, action: str, ex: Exception) -> None:
        logger.exception("Failed to %s ledger %s", action, self.key)
        if self.notify is not None:
            self.notify("error", f"Could not {action} data: {ex}")


def create_manager(
    settings: Optional[Settings] = None,
    notify: Optional[Notifier] = None,
    configure_logging: bool = False,
) -> ExpenseManager:
    """Build an engine bound to the on-disk store described by settings"""
    if settings is None:
        settings = load_settings()
    if configure_logging:
        setup_logging(settings.log_level)
    data_dir = settings.data_dir or app_dir()
    store = JsonFileStore(os.path.expanduser(data_dir))
    return ExpenseManager(store=store, default_currency=settings.currency, notify=notify)

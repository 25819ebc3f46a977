"""
Exceptions raised by the GroupSplit ledger.

All validation failures derive from LedgerError so a caller can show
``str(exc)`` to the user and keep the previous state on screen.

    LedgerError
    ├── CapacityExceeded
    ├── DuplicateName
    ├── InvalidName
    ├── ParticipantInUse
    ├── NotFound
    ├── InvalidDescription
    ├── InvalidAmount
    ├── PayerNotFound
    └── StorageError
"""
from __future__ import annotations


class LedgerError(Exception):
    """Base class for ledger failures"""


class CapacityExceeded(LedgerError):
    def __init__(self, limit: int):
        super().__init__(f"At most {limit} participants are allowed")
        self.limit = limit


class DuplicateName(LedgerError):
    def __init__(self, name: str):
        super().__init__(f"Participant name already exists: {name}")
        self.name = name


class InvalidName(LedgerError):
    def __init__(self):
        super().__init__("Participant name is required")


class ParticipantInUse(LedgerError):
    def __init__(self, participant_id: str, name: str = ""):
        label = name or participant_id
        super().__init__(f"Participant {label} paid for recorded expenses and cannot be removed")
        self.participant_id = participant_id


class NotFound(LedgerError):
    def __init__(self, kind: str, item_id: str):
        super().__init__(f"{kind} not found: {item_id}")
        self.kind = kind
        self.item_id = item_id


class InvalidDescription(LedgerError):
    def __init__(self):
        super().__init__("Expense description is required")


class InvalidAmount(LedgerError):
    def __init__(self, amount):
        super().__init__(f"Amount must be a number greater than 0 (got {amount!r})")
        self.amount = amount


class PayerNotFound(LedgerError):
    def __init__(self, paid_by: str):
        super().__init__(f"Payer does not exist: {paid_by}")
        self.paid_by = paid_by


class StorageError(LedgerError):
    """Ledger store could not read or write state"""

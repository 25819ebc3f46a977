"""
Data models for GroupSplit
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import List

from utils import now_utc


@dataclass(eq=False)
class Participant:
    """Group member; derived fields are owned by the balance computation"""
    id: str
    name: str
    total_paid: float = 0.0
    should_pay: float = 0.0
    balance: float = 0.0  # total_paid - should_pay; >0 is owed money, <0 owes money

    def __eq__(self, other):
        if not isinstance(other, Participant):
            return NotImplemented
        return self.id == other.id

    def __hash__(self):
        return hash(("participant", self.id))


@dataclass(eq=False)
class Expense:
    """Single shared expense, split equally across all participants"""
    id: str
    description: str
    amount: float
    paid_by: str  # participant id
    note: str = ""
    timestamp: datetime = field(default_factory=now_utc)

    def __eq__(self, other):
        if not isinstance(other, Expense):
            return NotImplemented
        return self.id == other.id

    def __hash__(self):
        return hash(("expense", self.id))


@dataclass
class Transfer:
    """Suggested payment from a debtor to a creditor"""
    from_id: str
    to_id: str
    from_name: str
    to_name: str
    amount: int  # rounded to a whole currency unit
    exact_amount: float  # unrounded amount applied during settlement

    def to_dict(self) -> dict:
        return {
            "from": self.from_id,
            "to": self.to_id,
            "fromName": self.from_name,
            "toName": self.to_name,
            "amount": self.amount,
        }


@dataclass
class Ledger:
    """Complete ledger containing all data"""
    participants: List[Participant]
    expenses: List[Expense]
    currency: str = "TWD"
    version: int = 1

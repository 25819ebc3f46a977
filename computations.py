"""
Business logic and computations for GroupSplit
"""
from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Sequence

from config import EPSILON
from models import Expense, Participant, Transfer


def round_half_up(x: float) -> int:
    """Round to the nearest whole unit, halves away from zero"""
    return int(Decimal(repr(x)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def total_expense(expenses: Iterable[Expense]) -> float:
    """Sum of all expense amounts"""
    return sum(float(e.amount) for e in expenses)


def per_person_share(expenses: Sequence[Expense], participant_count: int) -> float:
    """Equal share of the total; 0 when nobody is there to share it"""
    if participant_count <= 0:
        return 0.0
    return total_expense(expenses) / participant_count


def balance_status(balance: float, eps: float = EPSILON) -> str:
    """Classify a balance: 'owed' (creditor), 'owes' (debtor) or 'settled'"""
    if balance > eps:
        return "owed"
    if balance < -eps:
        return "owes"
    return "settled"


def calculate_balances(participants: Sequence[Participant], expenses: Sequence[Expense]) -> None:
    """
    Recompute total_paid, should_pay and balance for every participant in place.

    Every expense is shared equally by all current participants. An expense whose
    payer is no longer a participant still counts toward the total, but is not
    credited to anyone.
    """
    for p in participants:
        p.total_paid = 0.0
        p.should_pay = 0.0
        p.balance = 0.0

    if not expenses or not participants:
        return

    per_person = per_person_share(expenses, len(participants))

    by_id: Dict[str, Participant] = {p.id: p for p in participants}
    for e in expenses:
        payer = by_id.get(e.paid_by)
        if payer is not None:
            payer.total_paid += float(e.amount)

    for p in participants:
        p.should_pay = per_person
        p.balance = p.total_paid - p.should_pay


def generate_transfer_suggestions(participants: Iterable[Participant], eps: float = EPSILON) -> List[Transfer]:
    """
    Compute transfers to settle debts.
    Greedy settlement: the largest debtor pays the largest creditor until one of
    them reaches zero, then the next in line takes over.

    Works on private copies of the balances; the given participants are not touched.
    Emitted amounts are rounded to whole units, but the unrounded amount is what
    gets subtracted from the running balances.
    """
    # [id, name, balance]
    working = [[p.id, p.name, float(p.balance)] for p in participants]
    creditors = [w for w in working if w[2] > eps]
    debtors = [w for w in working if w[2] < -eps]
    creditors.sort(key=lambda w: w[2], reverse=True)
    debtors.sort(key=lambda w: w[2])

    transfers = []
    i = j = 0
    while i < len(creditors) and j < len(debtors):
        creditor = creditors[i]
        debtor = debtors[j]
        x = min(creditor[2], abs(debtor[2]))
        if x > eps:
            transfers.append(Transfer(
                from_id=debtor[0],
                to_id=creditor[0],
                from_name=debtor[1],
                to_name=creditor[1],
                amount=round_half_up(x),
                exact_amount=x,
            ))
            creditor[2] -= x
            debtor[2] += x
        # <= so a residual of exactly eps cannot stall the walk
        if abs(creditor[2]) <= eps:
            i += 1
        if abs(debtor[2]) <= eps:
            j += 1

    return transfers

"""
Plain-text report export for GroupSplit
"""
from __future__ import annotations
from datetime import date, datetime
from typing import Optional, Sequence

from computations import (
    balance_status,
    generate_transfer_suggestions,
    per_person_share,
    total_expense,
)
from config import CURRENCY_SYMBOLS
from models import Expense, Participant
from utils import display_timestamp

STATUS_LABELS = {
    "owed": "is owed",
    "owes": "owes",
    "settled": "settled",
}


def format_currency(amount: float, currency: str) -> str:
    """Render abs(amount) with the currency symbol, or the raw label if unknown"""
    symbol = CURRENCY_SYMBOLS.get(currency, currency)
    return f"{symbol}{abs(amount):.2f}"


def default_report_filename(day: Optional[date] = None) -> str:
    day = day or date.today()
    return f"split-result_{day.isoformat()}.txt"


def export_to_text(
    participants: Sequence[Participant],
    expenses: Sequence[Expense],
    currency: str,
    exported_at: Optional[datetime] = None,
) -> str:
    """
    Build the settlement report:
    - expense list with payer and optional note
    - total and per-person share
    - paid / share / balance per participant
    - suggested transfers (omitted when already settled)
    """
    exported_at = exported_at or datetime.now()
    names = {p.id: p.name for p in participants}

    lines = [
        "=== Split Result ===",
        f"Exported at: {exported_at.strftime('%Y-%m-%d %H:%M:%S')}",
        f"Currency: {currency}",
        "",
        "--- Expenses ---",
    ]
    for n, e in enumerate(expenses, start=1):
        lines.append(f"{n}. {e.description}")
        lines.append(f"   Amount: {format_currency(e.amount, currency)}")
        lines.append(f"   Paid by: {names.get(e.paid_by, 'Unknown')}")
        if e.note:
            lines.append(f"   Note: {e.note}")
        lines.append(f"   Time: {display_timestamp(e.timestamp)}")
        lines.append("")

    lines.append(f"Total expense: {format_currency(total_expense(expenses), currency)}")
    lines.append(f"Per person: {format_currency(per_person_share(expenses, len(participants)), currency)}")
    lines.append("")

    lines.append("--- Balances ---")
    for p in participants:
        lines.append(f"{p.name}:")
        lines.append(f"  Paid: {format_currency(p.total_paid, currency)}")
        lines.append(f"  Share: {format_currency(p.should_pay, currency)}")
        status = STATUS_LABELS[balance_status(p.balance)]
        lines.append(f"  Balance: {format_currency(p.balance, currency)} ({status})")
        lines.append("")

    transfers = generate_transfer_suggestions(participants)
    if transfers:
        lines.append("--- Suggested Transfers ---")
        for n, t in enumerate(transfers, start=1):
            lines.append(f"{n}. {t.from_name} -> {t.to_name}: {format_currency(t.amount, currency)}")

    return "\n".join(lines) + "\n"


def write_text_report(
    filepath: str,
    participants: Sequence[Participant],
    expenses: Sequence[Expense],
    currency: str,
) -> None:
    """Write export_to_text output as UTF-8"""
    with open(filepath, "w", encoding="utf-8") as f:
        f.write(export_to_text(participants, expenses, currency))

"""
CSV export and import functionality for GroupSplit
"""
from __future__ import annotations
import csv
from typing import List, Sequence

from models import Expense
from utils import format_timestamp, now_utc, parse_timestamp, safe_float

CSV_COLUMNS = ["id", "timestamp", "description", "amount", "paid_by", "note"]


def export_expenses_to_csv(expenses: Sequence[Expense], filepath: str) -> None:
    """
    Export expenses list to CSV file
    CSV columns: id, timestamp, description, amount, paid_by, note
    """
    with open(filepath, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(CSV_COLUMNS)
        for e in expenses:
            writer.writerow([
                e.id,
                format_timestamp(e.timestamp),
                e.description,
                e.amount,
                e.paid_by,
                e.note,
            ])


def import_expenses_from_csv(filepath: str) -> List[Expense]:
    """
    Import expenses list from CSV file
    Returns list of Expense objects; validation is left to ExpenseManager.import_expenses
    """
    expenses = []

    with open(filepath, 'r', newline='', encoding='utf-8') as f:
        reader = csv.DictReader(f)

        for row in reader:
            ts = (row.get('timestamp') or '').strip()
            expense = Expense(
                id=(row.get('id') or '').strip(),
                description=row.get('description') or '',
                amount=safe_float(row.get('amount'), 0.0),
                paid_by=(row.get('paid_by') or '').strip(),
                note=row.get('note') or '',
                timestamp=parse_timestamp(ts) if ts else now_utc(),
            )
            expenses.append(expense)

    return expenses

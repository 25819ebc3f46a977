"""
Excel export functionality for GroupSplit
"""
from __future__ import annotations

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from models import Ledger
from computations import (
    balance_status,
    generate_transfer_suggestions,
    per_person_share,
    total_expense,
)
from utils import display_timestamp


def _style_header(ws, row=1):
    """Apply header styling to worksheet row"""
    header_font = Font(bold=True, color="FFFFFF")
    fill = PatternFill("solid", fgColor="4F81BD")
    align = Alignment(horizontal="center", vertical="center")
    thin = Side(style="thin", color="A0A0A0")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    for cell in ws[row]:
        cell.font = header_font
        cell.fill = fill
        cell.alignment = align
        cell.border = border


def _autosize_columns(ws, min_width=10, max_width=45):
    """Auto-size columns based on content"""
    for col in range(1, ws.max_column + 1):
        letter = get_column_letter(col)
        max_len = 0
        for cell in ws[letter]:
            v = cell.value
            if v is None:
                continue
            max_len = max(max_len, len(str(v)))
        ws.column_dimensions[letter].width = max(min_width, min(max_width, max_len + 2))


def export_excel(ledger: Ledger, filepath: str) -> None:
    """
    Export ledger to Excel file with sheets:
    - Expenses (in recorded order, with totals)
    - Summary (paid / share / balance per participant)
    - Transfers
    """
    wb = Workbook()
    # remove default sheet
    wb.remove(wb.active)

    names = {p.id: p.name for p in ledger.participants}

    ws = wb.create_sheet("Expenses")
    ws.append(["#", "Description", f"Amount ({ledger.currency})", "Paid by", "Note", "Time"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for n, e in enumerate(ledger.expenses, start=1):
        ws.append([n, e.description, float(e.amount), names.get(e.paid_by, "Unknown"),
                   e.note, display_timestamp(e.timestamp)])
    if ledger.expenses:
        last = ws.max_row
        ws.append(["", "TOTAL", f"=SUM(C2:C{last})"])
        ws.append(["", "PER PERSON", per_person_share(ledger.expenses, len(ledger.participants))])
        for r in (ws.max_row - 1, ws.max_row):
            ws.cell(r, 2).font = Font(bold=True)
    for r in range(2, ws.max_row + 1):
        ws.cell(r, 3).number_format = "0.00"
    _autosize_columns(ws)

    ws = wb.create_sheet("Summary")
    ws.append(["Participant", "Paid", "Share", "Balance", "Status"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for p in ledger.participants:
        ws.append([p.name, p.total_paid, p.should_pay, p.balance, balance_status(p.balance)])
    for r in range(2, ws.max_row + 1):
        for c in range(2, 5):
            ws.cell(r, c).number_format = "0.00"
    ws.append([])
    ws.append(["Total expense", total_expense(ledger.expenses)])
    ws.cell(ws.max_row, 1).font = Font(bold=True)
    ws.cell(ws.max_row, 2).number_format = "0.00"
    _autosize_columns(ws)

    ws = wb.create_sheet("Transfers")
    ws.append(["From (Debtor)", "To (Creditor)", "Amount"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for t in generate_transfer_suggestions(ledger.participants):
        ws.append([t.from_name, t.to_name, t.amount])
    _autosize_columns(ws)

    wb.save(filepath)

"""
Configuration and ledger serialization for GroupSplit
"""
from __future__ import annotations
import json
import logging
import os
from dataclasses import dataclass
from typing import Optional

from models import Expense, Ledger, Participant
from utils import app_dir, format_timestamp, now_utc, parse_timestamp, safe_float

MAX_PARTICIPANTS = 5
EPSILON = 0.01
DEFAULT_CURRENCY = "TWD"
STORAGE_KEY = "expenseData"
LEDGER_VERSION = 1

CURRENCY_SYMBOLS = {
    "TWD": "NT$",
    "USD": "$",
    "JPY": "¥",
    "HKD": "HK$",
    "CNY": "¥",
}

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    """User settings read from settings.json"""
    currency: str = DEFAULT_CURRENCY
    data_dir: Optional[str] = None  # None -> app_dir()
    log_level: str = "INFO"


def load_settings(path: Optional[str] = None) -> Settings:
    """Load settings from JSON file; missing file or keys fall back to defaults"""
    if path is None:
        path = os.path.join(app_dir(), "settings.json")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return Settings()
    if not isinstance(data, dict):
        logger.warning("Ignoring settings file %s: expected a JSON object", path)
        return Settings()
    return Settings(
        currency=str(data.get("currency") or DEFAULT_CURRENCY),
        data_dir=data.get("data_dir") or None,
        log_level=str(data.get("log_level") or "INFO").upper(),
    )


def get_default_ledger(currency: str = DEFAULT_CURRENCY) -> Ledger:
    """Create the empty ledger"""
    return Ledger(participants=[], expenses=[], currency=currency)


def participant_to_dict(p: Participant) -> dict:
    return {
        "id": p.id,
        "name": p.name,
        "totalPaid": p.total_paid,
        "shouldPay": p.should_pay,
        "balance": p.balance,
    }


def expense_to_dict(e: Expense) -> dict:
    return {
        "id": e.id,
        "description": e.description,
        "amount": float(e.amount),
        "paidBy": e.paid_by,
        "note": e.note,
        "timestamp": format_timestamp(e.timestamp),
    }


def dict_to_participant(d: dict) -> Participant:
    # derived fields are recomputed by the engine, not trusted from storage
    return Participant(id=str(d["id"]), name=str(d["name"]))


def dict_to_expense(d: dict) -> Expense:
    ts = d.get("timestamp")
    return Expense(
        id=str(d["id"]),
        description=str(d.get("description", "")),
        amount=safe_float(d.get("amount"), 0.0),
        paid_by=str(d.get("paidBy", "")),
        note=str(d.get("note") or ""),
        timestamp=parse_timestamp(ts) if ts else now_utc(),
    )


def ledger_to_dict(ledger: Ledger) -> dict:
    """Convert Ledger object to dictionary for JSON serialization"""
    return {
        "version": ledger.version,
        "participants": [participant_to_dict(p) for p in ledger.participants],
        "expenses": [expense_to_dict(e) for e in ledger.expenses],
        "currency": ledger.currency,
    }


def dict_to_ledger(d: dict) -> Ledger:
    """Convert dictionary from JSON to Ledger object"""
    return Ledger(
        version=d.get("version", LEDGER_VERSION),
        participants=[dict_to_participant(p) for p in d.get("participants") or []],
        expenses=[dict_to_expense(e) for e in d.get("expenses") or []],
        currency=d.get("currency") or DEFAULT_CURRENCY,
    )

"""
Utility functions for GroupSplit
"""
from __future__ import annotations
import logging
import math
import os
import sys
import uuid
from datetime import datetime, timezone
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def new_id() -> str:
    """Generate a collision-safe opaque identifier"""
    return uuid.uuid4().hex


def now_utc() -> datetime:
    """Current time as a timezone-aware UTC datetime"""
    return datetime.now(timezone.utc)


def format_timestamp(ts: datetime) -> str:
    """Serialize a datetime as ISO-8601"""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.isoformat()


def parse_timestamp(s: str) -> datetime:
    """Parse an ISO-8601 instant; a trailing 'Z' means UTC, naive values are taken as UTC"""
    s = s.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    ts = datetime.fromisoformat(s)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def display_timestamp(ts: datetime) -> str:
    """Local-time rendering used in reports"""
    return ts.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def safe_float(x, default: Optional[float] = 0.0) -> Optional[float]:
    """Convert to a finite float safely, returning default on error"""
    if isinstance(x, bool):
        return default
    try:
        v = float(x)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(v):
        return default
    return v


def app_dir() -> str:
    """
    Get application data directory: ~/.local/share/GroupSplit
    Creates directory if it doesn't exist.
    """
    base = os.path.expanduser("~/.local/share")
    path = os.path.join(base, "GroupSplit")
    os.makedirs(path, exist_ok=True)
    return path


def setup_logging(level=logging.INFO) -> logging.Logger:
    """Configure the root logger for console output; level may be a number or a name such as 'DEBUG'"""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    root.addHandler(handler)
    return root

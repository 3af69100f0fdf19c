# src/query_builder.py
from datetime import date, timedelta
from typing import Optional

from src.models import DateWindow


def build_query(keyword: str, extra_clause: Optional[str] = None,
                window: Optional[DateWindow] = None) -> str:
    """
    Compose the effective CSE query for one date window.

    keyword, then the extra clause (e.g. a `site:` dork), then
    `after:<date> before:<date>` when the window has both bounds.
    Dates are passed through verbatim.
    """
    query = keyword
    if extra_clause:
        query += f" {extra_clause}"
    if window is not None and window.is_bounded:
        query += f" after:{window.after} before:{window.before}"
    return query


def preset_window(days: int, today: Optional[date] = None) -> DateWindow:
    """Window covering the last `days` days up to today."""
    today = today or date.today()
    start = today - timedelta(days=days)
    return DateWindow(after=start.isoformat(), before=today.isoformat())

"""Aggregations feeding the dashboard cards, charts and exports.

Sessions are bucketed by the calendar date of their start in the viewer's
local timezone (``tz=None``); pass an explicit ``tz`` to pin it.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from typing import Iterable, Optional

from core.config import RECENT_ACTIVITY, TREND_DAYS
from core.domain import WORK_TYPES, AppSettings, AppState, Transaction, WorkSession
from core.earnings import calculate_session_earnings, session_hours
from core.transforms import closed_sessions, expense_transactions, income_transactions


@dataclass(frozen=True)
class DateBucket:
    day: date
    hours: float
    earnings: float


@dataclass(frozen=True)
class TypeTotals:
    type: str
    hours: float
    earnings: float


@dataclass(frozen=True)
class MonthlySummary:
    earnings: float
    hours: float
    income: float
    expense: float

    @property
    def balance(self) -> float:
        return self.earnings + self.income - self.expense

    @property
    def total_income(self) -> float:
        return self.earnings + self.income


def local_day(ts: datetime, tz: Optional[tzinfo] = None) -> date:
    return ts.astimezone(tz).date()


def earnings_by_date(
    sessions: Iterable[WorkSession],
    settings: AppSettings,
    limit: int = TREND_DAYS,
    tz: Optional[tzinfo] = None,
) -> list[DateBucket]:
    """Hours and earnings per local start date, last ``limit`` populated days, oldest first."""
    hours: dict[date, float] = defaultdict(float)
    earnings: dict[date, float] = defaultdict(float)

    for s in closed_sessions(tuple(sessions)):
        day = local_day(s.start_time, tz)
        hours[day] += session_hours(s)
        earnings[day] += calculate_session_earnings(s, settings)

    days = sorted(hours)[-limit:] if limit > 0 else []
    return [DateBucket(day=d, hours=hours[d], earnings=earnings[d]) for d in days]


def totals_by_type(sessions: Iterable[WorkSession], settings: AppSettings) -> list[TypeTotals]:
    hours: dict[str, float] = defaultdict(float)
    earnings: dict[str, float] = defaultdict(float)

    for s in closed_sessions(tuple(sessions)):
        hours[s.type] += session_hours(s)
        earnings[s.type] += calculate_session_earnings(s, settings)

    # known types in their canonical order, anything unexpected after them
    ordered = [t for t in WORK_TYPES if t in hours] + [t for t in hours if t not in WORK_TYPES]
    return [TypeTotals(type=t, hours=hours[t], earnings=earnings[t]) for t in ordered]


def expenses_by_category(trans: Iterable[Transaction]) -> dict[str, float]:
    totals: dict[str, float] = {}
    for t in expense_transactions(tuple(trans)):
        totals[t.category] = totals.get(t.category, 0) + t.amount
    return totals


def monthly_summary(state: AppState, now: datetime, tz: Optional[tzinfo] = None) -> MonthlySummary:
    """Dashboard cards for the calendar month containing ``now``."""
    today = local_day(now, tz)

    def in_month(d: date) -> bool:
        return d.year == today.year and d.month == today.month

    sessions = [s for s in closed_sessions(state.sessions) if in_month(local_day(s.start_time, tz))]
    transactions = tuple(t for t in state.transactions if in_month(t.date))

    return MonthlySummary(
        earnings=sum(calculate_session_earnings(s, state.settings) for s in sessions),
        hours=sum(session_hours(s) for s in sessions),
        income=sum(t.amount for t in income_transactions(transactions)),
        expense=sum(t.amount for t in expense_transactions(transactions)),
    )


def recent_sessions(state: AppState, limit: int = RECENT_ACTIVITY) -> tuple[WorkSession, ...]:
    return state.sessions[:limit]


def session_export_rows(state: AppState, tz: Optional[tzinfo] = None) -> list[dict]:
    rows = []
    for s in state.sessions:
        start = s.start_time.astimezone(tz)
        rows.append({
            "Date": start.strftime("%Y-%m-%d"),
            "Start": start.strftime("%H:%M:%S"),
            "End": s.end_time.astimezone(tz).strftime("%H:%M:%S") if s.end_time else "N/A",
            "Description": s.description,
            "Type": s.type,
            "Earnings": f"{calculate_session_earnings(s, state.settings):.2f}",
        })
    return rows

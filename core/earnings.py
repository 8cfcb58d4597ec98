"""Earnings calculator.

Pure functions over a session and the current settings; nothing here reads
the clock except through the ``now`` argument.
"""

from datetime import datetime

from core.domain import AppSettings, WorkSession

SECONDS_PER_HOUR = 3600


def session_hours(session: WorkSession) -> float:
    """Gross duration (end - start) in hours; 0 for an open session."""
    if session.end_time is None:
        return 0.0
    return (session.end_time - session.start_time).total_seconds() / SECONDS_PER_HOUR


def net_session_hours(session: WorkSession) -> float:
    """Duration minus break, floored at 0."""
    if session.end_time is None:
        return 0.0
    net_seconds = (session.end_time - session.start_time).total_seconds() - session.break_minutes * 60
    return max(0.0, net_seconds / SECONDS_PER_HOUR)


def effective_rate(session: WorkSession, settings: AppSettings) -> float:
    # legacy sessions have no snapshot; they follow the current rate
    return session.hourly_rate_snapshot or settings.hourly_rate


def multiplier_for(work_type: str, settings: AppSettings) -> float:
    multiplier = settings.multipliers.get(work_type)
    return 1 if multiplier is None else multiplier


def calculate_session_earnings(session: WorkSession, settings: AppSettings) -> float:
    """Net hours x rate x work-type multiplier. Unrounded."""
    if session.end_time is None:
        return 0.0
    return net_session_hours(session) * effective_rate(session, settings) * multiplier_for(session.type, settings)


def elapsed_seconds(session: WorkSession, now: datetime) -> float:
    """Running-timer value of a session; a closed session reports its full length."""
    end = session.end_time or now
    return max(0.0, (end - session.start_time).total_seconds())

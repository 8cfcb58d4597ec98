from dataclasses import replace
from datetime import datetime
from typing import Optional, Tuple

from core.config import DEFAULT_CATEGORY
from core.domain import (
    AppSettings,
    AppState,
    EXPENSE,
    INCOME,
    Transaction,
    WorkSession,
)


def default_state() -> AppState:
    return AppState(settings=AppSettings())


def prepend_session(state: AppState, s: WorkSession, active: bool = False) -> AppState:
    return replace(
        state,
        sessions=(s,) + state.sessions,
        active_session_id=s.id if active else state.active_session_id,
    )


def close_session(state: AppState, session_id: str, end_time: datetime) -> AppState:
    return replace(
        state,
        sessions=tuple(
            replace(s, end_time=end_time) if s.id == session_id else s
            for s in state.sessions
        ),
        active_session_id=None if state.active_session_id == session_id else state.active_session_id,
    )


def remove_session(state: AppState, session_id: str) -> AppState:
    return replace(
        state,
        sessions=tuple(s for s in state.sessions if s.id != session_id),
        active_session_id=None if state.active_session_id == session_id else state.active_session_id,
    )


def prepend_transaction(state: AppState, t: Transaction) -> AppState:
    return replace(state, transactions=(t,) + state.transactions)


def remove_transaction(state: AppState, transaction_id: str) -> AppState:
    return replace(
        state,
        transactions=tuple(t for t in state.transactions if t.id != transaction_id),
    )


def merge_settings(state: AppState, **changes) -> AppState:
    # shallow: a supplied ``multipliers`` mapping replaces the whole mapping;
    # it is copied so the caller keeps no handle on the stored dict
    if "multipliers" in changes:
        changes["multipliers"] = dict(changes["multipliers"])
    return replace(state, settings=replace(state.settings, **changes))


def normalize_category(category: Optional[str]) -> str:
    return (category or "").strip() or DEFAULT_CATEGORY


def closed_sessions(sessions: Tuple[WorkSession, ...]) -> Tuple[WorkSession, ...]:
    return tuple(filter(lambda s: s.end_time is not None, sessions))


def income_transactions(trans: Tuple[Transaction, ...]) -> Tuple[Transaction, ...]:
    return tuple(filter(lambda t: t.type == INCOME, trans))


def expense_transactions(trans: Tuple[Transaction, ...]) -> Tuple[Transaction, ...]:
    return tuple(filter(lambda t: t.type == EXPENSE, trans))

"""Application store.

``AppStore`` owns one ``AppState`` and is its only writer. Each operation
replaces the state with a new immutable value and publishes ``STATE_CHANGED``;
the persistence handler subscribed on the bus writes the whole state before
the operation returns. Nothing here is a module-level singleton: the dashboard
keeps its store in ``st.session_state`` and tests build their own.
"""

from datetime import date, datetime, timezone
from typing import Callable, Optional
from uuid import uuid4

from core.domain import NORMAL, AppState, Transaction, WorkSession
from core.events import (
    EventBus,
    SESSION_ADDED,
    SESSION_DELETED,
    SESSION_STARTED,
    SESSION_STOPPED,
    SETTINGS_UPDATED,
    STATE_CHANGED,
    TRANSACTION_ADDED,
    TRANSACTION_DELETED,
    register_default_handlers,
)
from core.functional import (
    Either,
    Right,
    find_session,
    validate_description,
    validate_interval,
    validate_work_type,
)
from core.log import get_logger
from core.persistence import StorageBackend, load_state
from core import transforms

logger = get_logger("store")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def generate_id() -> str:
    return uuid4().hex[:12]


class AppStore:

    def __init__(
        self,
        storage: StorageBackend,
        bus: Optional[EventBus] = None,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self._storage = storage
        self._bus = bus or EventBus()
        self._clock = clock or utc_now
        self._new_id = id_factory or generate_id
        self._state = load_state(storage)
        register_default_handlers(self._bus, storage)

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def bus(self) -> EventBus:
        return self._bus

    def _commit(self, new_state: AppState, event: str, payload: dict) -> None:
        if new_state == self._state:
            return
        self._state = new_state
        self._bus.publish(STATE_CHANGED, {"state": new_state})
        self._bus.publish(event, payload)

    def update_settings(self, **changes) -> None:
        """Shallow-merge ``changes`` into the settings. Values are not validated."""
        self._commit(
            transforms.merge_settings(self._state, **changes),
            SETTINGS_UPDATED,
            {"fields": sorted(changes)},
        )

    def start_session(self, description: str, work_type: str = NORMAL) -> Either[dict, WorkSession]:
        """Start the timer on a new session.

        A session that is still running is stopped first, at the same instant,
        so there is never more than one open session.
        """
        checked = validate_description(description).bind(
            lambda text: validate_work_type(work_type).map(lambda _: text)
        )
        if checked.is_left():
            logger.info(f"Rejected session start: {checked.get_error()['error']}")
            return checked

        now = self._clock()
        if self._state.active_session_id is not None:
            self.stop_session(now)

        session = WorkSession(
            id=self._new_id(),
            start_time=now,
            end_time=None,
            break_minutes=0,
            type=work_type,
            hourly_rate_snapshot=self._state.settings.hourly_rate,
            description=checked.get_or_else(description),
        )
        self._commit(
            transforms.prepend_session(self._state, session, active=True),
            SESSION_STARTED,
            {"id": session.id, "type": session.type},
        )
        return Right(session)

    def stop_session(self, at: Optional[datetime] = None) -> Optional[WorkSession]:
        """Close the active session; returns it, or None when nothing is running."""
        active = find_session(self._state.sessions, self._state.active_session_id)
        if active.is_none():
            return None

        session_id = active.get_or_else(None).id
        end = at or self._clock()
        self._commit(
            transforms.close_session(self._state, session_id, end),
            SESSION_STOPPED,
            {"id": session_id},
        )
        return find_session(self._state.sessions, session_id).get_or_else(None)

    def add_manual_session(
        self,
        start_time: datetime,
        end_time: datetime,
        description: str,
        work_type: str = NORMAL,
        break_minutes: float = 0,
    ) -> Either[dict, WorkSession]:
        """Record a backdated, already closed session. It never becomes active."""
        checked = (
            validate_description(description)
            .bind(lambda text: validate_work_type(work_type).map(lambda _: text))
            .bind(lambda text: validate_interval(start_time, end_time, break_minutes).map(lambda _: text))
        )
        if checked.is_left():
            logger.info(f"Rejected manual session: {checked.get_error()['error']}")
            return checked

        session = WorkSession(
            id=self._new_id(),
            start_time=start_time,
            end_time=end_time,
            break_minutes=break_minutes,
            type=work_type,
            hourly_rate_snapshot=self._state.settings.hourly_rate,
            description=checked.get_or_else(description),
        )
        self._commit(
            transforms.prepend_session(self._state, session),
            SESSION_ADDED,
            {"id": session.id, "type": session.type},
        )
        return Right(session)

    def delete_session(self, session_id: str) -> None:
        # also clears the active pointer when the running session is deleted
        self._commit(
            transforms.remove_session(self._state, session_id),
            SESSION_DELETED,
            {"id": session_id},
        )

    def add_transaction(
        self,
        type: str,
        amount: float,
        category: str,
        date: date,
        description: str = "",
    ) -> Transaction:
        t = Transaction(
            id=self._new_id(),
            type=type,
            amount=amount,
            category=transforms.normalize_category(category),
            date=date,
            description=description,
        )
        self._commit(
            transforms.prepend_transaction(self._state, t),
            TRANSACTION_ADDED,
            {"id": t.id, "type": t.type, "amount": t.amount},
        )
        return t

    def delete_transaction(self, transaction_id: str) -> None:
        self._commit(
            transforms.remove_transaction(self._state, transaction_id),
            TRANSACTION_DELETED,
            {"id": transaction_id},
        )

from typing import Callable, Dict, List, NamedTuple
from datetime import datetime

from core.log import get_logger
from core.persistence import save_state

__all__ = [
    'Event', 'EventBus',
    'STATE_CHANGED', 'SESSION_STARTED', 'SESSION_STOPPED', 'SESSION_ADDED', 'SESSION_DELETED',
    'TRANSACTION_ADDED', 'TRANSACTION_DELETED', 'SETTINGS_UPDATED',
    'persist_state_handler', 'log_event_handler', 'register_default_handlers',
]

logger = get_logger("events")


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event, dict], dict]


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        handlers = self._subscribers.get(name)
        if not handlers:
            return []

        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        return [handler(event, payload) for handler in list(handlers)]

    def unsubscribe(self, name: str, handler: Handler) -> None:
        if handler in self._subscribers.get(name, []):
            self._subscribers[name].remove(handler)


STATE_CHANGED = "STATE_CHANGED"
SESSION_STARTED = "SESSION_STARTED"
SESSION_STOPPED = "SESSION_STOPPED"
SESSION_ADDED = "SESSION_ADDED"
SESSION_DELETED = "SESSION_DELETED"
TRANSACTION_ADDED = "TRANSACTION_ADDED"
TRANSACTION_DELETED = "TRANSACTION_DELETED"
SETTINGS_UPDATED = "SETTINGS_UPDATED"

DOMAIN_EVENTS = (
    SESSION_STARTED,
    SESSION_STOPPED,
    SESSION_ADDED,
    SESSION_DELETED,
    TRANSACTION_ADDED,
    TRANSACTION_DELETED,
    SETTINGS_UPDATED,
)


def persist_state_handler(storage) -> Handler:
    """Build the STATE_CHANGED handler that writes the whole state to ``storage``."""
    def handler(event: Event, payload: dict) -> dict:
        # the in-memory state stays current; the next successful write catches up
        try:
            size = save_state(storage, payload["state"])
        except OSError as e:
            logger.warning(f"Could not persist state: {e!r}")
            return {"persisted": False, "error": str(e)}
        return {"persisted": True, "bytes": size}

    return handler


def log_event_handler(event: Event, payload: dict) -> dict:
    details = ", ".join(f"{k}={v}" for k, v in payload.items())
    logger.info(f"{event.name}: {details}")
    return {"logged": True}


def register_default_handlers(bus: EventBus, storage) -> None:
    bus.subscribe(STATE_CHANGED, persist_state_handler(storage))
    for name in DOMAIN_EVENTS:
        bus.subscribe(name, log_event_handler)

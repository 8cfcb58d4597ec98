"""Persistence adapter.

The whole ``AppState`` is stored as one JSON blob under ``STORAGE_KEY``, the
same way a browser app would keep it in local storage. Field names on disk use
the camelCase wire spelling.
"""

import json
from abc import ABC, abstractmethod
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Optional

from core.config import STORAGE_KEY
from core.domain import WORK_TYPES, AppSettings, AppState, Transaction, WorkSession
from core.log import get_logger
from core.transforms import default_state

logger = get_logger("persistence")


class StorageBackend(ABC):
    """Minimal key/value interface modelled on ``localStorage``."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        pass


class MemoryStorage(StorageBackend):

    def __init__(self, items: Optional[dict] = None):
        self.items: dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value


class JsonFileStorage(StorageBackend):
    """One ``<key>.json`` file per key inside ``directory``."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(path)


def parse_timestamp(value: str) -> datetime:
    # JS toISOString() ends in "Z"; fromisoformat only accepts it on 3.11+
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    ts = datetime.fromisoformat(value)
    # naive values are taken as UTC so they can be compared with the clock
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def parse_day(value: str) -> date:
    # older blobs store the full ISO timestamp of midnight
    return date.fromisoformat(value[:10])


def session_to_dict(s: WorkSession) -> dict[str, Any]:
    data = {
        "id": s.id,
        "startTime": s.start_time.isoformat(),
        "breakDurationMinutes": s.break_minutes,
        "type": s.type,
        "hourlyRateSnapshot": s.hourly_rate_snapshot,
        "description": s.description,
    }
    if s.end_time is not None:
        data["endTime"] = s.end_time.isoformat()
    return data


def session_from_dict(data: dict[str, Any]) -> WorkSession:
    end = data.get("endTime")
    snapshot = data.get("hourlyRateSnapshot")
    return WorkSession(
        id=str(data["id"]),
        start_time=parse_timestamp(data["startTime"]),
        end_time=parse_timestamp(end) if end else None,
        break_minutes=data.get("breakDurationMinutes", 0),
        type=data["type"],
        hourly_rate_snapshot=snapshot,
        description=data.get("description", ""),
    )


def transaction_to_dict(t: Transaction) -> dict[str, Any]:
    return {
        "id": t.id,
        "type": t.type,
        "amount": t.amount,
        "category": t.category,
        "date": t.date.isoformat(),
        "description": t.description,
    }


def transaction_from_dict(data: dict[str, Any]) -> Transaction:
    return Transaction(
        id=str(data["id"]),
        type=data["type"],
        amount=data["amount"],
        category=data["category"],
        date=parse_day(data["date"]),
        description=data.get("description", ""),
    )


def settings_to_dict(settings: AppSettings) -> dict[str, Any]:
    return {
        "currency": settings.currency,
        "hourlyRate": settings.hourly_rate,
        "multipliers": dict(settings.multipliers),
        "darkMode": settings.dark_mode,
    }


def settings_from_dict(data: dict[str, Any]) -> AppSettings:
    multipliers = data["multipliers"]
    missing = [k for k in WORK_TYPES if k not in multipliers]
    if missing:
        raise ValueError(f"multipliers missing keys: {missing}")
    return AppSettings(
        currency=data["currency"],
        hourly_rate=data["hourlyRate"],
        multipliers=dict(multipliers),
        dark_mode=bool(data.get("darkMode", False)),
    )


def state_to_dict(state: AppState) -> dict[str, Any]:
    return {
        "sessions": [session_to_dict(s) for s in state.sessions],
        "transactions": [transaction_to_dict(t) for t in state.transactions],
        "settings": settings_to_dict(state.settings),
        "activeSessionId": state.active_session_id,
    }


def state_from_dict(data: dict[str, Any]) -> AppState:
    sessions = tuple(session_from_dict(s) for s in data["sessions"])
    active_id = data.get("activeSessionId")
    if active_id is not None and not any(s.id == active_id and s.is_open for s in sessions):
        logger.warning(f"Dropping active session pointer {active_id!r}: no open session with that id")
        active_id = None
    return AppState(
        sessions=sessions,
        transactions=tuple(transaction_from_dict(t) for t in data["transactions"]),
        settings=settings_from_dict(data["settings"]),
        active_session_id=active_id,
    )


def dumps_state(state: AppState) -> str:
    return json.dumps(state_to_dict(state), ensure_ascii=False)


def loads_state(blob: str) -> AppState:
    return state_from_dict(json.loads(blob))


def load_state(storage: StorageBackend, key: str = STORAGE_KEY) -> AppState:
    """Restore the saved state, falling back to the default state.

    Missing or malformed data never raises; it is logged and replaced.
    """
    blob = storage.get_item(key)
    if not blob:
        logger.info("No saved state found, starting with defaults")
        return default_state()
    try:
        state = loads_state(blob)
    except (ValueError, KeyError, TypeError, AttributeError, RecursionError) as e:
        logger.warning(f"Failed to load saved state, using defaults: {e!r}")
        return default_state()
    logger.info(f"Loaded state: {len(state.sessions)} sessions, {len(state.transactions)} transactions")
    return state


def save_state(storage: StorageBackend, state: AppState, key: str = STORAGE_KEY) -> int:
    """Write the whole state; returns the size of the blob."""
    blob = dumps_state(state)
    storage.set_item(key, blob)
    logger.debug(f"Persisted state ({len(blob)} chars)")
    return len(blob)

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from core.config import DEFAULT_CURRENCY, DEFAULT_HOURLY_RATE, DEFAULT_MULTIPLIERS

NORMAL = "normal"
EXTRA = "extra"
NIGHT = "night"
HOLIDAY = "holiday"
WORK_TYPES = (NORMAL, EXTRA, NIGHT, HOLIDAY)

INCOME = "income"
EXPENSE = "expense"
TRANSACTION_TYPES = (INCOME, EXPENSE)


@dataclass(frozen=True)
class WorkSession:
    id: str
    start_time: datetime
    end_time: Optional[datetime] = None         # None while the timer runs
    break_minutes: float = 0
    type: str = NORMAL
    hourly_rate_snapshot: Optional[float] = None  # None on legacy records
    description: str = ""

    @property
    def is_open(self) -> bool:
        return self.end_time is None


@dataclass(frozen=True)
class Transaction:
    id: str
    type: str        # income / expense
    amount: float
    category: str
    date: date
    description: str = ""


@dataclass(frozen=True)
class AppSettings:
    currency: str = DEFAULT_CURRENCY
    hourly_rate: float = DEFAULT_HOURLY_RATE
    multipliers: dict = field(default_factory=lambda: dict(DEFAULT_MULTIPLIERS))
    dark_mode: bool = False


@dataclass(frozen=True)
class AppState:
    """Aggregate root. Both collections are ordered newest first."""

    sessions: tuple[WorkSession, ...] = ()
    transactions: tuple[Transaction, ...] = ()
    settings: AppSettings = field(default_factory=AppSettings)
    active_session_id: Optional[str] = None

    @property
    def active_session(self) -> Optional[WorkSession]:
        if self.active_session_id is None:
            return None
        return next((s for s in self.sessions if s.id == self.active_session_id), None)

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Generic, Optional, TypeVar

from core.domain import WORK_TYPES, WorkSession

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self._value))

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_some(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Nothing()

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):
    """Result of a store operation that validates its input.

    ``Right`` carries the created value, ``Left`` an error dict with at least
    ``error`` (machine code) and ``message`` (shown to the user).
    """

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    def is_left(self) -> bool:
        return not self.is_right()

    @abstractmethod
    def get_error(self) -> E:
        pass


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Right(f(self._value))

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return self

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return self

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def find_session(sessions: tuple[WorkSession, ...], session_id: Optional[str]) -> Maybe[WorkSession]:
    for s in sessions:
        if s.id == session_id:
            return Some(s)
    return Nothing()


def validate_description(description: str) -> Either[dict, str]:
    text = (description or "").strip()
    if not text:
        return Left({
            "error": "empty_description",
            "message": "Please add a description for the work.",
        })
    return Right(text)


def validate_work_type(work_type: str) -> Either[dict, str]:
    if work_type not in WORK_TYPES:
        return Left({
            "error": "unknown_work_type",
            "message": f"Unknown work type '{work_type}'",
            "work_type": work_type,
        })
    return Right(work_type)


def validate_interval(
    start_time: datetime,
    end_time: datetime,
    break_minutes: float,
) -> Either[dict, tuple[datetime, datetime, float]]:
    if end_time < start_time:
        return Left({
            "error": "end_before_start",
            "message": "The session cannot end before it starts.",
            "start_time": start_time,
            "end_time": end_time,
        })
    if break_minutes < 0:
        return Left({
            "error": "negative_break",
            "message": "Break duration cannot be negative.",
            "break_minutes": break_minutes,
        })
    return Right((start_time, end_time, break_minutes))

from datetime import date

from babel.dates import format_date
from babel.numbers import format_currency as babel_format_currency

from core.config import DEFAULT_CURRENCY, DISPLAY_LOCALE


def format_currency(amount: float, currency: str = DEFAULT_CURRENCY) -> str:
    return babel_format_currency(amount, currency, locale=DISPLAY_LOCALE)


def format_duration(seconds: float) -> str:
    """HH:MM:SS; hours keep growing past 24."""
    total = int(max(0, seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_day(day: date) -> str:
    return format_date(day, format="short", locale=DISPLAY_LOCALE)


def format_hours(hours: float) -> str:
    return f"{hours:.1f}h"

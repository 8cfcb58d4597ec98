import os
from pathlib import Path

APP_NAME = "FreeFlow"

# single local-storage entry holding the whole serialized state
STORAGE_KEY = "freeflow_data_v1"

DISPLAY_LOCALE = "pt_BR"

DEFAULT_CURRENCY = "BRL"
DEFAULT_HOURLY_RATE = 50.0
DEFAULT_MULTIPLIERS = {
    "normal": 1.0,
    "extra": 1.5,
    "night": 1.2,
    "holiday": 2.0,
}
DEFAULT_CATEGORY = "General"

SUPPORTED_CURRENCIES = {
    "BRL": "Real (BRL)",
    "USD": "Dollar (USD)",
    "EUR": "Euro (EUR)",
}

WORK_TYPE_LABELS = {
    "normal": "Normal",
    "extra": "Overtime",
    "night": "Night shift",
    "holiday": "Holiday",
}

TREND_DAYS = 14
RECENT_ACTIVITY = 3
TIMER_REFRESH_SECONDS = 1


def default_data_dir() -> Path:
    """Per-user directory for the state file and logs."""
    if os.name == "nt":
        base = Path(os.environ.get("LOCALAPPDATA", Path.home() / "AppData" / "Local"))
    else:
        base = Path.home() / ".config"
    return base / APP_NAME

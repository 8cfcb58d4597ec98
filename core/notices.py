"""One-shot notices that survive a script rerun.

A message shown right before ``st.rerun()`` is wiped by the rerun, so it is
parked in the session state instead and shown on the next pass.
"""

from typing import MutableMapping, Optional

NOTICE_KEY = "flash_notice"


def push_notice(session: MutableMapping, message: str) -> None:
    session[NOTICE_KEY] = message


def pop_notice(session: MutableMapping) -> Optional[str]:
    return session.pop(NOTICE_KEY, None)

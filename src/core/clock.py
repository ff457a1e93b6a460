"""UTC clock used for timestamps and expiry checks.

Managers accept an optional ``clock`` callable so tests can pin time.
"""

from datetime import datetime
from typing import Callable

import pytz

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(pytz.utc)

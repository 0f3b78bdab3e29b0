"""Wall-clock access in the configured business timezone."""

from datetime import datetime
from typing import Callable
from zoneinfo import ZoneInfo

from payslip.config import settings

Clock = Callable[[], datetime]


def local_now() -> datetime:
    return datetime.now(ZoneInfo(settings.TIMEZONE))

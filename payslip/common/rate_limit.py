"""Per-client request limiting for the whole API.

The limiter is attached to ``app.state`` and enforced by
``SlowAPIMiddleware`` in main.py, so every route shares the default limit
without per-endpoint decorators. Counters live in ``RATE_LIMIT_STORAGE_URI``
(in-process memory unless configured otherwise).
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from payslip.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
)

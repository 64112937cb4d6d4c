"""
Rate limiter configuration using SlowAPI.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from config import settings

# Per-route limits, keyed on the client's IP address
ACCOUNT_LIMIT = "10/minute"
WRITE_LIMIT = "30/minute"
READ_LIMIT = "60/minute"

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

"""
Rate limiter configuration.
Uses slowapi for IP-based rate limiting of the login endpoint.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from blogcms.config import settings

# Rate limiter (uses client IP)
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)

"""
Shared slowapi limiter.

Routers decorate endpoints with ``@limiter.limit``; main.py attaches the same
instance to ``app.state`` and toggles it from settings.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

AUTH_RATE_LIMIT = "10/minute"

limiter = Limiter(key_func=get_remote_address)

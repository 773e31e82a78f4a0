"""Shared slowapi limiter (per client IP) for the billed AI endpoints"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import get_settings

settings = get_settings()

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)

# Applied to every route that calls a hosted AI service
AI_RATE_LIMIT = settings.rate_limit_ai

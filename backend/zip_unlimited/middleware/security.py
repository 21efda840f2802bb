"""
Zip Unlimited - Security Middleware

Rate limiting, security headers.
"""

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address
from typing import Callable

from ..config import settings


# ============================================
# RATE LIMITER
# ============================================

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)


GAME_RATE_LIMIT = f"{settings.RATE_LIMIT_GAME}/minute"


# ============================================
# SECURITY HEADERS MIDDLEWARE
# ============================================

async def add_security_headers(request: Request, call_next: Callable):
    """Добавляет security headers ко всем ответам."""
    response = await call_next(request)

    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

    if settings.is_production:
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

    # CSP: API отдаёт только JSON
    if not settings.DEBUG:
        response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"

    return response

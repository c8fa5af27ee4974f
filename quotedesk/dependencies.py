"""FastAPI dependencies for the app-scoped services."""
from fastapi import Request

from quotedesk.services.notifications import Notifier
from quotedesk.services.rate_limit import RateLimiter


def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter

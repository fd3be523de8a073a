"""Rate limiting utilities using SlowAPI."""
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from limits import parse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from .config import Settings
from .errors import TooManyRequests
from .responses import error_response

SIGNUP_RATE_LIMIT = "5/minute"
LOGIN_RATE_LIMIT = "10/minute"


def build_limiter(settings: Settings) -> Limiter:
    return Limiter(
        key_func=get_remote_address,
        default_limits=[settings.default_rate_limit],
        enabled=settings.rate_limiting_enabled,
    )


def rate_limited(limit: str) -> Callable[[Request], None]:
    """Dependency factory enforcing ``limit`` per client on one route.

    Counts against the limiter of the app serving the request, so every app
    built by ``create_app`` keeps its own buckets and its own on/off switch.
    """
    item = parse(limit)

    def dependency(request: Request) -> None:
        app_limiter: Limiter = request.app.state.limiter
        if not app_limiter.enabled:
            return
        if not app_limiter.limiter.hit(item, "route", request.url.path, get_remote_address(request)):
            raise TooManyRequests()

    return dependency


def rate_limit_handler(_: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(status_code=429, content=error_response("rate limit exceeded", exc.detail))


def apply_rate_limiter(app: FastAPI, settings: Settings) -> Limiter:
    """Attach a limiter owned by this app, plus its middleware and handler."""

    app.state.limiter = build_limiter(settings)
    app.add_middleware(SlowAPIMiddleware)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    return app.state.limiter

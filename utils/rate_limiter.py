"""
Rate limiting for the public API
"""
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from config import RATE_LIMIT_DEFAULT, RATE_LIMIT_ENABLED, REDIS_URL

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[RATE_LIMIT_DEFAULT],
    storage_uri=REDIS_URL,  # redis://... in production
    strategy="fixed-window",
    enabled=RATE_LIMIT_ENABLED,
)


def setup_rate_limiting(app):
    """Attach the limiter, its middleware and the 429 handler to the FastAPI app"""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    return limiter

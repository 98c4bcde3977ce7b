"""
HTTP route for interstellar object ephemerides.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

import asyncio
import logging
from typing import Optional

from aiohttp import web

from interstellar_horizons.client import HorizonsClient
from interstellar_horizons.config import Config
from interstellar_horizons.ephemeris import EphemerisService
from interstellar_horizons.errors import EphemerisError
from interstellar_horizons.parser import Clock, format_timestamp, utc_now
from interstellar_horizons.rate_limiter import RateLimiter

_LOG = logging.getLogger(__name__)

ROUTE = "/api/interstellar/horizons"

CLIENT_KEY = web.AppKey("horizons_client", HorizonsClient)
SERVICE_KEY = web.AppKey("ephemeris_service", EphemerisService)
LIMITER_KEY = web.AppKey("rate_limiter", RateLimiter)
CLOCK_KEY = web.AppKey("clock", Clock)
TRUST_FORWARDED_KEY = web.AppKey("trust_forwarded_headers", bool)


def client_identifier(request: web.Request, trust_forwarded: bool = False) -> str:
    """
    Identify the caller for rate limiting.

    X-Forwarded-For and X-Real-IP are set by whoever sends the request, so
    they are only read when a reverse proxy in front of the service is known
    to overwrite them. Otherwise the socket peer address is used.
    """
    if trust_forwarded:
        forwarded = request.headers.get("X-Forwarded-For", "").split(",")[0].strip()
        if forwarded:
            return forwarded
        real_ip = request.headers.get("X-Real-IP", "").strip()
        if real_ip:
            return real_ip
    return request.remote or "anonymous"


@web.middleware
async def rate_limit_middleware(request: web.Request, handler):
    """Reject callers over their request budget and annotate responses."""
    limiter = request.app[LIMITER_KEY]
    identifier = client_identifier(request, request.app[TRUST_FORWARDED_KEY])

    if limiter.is_rate_limited(identifier):
        reset_time = limiter.reset_time(identifier)
        retry_after = limiter.retry_after(identifier)
        return web.json_response(
            {
                "error": "Too many requests",
                "message": "Rate limit exceeded. Please try again later.",
                "retryAfter": retry_after,
            },
            status=429,
            headers={
                "X-RateLimit-Limit": str(limiter.max_requests),
                "X-RateLimit-Remaining": "0",
                "X-RateLimit-Reset": str(int(reset_time)),
                "Retry-After": str(retry_after),
            },
        )

    response = await handler(request)
    response.headers["X-RateLimit-Limit"] = str(limiter.max_requests)
    response.headers["X-RateLimit-Remaining"] = str(limiter.remaining(identifier))
    response.headers["X-RateLimit-Reset"] = str(int(limiter.reset_time(identifier)))
    return response


async def get_horizons(request: web.Request) -> web.Response:
    """
    GET /api/interstellar/horizons

    Query parameters:
    - object: 3I, 2I, 1I or a designation such as "C/2025 N1" (default 3I)
    - startTime: optional start date (YYYY-MM-DD)
    - stopTime: optional stop date (YYYY-MM-DD)
    - stepSize: time interval (default 1d)
    """
    service = request.app[SERVICE_KEY]
    query = request.rel_url.query

    try:
        result = await service.get_ephemeris(
            query.get("object") or "3I",
            start_time=query.get("startTime"),
            stop_time=query.get("stopTime"),
            step_size=query.get("stepSize"),
        )
    except Exception as ex:
        _LOG.error("Interstellar Horizons API error: %s", ex, exc_info=True)
        return web.json_response(
            {
                "success": False,
                "error": "Internal Server Error",
                "message": str(ex) or "Unknown error",
            },
            status=500,
        )

    if isinstance(result, EphemerisError):
        _LOG.info("Ephemeris request failed (%d): %s", result.status, result.message)
        return web.json_response(result.to_dict(), status=result.status)

    body = result.to_dict()
    body["timestamp"] = format_timestamp(request.app[CLOCK_KEY]())
    return web.json_response(body)


async def _limiter_cleanup(app: web.Application):
    """Periodically drop expired rate limit windows."""
    limiter = app[LIMITER_KEY]

    async def sweep():
        while True:
            await asyncio.sleep(limiter.window_seconds)
            removed = limiter.cleanup()
            if removed:
                _LOG.debug("Dropped %d expired rate limit windows", removed)

    task = asyncio.create_task(sweep())
    yield
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


async def _close_client(app: web.Application) -> None:
    _LOG.info("Closing Horizons client...")
    await app[CLIENT_KEY].close()


def create_app(
    config: Config,
    client: Optional[HorizonsClient] = None,
    clock: Clock = utc_now,
) -> web.Application:
    """Build the aiohttp application serving the ephemeris route."""
    client = client or HorizonsClient(config)

    app = web.Application(middlewares=[rate_limit_middleware])
    app[CLIENT_KEY] = client
    app[SERVICE_KEY] = EphemerisService(config, client, clock)
    app[LIMITER_KEY] = RateLimiter(config.rate_limit_window, config.rate_limit_max_requests)
    app[CLOCK_KEY] = clock
    app[TRUST_FORWARDED_KEY] = config.trust_forwarded_headers

    app.router.add_get(ROUTE, get_horizons)
    app.cleanup_ctx.append(_limiter_cleanup)
    app.on_cleanup.append(_close_client)
    return app

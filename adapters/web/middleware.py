"""
Middlewares for the web app.

- security_headers_middleware: CSP and friends on every response
- rate_limit_middleware: per-IP limit by route class, X-RateLimit-* headers, 429
- page_guard_middleware: protected pages redirect to /login (admin pages to /dashboard)
"""

import logging
import math
from typing import Awaitable, Callable

from aiohttp import web

from adapters.web.context import access_token, client_ip, result_response, route_class
from adapters.web.loader import CONTAINER
from config.features import features
from core.domain.errors import LeagueError
from core.domain.models import ActionResult, RateLimitDecision, UserRole

logger = logging.getLogger(__name__)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]

PROTECTED_PAGES = (
    "/dashboard",
    "/matchmaking",
    "/tournaments",
    "/rankings",
    "/record-entry",
    "/media",
    "/training",
    "/analytics",
    "/disputes",
    "/admin",
)
ADMIN_PAGES = ("/admin",)

# Monitors must never be throttled
UNLIMITED_PATHS = ("/api/health",)

CONTENT_SECURITY_POLICY = "; ".join([
    "default-src 'self'",
    "script-src 'self' 'unsafe-inline'",
    "style-src 'self' 'unsafe-inline'",
    "img-src 'self' data: blob: https:",
    "media-src 'self' blob: https:",
    "font-src 'self' data:",
    "connect-src 'self' https://*.supabase.co wss://*.supabase.co",
    "frame-ancestors 'none'",
    "base-uri 'self'",
    "form-action 'self'",
])


def _matches(path: str, prefixes) -> bool:
    return any(path == p or path.startswith(p + "/") for p in prefixes)


def _apply_security_headers(response: web.StreamResponse, production_like: bool) -> None:
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    response.headers["X-XSS-Protection"] = "1; mode=block"
    response.headers["Permissions-Policy"] = "camera=(), microphone=(), geolocation=()"
    response.headers["Content-Security-Policy"] = CONTENT_SECURITY_POLICY
    if production_like:
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"


def _apply_rate_limit_headers(response: web.StreamResponse, decision: RateLimitDecision) -> None:
    response.headers["X-RateLimit-Limit"] = str(decision.limit)
    response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
    response.headers["X-RateLimit-Reset"] = str(math.ceil(decision.reset_at))


@web.middleware
async def security_headers_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    if not features.SECURITY_HEADERS_ENABLED:
        return await handler(request)

    production_like = request.app[CONTAINER].settings.is_production_like
    try:
        response = await handler(request)
    except web.HTTPException as exc:
        _apply_security_headers(exc, production_like)
        raise
    _apply_security_headers(response, production_like)
    return response


@web.middleware
async def rate_limit_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    if request.path in UNLIMITED_PATHS:
        return await handler(request)

    container = request.app[CONTAINER]
    ip = client_ip(request)
    operation_class = route_class(request.path)
    decision = await container.rate_limiter.check(f"ip:{ip}", operation_class)

    if not decision.allowed:
        container.audit.warn(
            "Rate limit exceeded",
            {"ip": ip, "path": request.path, "class": operation_class.value, "degraded": decision.degraded},
        )
        result = ActionResult.fail(
            "Too many requests. Please try again later.",
            kind="rate_limited",
            retry_after=decision.retry_after,
        )
        response = web.json_response(
            result.to_dict(), status=429, headers={"Retry-After": str(decision.retry_after)}
        )
        _apply_rate_limit_headers(response, decision)
        return response

    try:
        response = await handler(request)
    except web.HTTPException as exc:
        _apply_rate_limit_headers(exc, decision)
        raise
    _apply_rate_limit_headers(response, decision)
    return response


@web.middleware
async def page_guard_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    path = request.path
    if not _matches(path, PROTECTED_PAGES):
        return await handler(request)

    container = request.app[CONTAINER]
    try:
        user = await container.identity_for(access_token(request)).get_current_user()
        profile = None
        if user is not None and _matches(path, ADMIN_PAGES):
            profile = await container.profile_repo.get_by_id(user.id)
    except LeagueError as e:
        logger.error(f"Page guard lookup failed for {path}: {e.kind}")
        return result_response(ActionResult.fail(e.message, kind=e.kind))

    if user is None:
        logger.debug(f"Unauthenticated page request {path}, redirecting to /login")
        raise web.HTTPFound("/login")

    if _matches(path, ADMIN_PAGES) and (profile is None or profile.role != UserRole.ADMIN):
        container.audit.security("Non-admin page access", {"user_id": str(user.id), "path": path})
        raise web.HTTPFound("/dashboard")

    request["user"] = user
    return await handler(request)

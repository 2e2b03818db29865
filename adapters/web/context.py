"""
Per-request helpers: caller IP, access token, route class, JSON responses.
"""

import json
from typing import Any, Dict, Optional

from aiohttp import web

from core.domain.models import ActionResult, OperationClass

ACCESS_TOKEN_COOKIE = "sb-access-token"
REFRESH_TOKEN_COOKIE = "sb-refresh-token"

STATUS_BY_KIND = {
    "invalid_input": 400,
    "unauthenticated": 401,
    "forbidden": 403,
    "not_found": 404,
    "conflict": 409,
    "rate_limited": 429,
    "persistence_failure": 502,
    "timeout": 504,
    "unexpected_error": 500,
}


def client_ip(request: web.Request) -> str:
    """First hop of X-Forwarded-For, else the socket peer"""
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.headers.get("X-Real-IP") or request.remote or "unknown"


def access_token(request: web.Request) -> Optional[str]:
    """Bearer header wins over the session cookie"""
    auth = request.headers.get("Authorization", "")
    if auth.lower().startswith("bearer "):
        token = auth[7:].strip()
        if token:
            return token
    return request.cookies.get(ACCESS_TOKEN_COOKIE) or None


def route_class(path: str) -> OperationClass:
    if path.startswith("/api/auth"):
        return OperationClass.AUTH
    if "upload" in path:
        return OperationClass.UPLOAD
    if path.startswith("/api/admin") or path.startswith("/admin"):
        return OperationClass.ADMIN
    return OperationClass.API


def result_response(result: ActionResult, status: int = 200) -> web.Response:
    """ActionResult -> JSON response with the status its kind maps to"""
    headers = {}
    if not result.success:
        status = STATUS_BY_KIND.get(result.kind, 500)
        if result.retry_after:
            headers["Retry-After"] = str(result.retry_after)
    return web.json_response(result.to_dict(), status=status, headers=headers)


async def read_payload(request: web.Request) -> Dict[str, Any]:
    """
    JSON or form body merged over the path parameters.
    A body that is not a JSON object is treated as empty so that validation
    reports the missing fields.
    """
    payload: Dict[str, Any] = {}
    if request.body_exists:
        if request.content_type == "application/json":
            try:
                body = await request.json()
            except json.JSONDecodeError:
                body = None
            if isinstance(body, dict):
                payload.update(body)
        else:
            payload.update(await request.post())
    payload.update(request.match_info)
    return payload


def query_payload(request: web.Request) -> Dict[str, Any]:
    payload: Dict[str, Any] = dict(request.query)
    payload.update(request.match_info)
    return payload

"""
HTTP routes. Each handler reads the request into a plain dict, calls one
service operation and renders the ActionResult.
"""

import logging
from datetime import datetime, timezone

from aiohttp import web

from adapters.web.context import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    access_token,
    client_ip,
    query_payload,
    read_payload,
    result_response,
)
from adapters.web.loader import CONTAINER, Container
from core.domain.errors import LeagueError
from core.domain.models import UploadedFile

logger = logging.getLogger(__name__)

SESSION_COOKIE_MAX_AGE = 60 * 60 * 24 * 7


def _container(request: web.Request) -> Container:
    return request.app[CONTAINER]


def _identity(request: web.Request):
    return _container(request).identity_for(access_token(request))


# === AUTH ===

async def sign_in(request: web.Request) -> web.Response:
    container = _container(request)
    result = await container.auth_service.sign_in(await read_payload(request), client_ip(request))
    response = result_response(result)
    if result.success:
        _set_session_cookies(response, result.data, container.settings.is_production_like)
    return response


async def sign_up(request: web.Request) -> web.Response:
    container = _container(request)
    result = await container.auth_service.sign_up(await read_payload(request), client_ip(request))
    response = result_response(result, status=201)
    if result.success and result.data.get("access_token"):
        _set_session_cookies(response, result.data, container.settings.is_production_like)
    return response


async def sign_out(request: web.Request) -> web.Response:
    result = await _container(request).auth_service.sign_out(access_token(request) or "")
    response = result_response(result)
    response.del_cookie(ACCESS_TOKEN_COOKIE, path="/")
    response.del_cookie(REFRESH_TOKEN_COOKIE, path="/")
    return response


def _set_session_cookies(response: web.Response, session: dict, secure: bool) -> None:
    options = dict(path="/", httponly=True, samesite="Lax", secure=secure, max_age=SESSION_COOKIE_MAX_AGE)
    response.set_cookie(ACCESS_TOKEN_COOKIE, session["access_token"], **options)
    if session.get("refresh_token"):
        response.set_cookie(REFRESH_TOKEN_COOKIE, session["refresh_token"], **options)


# === FIGHTERS ===

async def get_my_profile(request: web.Request) -> web.Response:
    result = await _container(request).fighter_service.get_my_profile(_identity(request))
    return result_response(result)


async def create_fighter_profile(request: web.Request) -> web.Response:
    result = await _container(request).fighter_service.create_fighter_profile(
        _identity(request), await read_payload(request)
    )
    return result_response(result, status=201)


async def create_fight_record(request: web.Request) -> web.Response:
    result = await _container(request).fighter_service.create_fight_record(
        _identity(request), await read_payload(request)
    )
    return result_response(result, status=201)


async def get_rankings(request: web.Request) -> web.Response:
    result = await _container(request).fighter_service.get_rankings(query_payload(request))
    return result_response(result)


# === MATCHMAKING ===

async def request_matchmaking(request: web.Request) -> web.Response:
    result = await _container(request).matchmaking_service.request_matchmaking(
        _identity(request), await read_payload(request)
    )
    return result_response(result, status=201)


async def list_my_requests(request: web.Request) -> web.Response:
    result = await _container(request).matchmaking_service.list_my_requests(_identity(request))
    return result_response(result)


async def cancel_matchmaking_request(request: web.Request) -> web.Response:
    result = await _container(request).matchmaking_service.cancel_matchmaking_request(
        _identity(request), await read_payload(request)
    )
    return result_response(result)


# === TOURNAMENTS ===

async def list_tournaments(request: web.Request) -> web.Response:
    result = await _container(request).tournament_service.list_tournaments(query_payload(request))
    return result_response(result)


async def create_tournament(request: web.Request) -> web.Response:
    result = await _container(request).tournament_service.create_tournament(
        _identity(request), await read_payload(request)
    )
    return result_response(result, status=201)


async def get_tournament_details(request: web.Request) -> web.Response:
    result = await _container(request).tournament_service.get_tournament_details(query_payload(request))
    return result_response(result)


async def join_tournament(request: web.Request) -> web.Response:
    result = await _container(request).tournament_service.join_tournament(
        _identity(request), await read_payload(request)
    )
    return result_response(result)


# === MEDIA ===

async def upload_media_asset(request: web.Request) -> web.Response:
    """multipart/form-data: title, description, category, file"""
    raw = {}
    if request.content_type.startswith("multipart/"):
        form = await request.post()
        for key, value in form.items():
            if isinstance(value, web.FileField):
                data = value.file.read()
                raw[key] = UploadedFile(
                    filename=value.filename,
                    content_type=value.content_type,
                    size=len(data),
                    data=data,
                )
            else:
                raw[key] = value

    result = await _container(request).media_service.upload_media_asset(_identity(request), raw)
    return result_response(result, status=201)


async def list_media_assets(request: web.Request) -> web.Response:
    result = await _container(request).media_service.list_media_assets(query_payload(request))
    return result_response(result)


async def schedule_interview(request: web.Request) -> web.Response:
    result = await _container(request).media_service.schedule_interview(
        _identity(request), await read_payload(request)
    )
    return result_response(result, status=201)


async def list_interviews(request: web.Request) -> web.Response:
    result = await _container(request).media_service.list_interviews(query_payload(request))
    return result_response(result)


# === TRAINING ===

async def list_training_camps(request: web.Request) -> web.Response:
    result = await _container(request).training_service.list_training_camps(query_payload(request))
    return result_response(result)


async def create_training_camp(request: web.Request) -> web.Response:
    result = await _container(request).training_service.create_training_camp(
        _identity(request), await read_payload(request)
    )
    return result_response(result, status=201)


async def join_training_camp(request: web.Request) -> web.Response:
    result = await _container(request).training_service.join_training_camp(
        _identity(request), await read_payload(request)
    )
    return result_response(result)


async def create_training_objective(request: web.Request) -> web.Response:
    result = await _container(request).training_service.create_training_objective(
        _identity(request), await read_payload(request)
    )
    return result_response(result, status=201)


async def log_training(request: web.Request) -> web.Response:
    result = await _container(request).training_service.log_training(
        _identity(request), await read_payload(request)
    )
    return result_response(result, status=201)


# === DISPUTES ===

async def create_dispute(request: web.Request) -> web.Response:
    result = await _container(request).dispute_service.create_dispute(
        _identity(request), await read_payload(request)
    )
    return result_response(result, status=201)


async def list_disputes(request: web.Request) -> web.Response:
    result = await _container(request).dispute_service.list_disputes(_identity(request), query_payload(request))
    return result_response(result)


async def resolve_dispute(request: web.Request) -> web.Response:
    result = await _container(request).dispute_service.resolve_dispute(
        _identity(request), await read_payload(request)
    )
    return result_response(result)


# === ADMIN ===

async def list_users(request: web.Request) -> web.Response:
    result = await _container(request).admin_service.list_users(_identity(request), query_payload(request))
    return result_response(result)


async def update_user_role(request: web.Request) -> web.Response:
    result = await _container(request).admin_service.update_user_role(
        _identity(request), await read_payload(request)
    )
    return result_response(result)


async def suspend_user(request: web.Request) -> web.Response:
    result = await _container(request).admin_service.suspend_user(
        _identity(request), await read_payload(request)
    )
    return result_response(result, status=201)


async def get_system_stats(request: web.Request) -> web.Response:
    result = await _container(request).admin_service.get_system_stats(_identity(request))
    return result_response(result)


async def update_system_settings(request: web.Request) -> web.Response:
    result = await _container(request).admin_service.update_system_settings(
        _identity(request), await read_payload(request)
    )
    return result_response(result)


# === HEALTH ===

async def health(request: web.Request) -> web.Response:
    """Database reachability and configuration; 503 when the database is down"""
    container = _container(request)
    settings = container.settings

    database = "connected"
    try:
        await container.admin_repo.get_settings()
    except LeagueError as e:
        logger.error(f"Health check: database unreachable ({e.kind})")
        database = "disconnected"

    rate_limit_store = "connected" if await container.counter_store.ping() else "disconnected"

    healthy = database == "connected"
    body = {
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.env,
        "services": {
            "database": database,
            "rate_limit_store": rate_limit_store,
        },
        "config": {
            "supabase_configured": bool(settings.supabase_url and settings.service_key),
            "redis_configured": bool(settings.redis_url),
        },
    }
    return web.json_response(body, status=200 if healthy else 503)


# === PAGES ===

async def page(request: web.Request) -> web.Response:
    """Page shell for the separately served frontend; guarded by page_guard_middleware"""
    user = request.get("user")
    return web.json_response({
        "page": request.path,
        "user": {"id": str(user.id), "email": user.email} if user else None,
    })


PAGE_PATHS = (
    "/login",
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


def setup_routes(app: web.Application) -> None:
    router = app.router

    router.add_get("/api/health", health)

    router.add_post("/api/auth/sign-in", sign_in)
    router.add_post("/api/auth/sign-up", sign_up)
    router.add_post("/api/auth/sign-out", sign_out)

    router.add_get("/api/fighters/me", get_my_profile)
    router.add_post("/api/fighters", create_fighter_profile)
    router.add_post("/api/fight-records", create_fight_record)
    router.add_get("/api/rankings", get_rankings)

    router.add_get("/api/matchmaking", list_my_requests)
    router.add_post("/api/matchmaking", request_matchmaking)
    router.add_post("/api/matchmaking/{request_id}/cancel", cancel_matchmaking_request)

    router.add_get("/api/tournaments", list_tournaments)
    router.add_post("/api/tournaments", create_tournament)
    router.add_get("/api/tournaments/{tournament_id}", get_tournament_details)
    router.add_post("/api/tournaments/{tournament_id}/join", join_tournament)

    router.add_post("/api/media/upload", upload_media_asset)
    router.add_get("/api/media", list_media_assets)
    router.add_get("/api/interviews", list_interviews)
    router.add_post("/api/interviews", schedule_interview)

    router.add_get("/api/training/camps", list_training_camps)
    router.add_post("/api/training/camps", create_training_camp)
    router.add_post("/api/training/camps/{camp_id}/join", join_training_camp)
    router.add_post("/api/training/objectives", create_training_objective)
    router.add_post("/api/training/logs", log_training)

    router.add_get("/api/disputes", list_disputes)
    router.add_post("/api/disputes", create_dispute)
    router.add_post("/api/admin/disputes/{dispute_id}/resolve", resolve_dispute)

    router.add_get("/api/admin/users", list_users)
    router.add_post("/api/admin/users/{user_id}/role", update_user_role)
    router.add_post("/api/admin/users/{user_id}/suspend", suspend_user)
    router.add_get("/api/admin/stats", get_system_stats)
    router.add_put("/api/admin/settings", update_system_settings)

    for path in PAGE_PATHS:
        router.add_get(path, page)

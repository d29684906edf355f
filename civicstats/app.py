from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from .auth.config import DEFAULT_AUTH_CONFIG, AuthConfig
from .auth.dependencies import require_admin, require_user
from .auth.users import authenticate
from .cache.memory import MemoryCache
from .cache.snapshot_store import SnapshotStore
from .gateway.soda_client import SodaClient
from .models import (
    CacheClearResponse,
    CacheStatsResponse,
    Category,
    CategoryInfo,
    ErrorResponse,
    LoginRequest,
)
from .pipeline.orchestrator import NoDataAvailable, Orchestrator, snapshot_payload

logger = logging.getLogger(__name__)

router = APIRouter()

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _orchestrator(request: Request) -> Orchestrator:
    return request.app.state.orchestrator


def _no_data() -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": "No data available"})


def _failed(subject: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": f"Failed to fetch {subject} data"})


async def _overview(request: Request, category: Category) -> Any:
    try:
        snapshot = await _orchestrator(request).get_overview(category)
    except NoDataAvailable:
        return _no_data()
    except Exception:
        logger.exception("Overview failed for %s", category.value)
        return _failed(category.slug)
    return snapshot_payload(snapshot)


async def _view(request: Request, name: str) -> Any:
    try:
        return await _orchestrator(request).get_view(name)
    except NoDataAvailable:
        return _no_data()
    except Exception:
        logger.exception("View %s failed", name)
        return _failed(name.partition(":")[0])


def _parse_category(value: str) -> Category:
    try:
        return Category.parse(value)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


# ── Public endpoints ─────────────────────────────────────────────────────


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/categories", response_model=list[CategoryInfo])
def categories(request: Request) -> list[CategoryInfo]:
    orchestrator = _orchestrator(request)
    cached = {snapshot.category: snapshot for snapshot in orchestrator.snapshots()}
    infos = []
    for category, pipeline in orchestrator.pipelines.items():
        snapshot = cached.get(category)
        infos.append(
            CategoryInfo(
                category=category,
                slug=category.slug,
                datasets=[spec.name for spec in pipeline.datasets],
                cached=snapshot is not None,
                last_updated=snapshot.last_updated.isoformat() if snapshot else None,
            )
        )
    return infos


# ── Domain overviews ─────────────────────────────────────────────────────


@router.get("/business/overview", responses=_ERROR_RESPONSES)
async def business_overview(request: Request) -> Any:
    return await _overview(request, Category.BUSINESS)


@router.get("/education/overview", responses=_ERROR_RESPONSES)
async def education_overview(request: Request) -> Any:
    return await _overview(request, Category.EDUCATION)


@router.get("/housing/overview", responses=_ERROR_RESPONSES)
async def housing_overview(request: Request) -> Any:
    return await _overview(request, Category.HOUSING)


@router.get("/health/overview", responses=_ERROR_RESPONSES)
async def health_overview(request: Request) -> Any:
    return await _overview(request, Category.HEALTH)


@router.get("/safety/overview", responses=_ERROR_RESPONSES)
async def safety_overview(request: Request) -> Any:
    return await _overview(request, Category.PUBLIC_SAFETY)


@router.get("/environment/overview", responses=_ERROR_RESPONSES)
async def environment_overview(request: Request) -> Any:
    return await _overview(request, Category.ENVIRONMENT)


@router.get("/transportation/overview", responses=_ERROR_RESPONSES)
async def transportation_overview(request: Request) -> Any:
    return await _overview(request, Category.TRANSPORTATION)


# ── Derived views ────────────────────────────────────────────────────────


@router.get("/business/boroughs", responses=_ERROR_RESPONSES)
async def business_boroughs(request: Request) -> Any:
    return await _view(request, "business:boroughs")


@router.get("/education/boroughs", responses=_ERROR_RESPONSES)
async def education_boroughs(request: Request) -> Any:
    return await _view(request, "education:boroughs")


# ── Auth endpoints ───────────────────────────────────────────────────────


@router.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.username, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@router.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@router.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


# ── Admin endpoints ──────────────────────────────────────────────────────


@router.post("/cache/clear", response_model=CacheClearResponse)
def cache_clear(
    request: Request,
    category: str | None = None,
    user: dict = Depends(require_admin),
) -> CacheClearResponse:
    target = _parse_category(category) if category else None
    result = _orchestrator(request).clear(target)
    logger.info(
        "Cache cleared by %s: %d snapshots, %d views",
        user["username"],
        result.cleared_count,
        result.cleared_views,
    )
    return CacheClearResponse(
        status="cleared",
        cleared_keys=result.cleared_keys,
        cleared_count=result.cleared_count,
        cleared_views=result.cleared_views,
    )


@router.post("/cache/refresh/{category}", responses=_ERROR_RESPONSES)
async def cache_refresh(
    category: str,
    request: Request,
    user: dict = Depends(require_admin),
) -> Any:
    target = _parse_category(category)
    try:
        snapshot = await _orchestrator(request).refresh(target)
    except NoDataAvailable:
        return _no_data()
    except Exception:
        logger.exception("Refresh failed for %s", target.value)
        return _failed(target.slug)
    return snapshot_payload(snapshot)


@router.get("/cache/stats", response_model=CacheStatsResponse)
def cache_stats(request: Request, user: dict = Depends(require_admin)) -> CacheStatsResponse:
    orchestrator = _orchestrator(request)
    memory = orchestrator.memory_stats()
    return CacheStatsResponse(
        cache_size=memory["size"],
        cached_keys=memory["keys"],
        hits=memory["hits"],
        misses=memory["misses"],
        hit_rate=memory["hit_rate"],
        snapshots=[
            {"category": s.category.value, "last_updated": s.last_updated.isoformat()}
            for s in orchestrator.snapshots()
        ],
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


# ── App factory ──────────────────────────────────────────────────────────


def build_orchestrator() -> Orchestrator:
    return Orchestrator(SodaClient(), SnapshotStore(), MemoryCache())


def create_app(
    orchestrator: Orchestrator | None = None,
    auth_config: AuthConfig = DEFAULT_AUTH_CONFIG,
) -> FastAPI:
    application = FastAPI(title="NYC Civic Statistics API", version="1.0.0")
    application.add_middleware(SessionMiddleware, secret_key=auth_config.session_secret)
    application.state.orchestrator = orchestrator or build_orchestrator()
    application.include_router(router)
    return application


app = create_app()

"""FastAPI web application for the multizone backend."""

import logging
from contextlib import asynccontextmanager
from typing import List, Optional
from fastapi import APIRouter, Body, Depends, FastAPI, HTTPException, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from multizone import __version__
from multizone.api.dependencies import get_feature_flag_service, get_user_repository, get_zone_checker
from multizone.api.schemas import (
    FeatureFlagCreateRequest,
    FeatureFlagUpdateRequest,
    HealthResponse,
    MessageResponse,
    SeedResponse,
    UserCreateRequest,
    ZonesStatusResponse,
)
from multizone.cache import FlagCache
from multizone.config import Settings, load_settings
from multizone.database.database import build_engine, build_session_factory, init_db
from multizone.database.user_repository import UserRepository
from multizone.errors import DatastoreError, ErrorKind
from multizone.health.zone_checker import ZoneHealthChecker
from multizone.models.feature_flag import FeatureFlag
from multizone.models.user import User
from multizone.seed import seed_users
from multizone.services.feature_flags import FeatureFlagService

logger = logging.getLogger(__name__)

# Duplicate-key inserts stay 500 for compatibility with existing clients.
STATUS_BY_KIND = {
    ErrorKind.INVALID: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.DUPLICATE: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

router = APIRouter()


def http_error(exc: DatastoreError, action: str) -> HTTPException:
    """Translate a datastore error into an HTTPException.

    Client errors carry the error text as-is; server errors are prefixed with
    the action that failed (e.g. "Failed to create user: ...").
    """
    status_code = STATUS_BY_KIND.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= 500:
        return HTTPException(status_code=status_code, detail=f"{action}: {exc}")
    return HTTPException(status_code=status_code, detail=str(exc))


@router.get("/health", response_model=HealthResponse)
def health():
    """Liveness check; never touches the datastore."""
    return HealthResponse()


@router.get("/api/zones/status", response_model=ZonesStatusResponse)
def zones_status(checker: ZoneHealthChecker = Depends(get_zone_checker)):
    """Check every configured zone.

    The envelope status is always "ok": it reports that the check completed,
    not that every zone is healthy.
    """
    return ZonesStatusResponse(status="ok", zones=checker.check_all_zones())


# --- Users ---

@router.get("/api/users", response_model=List[User])
def list_users(repository: UserRepository = Depends(get_user_repository)):
    try:
        return repository.get_all()
    except DatastoreError as e:
        raise http_error(e, "Database error")


@router.post("/api/users", response_model=User, status_code=status.HTTP_201_CREATED)
def create_user(
    body: UserCreateRequest = Body(...),
    repository: UserRepository = Depends(get_user_repository),
):
    try:
        return repository.create(body.email, body.name)
    except DatastoreError as e:
        raise http_error(e, "Failed to create user")


@router.get("/api/users/{user_id}", response_model=User)
def get_user(user_id: int, repository: UserRepository = Depends(get_user_repository)):
    try:
        return repository.get(user_id)
    except DatastoreError as e:
        raise http_error(e, "Database error")


@router.delete("/api/users/{user_id}", response_model=MessageResponse)
def delete_user(user_id: int, repository: UserRepository = Depends(get_user_repository)):
    try:
        repository.delete(user_id)
    except DatastoreError as e:
        raise http_error(e, "Database error")
    return MessageResponse(message="User deleted successfully")


@router.post("/api/seed", response_model=SeedResponse)
def seed_database(response: Response, repository: UserRepository = Depends(get_user_repository)):
    """Seed the sample users; partial success is a normal outcome."""
    result = seed_users(repository)
    if result.all_failed:
        response.status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return SeedResponse(
        message="Database seeding completed",
        total_users=result.total,
        created=result.created,
        skipped=result.skipped,
        errors=result.errors,
        error_count=len(result.errors),
    )


# --- Feature flags ---

@router.get("/api/feature-flags", response_model=List[FeatureFlag])
def list_feature_flags(service: FeatureFlagService = Depends(get_feature_flag_service)):
    try:
        return service.list_flags()
    except DatastoreError as e:
        raise http_error(e, "Database error")


@router.get("/api/feature-flags/{key}", response_model=FeatureFlag)
def get_feature_flag(key: str, service: FeatureFlagService = Depends(get_feature_flag_service)):
    try:
        return service.get_flag(key)
    except DatastoreError as e:
        raise http_error(e, "Database error")


@router.post("/api/feature-flags", response_model=FeatureFlag, status_code=status.HTTP_201_CREATED)
def create_feature_flag(
    body: FeatureFlagCreateRequest = Body(...),
    service: FeatureFlagService = Depends(get_feature_flag_service),
):
    try:
        return service.create_flag(body.key, body.name, body.description)
    except DatastoreError as e:
        raise http_error(e, "Failed to create feature flag")


@router.patch("/api/feature-flags/{key}", response_model=FeatureFlag)
def update_feature_flag(
    key: str,
    body: FeatureFlagUpdateRequest = Body(...),
    service: FeatureFlagService = Depends(get_feature_flag_service),
):
    """Apply only the fields present in the body."""
    # An explicit null clears the description; it is ignored for name/enabled.
    fields = {
        field: value
        for field, value in body.model_dump(exclude_unset=True).items()
        if value is not None or field == "description"
    }
    try:
        return service.update_flag(key, fields)
    except DatastoreError as e:
        raise http_error(e, "Failed to update feature flag")


@router.delete("/api/feature-flags/{key}", response_model=MessageResponse)
def delete_feature_flag(key: str, service: FeatureFlagService = Depends(get_feature_flag_service)):
    try:
        service.delete_flag(key)
    except DatastoreError as e:
        raise http_error(e, "Database error")
    return MessageResponse(message="Feature flag deleted successfully")


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Answer malformed requests with 400 instead of FastAPI's default 422."""
    in_body = any((error.get("loc") or ("",))[0] == "body" for error in exc.errors())
    detail = "Invalid request body" if in_body else "Invalid request parameters"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": detail})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API application with its own engine, cache and zone checker."""
    settings = settings or load_settings()

    engine = build_engine(
        settings.sqlalchemy_url,
        debug=settings.debug,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(engine)
        logger.info("Database initialized successfully")
        logger.info("Monitoring zones:")
        for name, url in settings.zones:
            logger.info(f"  - {name}: {url}")
        logger.info(f"Database connection: {engine.url.render_as_string(hide_password=True)}")
        yield
        engine.dispose()

    app = FastAPI(
        title="multizone backend API",
        description="Users, feature flags and zone health for the multi-zone front end",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.flag_cache = FlagCache()
    app.state.zone_checker = ZoneHealthChecker(settings.zones)

    # Open policy: local proof-of-concept only.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.include_router(router)
    return app

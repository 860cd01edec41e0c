"""FastAPI dependencies wiring per-request resources to the app's shared state."""

from typing import Iterator
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from multizone.cache import FlagCache
from multizone.database.feature_flag_repository import FeatureFlagRepository
from multizone.database.user_repository import UserRepository
from multizone.health.zone_checker import ZoneHealthChecker
from multizone.services.feature_flags import FeatureFlagService


def get_db(request: Request) -> Iterator[Session]:
    """Get a database session for the duration of one request."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_flag_cache(request: Request) -> FlagCache:
    return request.app.state.flag_cache


def get_zone_checker(request: Request) -> ZoneHealthChecker:
    return request.app.state.zone_checker


def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_feature_flag_repository(db: Session = Depends(get_db)) -> FeatureFlagRepository:
    return FeatureFlagRepository(db)


def get_feature_flag_service(
    repository: FeatureFlagRepository = Depends(get_feature_flag_repository),
    cache: FlagCache = Depends(get_flag_cache),
) -> FeatureFlagService:
    return FeatureFlagService(repository, cache)

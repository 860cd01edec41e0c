"""Sample data seeding for multizone.

Used by `POST /api/seed` (users only) and as a stand-alone job:

    python -m multizone.seed
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from multizone.cache import FlagCache
from multizone.database.feature_flag_repository import FeatureFlagRepository
from multizone.database.user_repository import UserRepository
from multizone.errors import DatastoreError

logger = logging.getLogger(__name__)

# (email, name)
SAMPLE_USERS: Tuple[Tuple[str, str], ...] = (
    ("alice@example.com", "Alice Johnson"),
    ("bob@example.com", "Bob Smith"),
    ("charlie@example.com", "Charlie Brown"),
    ("diana@example.com", "Diana Prince"),
    ("eve@example.com", "Eve Anderson"),
)

# (key, name, description); all start disabled
SAMPLE_FLAGS: Tuple[Tuple[str, str, str], ...] = (
    ("show_welcome_banner", "Show Welcome Banner", "Displays a welcome banner on the main page"),
    ("new_user_dashboard", "New User Dashboard", "Enable the redesigned user dashboard interface"),
    ("beta_features", "Beta Features", "Enable access to beta features for testing"),
)


@dataclass
class SeedResult:
    """Outcome of one best-effort seeding batch."""
    total: int
    created: int = 0
    skipped: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def all_failed(self) -> bool:
        return self.total > 0 and len(self.errors) == self.total


def seed_users(repository: UserRepository, users=SAMPLE_USERS) -> SeedResult:
    """Find-or-create each sample user by email; one failure never aborts the batch."""
    result = SeedResult(total=len(users))
    for email, name in users:
        try:
            _, created = repository.find_or_create(email, name)
        except DatastoreError as e:
            result.errors.append(f"Error creating user {email}: {e}")
            logger.error(f"Error creating user {email}: {e}")
            continue
        if created:
            result.created += 1
            logger.info(f"Created user: {name} ({email})")
        else:
            result.skipped += 1
            logger.info(f"Skipped (already exists): {name} ({email})")
    return result


def seed_flags(repository: FeatureFlagRepository, cache: Optional[FlagCache] = None, flags=SAMPLE_FLAGS) -> SeedResult:
    """Find-or-create each sample feature flag by key."""
    result = SeedResult(total=len(flags))
    for key, name, description in flags:
        try:
            flag, created = repository.find_or_create(key, name, description)
        except DatastoreError as e:
            result.errors.append(f"Error creating feature flag {key}: {e}")
            logger.error(f"Error creating feature flag {key}: {e}")
            continue
        if cache is not None:
            cache.put(flag.key, flag)
        if created:
            result.created += 1
            logger.info(f"Created feature flag: {name} ({key})")
        else:
            result.skipped += 1
            logger.info(f"Skipped (already exists): {name} ({key})")
    return result


def main() -> int:
    """Seed users and feature flags into the configured datastore."""
    from multizone.config import load_settings
    from multizone.database.database import build_engine, build_session_factory, init_db

    settings = load_settings()
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    logger.info(f"Connecting to database at {settings.db_host}...")
    engine = build_engine(
        settings.sqlalchemy_url,
        debug=settings.debug,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
    )
    init_db(engine)

    session = build_session_factory(engine)()
    try:
        users = seed_users(UserRepository(session))
        logger.info(
            f"User seeding complete: {users.total} processed, "
            f"{users.created} created, {users.skipped} skipped"
        )
        flags = seed_flags(FeatureFlagRepository(session))
        logger.info(
            f"Feature flag seeding complete: {flags.total} processed, "
            f"{flags.created} created, {flags.skipped} skipped"
        )
    finally:
        session.close()
        engine.dispose()

    return 1 if users.all_failed or flags.all_failed else 0


if __name__ == "__main__":
    raise SystemExit(main())

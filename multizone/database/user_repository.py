"""Repository for User database operations."""

import logging
from typing import List, Optional, Tuple
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from multizone.errors import DuplicateError, InternalError, InvalidError, NotFoundError
from multizone.models.user import User
from multizone.database.models import UserDB

logger = logging.getLogger(__name__)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, email: str, name: str) -> User:
        """Create a new user.

        Raises:
            InvalidError: If email or name is empty
            DuplicateError: If another user already has this email
            InternalError: On any other storage failure
        """
        if _is_blank(email) or _is_blank(name):
            raise InvalidError("Email and name are required")

        try:
            user_db = UserDB(email=email, name=name)
            self.db.add(user_db)
            self.db.commit()
            self.db.refresh(user_db)
            logger.debug(f"Created user {user_db.id}: {email}")
            return user_db.to_pydantic()
        except IntegrityError as e:
            self.db.rollback()
            logger.info(f"Duplicate email on user create: {email}")
            raise DuplicateError(f"user with email {email} already exists: {e.orig}") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to create user {email}: {type(e).__name__}: {str(e)}")
            raise InternalError(str(e)) from e

    def get_all(self) -> List[User]:
        """Get all users ordered by ID."""
        try:
            users_db = self.db.query(UserDB).order_by(UserDB.id).all()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to list users: {type(e).__name__}: {str(e)}")
            raise InternalError(str(e)) from e
        return [user_db.to_pydantic() for user_db in users_db]

    def get(self, user_id: int) -> User:
        """Get user by ID.

        Raises:
            NotFoundError: If no user has this ID
        """
        try:
            user_db = self.db.query(UserDB).filter(UserDB.id == user_id).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise InternalError(str(e)) from e
        if not user_db:
            raise NotFoundError("User not found")
        return user_db.to_pydantic()

    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        try:
            user_db = self.db.query(UserDB).filter(UserDB.email == email).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise InternalError(str(e)) from e
        return user_db.to_pydantic() if user_db else None

    def delete(self, user_id: int) -> None:
        """Delete user by ID.

        Raises:
            NotFoundError: If no row was affected
        """
        try:
            deleted = self.db.query(UserDB).filter(UserDB.id == user_id).delete()
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to delete user {user_id}: {type(e).__name__}: {str(e)}")
            raise InternalError(str(e)) from e
        if deleted == 0:
            raise NotFoundError("User not found")
        logger.debug(f"Deleted user {user_id}")

    def find_or_create(self, email: str, name: str) -> Tuple[User, bool]:
        """Return the user with this email, creating it when absent.

        Lookup and insert are separate statements; if a concurrent writer
        inserts the same email in between, the uniqueness violation is
        resolved by re-reading the winner's row.

        Returns:
            (user, created) where created is False for an existing user
        """
        existing = self.get_by_email(email)
        if existing:
            return existing, False

        try:
            return self.create(email, name), True
        except DuplicateError:
            existing = self.get_by_email(email)
            if existing is None:
                raise
            return existing, False

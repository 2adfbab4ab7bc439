# core/users.py
"""
Data access and authentication for the users table

Passwords are hashed with bcrypt (Flask-Bcrypt) before they reach the
database and are never logged.
"""

import logging

from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from snippetbox.core.database_models import User, utcnow
from snippetbox.core.exceptions import (
    DataAccessError,
    DuplicateEmailError,
    InvalidCredentialsError,
    NotFoundError,
)
from snippetbox.extensions import bcrypt, db

logger = logging.getLogger(__name__)

EMAIL_CONSTRAINT = 'users_uc_email'


def _is_duplicate_email(error: IntegrityError) -> bool:
    # PostgreSQL reports the constraint name, SQLite the column
    message = str(error.orig)
    return EMAIL_CONSTRAINT in message or 'users.email' in message


def hash_password(password: str) -> str:
    return bcrypt.generate_password_hash(password).decode('utf-8')


class UserModel:
    """User store backed by the application database"""

    @property
    def session(self):
        return db.session

    def insert(self, name: str, email: str, password: str) -> None:
        user = User(
            name=name,
            email=email,
            hashed_password=hash_password(password),
            created=utcnow(),
        )
        try:
            self.session.add(user)
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            if _is_duplicate_email(e):
                raise DuplicateEmailError() from e
            raise DataAccessError('inserting user') from e
        except SQLAlchemyError as e:
            self.session.rollback()
            raise DataAccessError('inserting user') from e

        logger.info(f"Created user {user.id}")

    def authenticate(self, email: str, password: str) -> int:
        """Return the id of the user with these credentials"""
        stmt = select(User.id, User.hashed_password).where(User.email == email)
        try:
            row = self.session.execute(stmt).one_or_none()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise DataAccessError('querying user credentials') from e

        if row is None:
            raise InvalidCredentialsError()

        user_id, hashed_password = row
        if not bcrypt.check_password_hash(hashed_password, password):
            raise InvalidCredentialsError({'user_id': user_id})
        return user_id

    def exists(self, user_id: int) -> bool:
        stmt = select(exists().where(User.id == user_id))
        try:
            return bool(self.session.execute(stmt).scalar())
        except SQLAlchemyError as e:
            self.session.rollback()
            raise DataAccessError('checking user existence') from e

    def get(self, user_id: int) -> User:
        try:
            user = self.session.get(User, user_id)
        except SQLAlchemyError as e:
            self.session.rollback()
            raise DataAccessError('fetching user') from e

        if user is None:
            raise NotFoundError('user', {'id': user_id})
        return user

    def password_update(self, user_id: int, current_password: str, new_password: str) -> None:
        """
        Replace the user's password after re-checking the current one

        Raises InvalidCredentialsError (leaving the stored hash alone) when
        current_password does not match.
        """
        try:
            user = self.session.get(User, user_id)
        except SQLAlchemyError as e:
            self.session.rollback()
            raise DataAccessError('fetching current password') from e

        if user is None:
            raise NotFoundError('user', {'id': user_id})

        if not bcrypt.check_password_hash(user.hashed_password, current_password):
            raise InvalidCredentialsError({'user_id': user_id})

        user.hashed_password = hash_password(new_password)
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise DataAccessError('updating password') from e

        logger.info(f"Password updated for user {user_id}")

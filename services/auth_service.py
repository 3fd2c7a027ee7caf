"""
Account registration and sign-in.

Passwords are stored as werkzeug hashes; the plain password never leaves
this module. The signed-in identity itself is just the user id in the Flask
session, managed by the auth routes.
"""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import func, select
from werkzeug.security import check_password_hash, generate_password_hash

from core.database import Database, UserRecord
from core.exceptions import EmailAlreadyRegisteredError, InvalidCredentialsError
from logging_config import get_logger
from models.user import User


logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 6


def _to_user(record: UserRecord) -> User:
    return User(
        id=record.id,
        email=record.email,
        display_name=record.display_name,
        created_at=record.created_at,
    )


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class AuthService:
    """Creates accounts and checks credentials against the users table."""

    def __init__(self, database: Database):
        self._database = database

    def register(self, email: str, password: str, display_name: str = "") -> User:
        """
        Create an account.

        Raises:
            ValueError: If email is empty or the password is too short
            EmailAlreadyRegisteredError: If the email is taken
        """
        email = normalize_email(email)
        if not email or "@" not in email:
            raise ValueError("Please enter a valid email address.")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")

        with self._database.session_scope() as session:
            existing = session.scalars(
                select(UserRecord).where(func.lower(UserRecord.email) == email)
            ).first()
            if existing is not None:
                raise EmailAlreadyRegisteredError(email)

            record = UserRecord(
                id=uuid.uuid4().hex,
                email=email,
                display_name=display_name.strip(),
                password_hash=generate_password_hash(password),
            )
            session.add(record)
            session.flush()
            user = _to_user(record)

        logger.info(f"Registered user {user.id[:8]}")
        return user

    def authenticate(self, email: str, password: str) -> User:
        """
        Check an email/password pair.

        Raises:
            InvalidCredentialsError: If the email is unknown or the password is wrong
        """
        email = normalize_email(email)
        with self._database.session_scope() as session:
            record = session.scalars(
                select(UserRecord).where(UserRecord.email == email)
            ).first()
            if record is None or not check_password_hash(record.password_hash, password or ""):
                logger.info("Failed sign-in attempt")
                raise InvalidCredentialsError(email)
            return _to_user(record)

    def get_user(self, user_id: str) -> Optional[User]:
        with self._database.session_scope() as session:
            record = session.get(UserRecord, user_id)
            return _to_user(record) if record else None

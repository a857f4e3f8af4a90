"""
Project Library Backend - Auth Service
=======================================

What:  Account creation and credential checks.
How:   signup() creates a User and its personal Owner in one flush, so a user
       never exists without an owner. authenticate() verifies the password
       hash with passlib.
Who:   POST /api/auth/signup and POST /api/auth/login.
"""

import logging
import re

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from project_library.exceptions import (
    DatabaseError,
    DuplicateError,
    UnauthorizedError,
    ValidationError,
)
from project_library.models.owner import Owner, OwnerType
from project_library.models.user import User
from project_library.security import hash_password, verify_password

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
USERNAME_RE = re.compile(r"^[A-Za-z0-9_-]{3,20}$")
PASSWORD_MIN_LENGTH = 8


class AuthService:
    def validate_signup(self, email: str, username: str, password: str) -> None:
        if not email or not EMAIL_RE.match(email):
            raise ValidationError("Invalid email address", field="email")
        if not username or not USERNAME_RE.match(username):
            raise ValidationError(
                "Username must be 3-20 characters: letters, digits, underscores or hyphens",
                field="username",
            )
        if not password or len(password) < PASSWORD_MIN_LENGTH:
            raise ValidationError(
                f"Password must be at least {PASSWORD_MIN_LENGTH} characters",
                field="password",
            )

    async def signup(self, db: AsyncSession, email: str, username: str, password: str) -> User:
        """
        Create a user together with its personal Owner.

        Raises:
            ValidationError: Malformed email, username or password
            DuplicateError: Email or username already registered
            DatabaseError: Insert failed for another reason
        """
        email = (email or "").strip().lower()
        username = (username or "").strip()
        self.validate_signup(email, username, password)

        try:
            result = await db.execute(
                select(User).where(or_(User.email == email, User.username == username))
            )
            existing = result.scalars().first()
        except SQLAlchemyError as e:
            logger.error("Database error during signup lookup: %s", str(e))
            raise DatabaseError()

        if existing is not None:
            if existing.email == email:
                raise DuplicateError("An account with this email already exists", field="email")
            raise DuplicateError("This username is already taken", field="username")

        user = User(email=email, username=username, password_hash=hash_password(password))
        owner = Owner(type=OwnerType.USER, user=user)
        db.add_all([user, owner])

        try:
            await db.flush()
        except IntegrityError:
            # Lost a race with a concurrent signup for the same email/username
            raise DuplicateError("An account with this email or username already exists")
        except SQLAlchemyError as e:
            logger.error("Database error creating user %s: %s", username, str(e))
            raise DatabaseError(context={"username": username})

        logger.info("User created: %s (owner %s)", user.id, owner.id)
        return user

    async def authenticate(self, db: AsyncSession, email: str, password: str) -> User:
        """Return the user for valid credentials, else raise UnauthorizedError."""
        email = (email or "").strip().lower()
        try:
            result = await db.execute(select(User).where(User.email == email))
            user = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error during login: %s", str(e))
            raise DatabaseError()

        if user is None or not verify_password(password or "", user.password_hash):
            logger.info("Failed login attempt for %s", email)
            raise UnauthorizedError("Invalid email or password")
        return user


auth_service = AuthService()

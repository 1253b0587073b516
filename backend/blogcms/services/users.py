"""
User accounts: registration, password checks and JWT issuing.
"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Optional, Tuple

from jose import jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from blogcms.config import settings
from blogcms.exceptions import NotFoundError, UnauthenticatedError, ValidationError
from blogcms.models import Role, User, utcnow

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError(f"User {user_id} not found")
    return user


def register_user(
    db: Session,
    name: str,
    email: str,
    password: str,
    confirm_password: str,
    role: Role = Role.AUTHOR,
) -> User:
    """
    Create a new account.
    Don't commit here - let the caller handle the transaction.
    """
    name = (name or "").strip()
    email = normalize_email(email)
    if not name or not email or not password:
        raise ValidationError("Name, email and password are required")
    if password != confirm_password:
        raise ValidationError("Passwords do not match. Please enter the same password.")
    if get_user_by_email(db, email):
        raise ValidationError("Email already registered")

    user = User(
        name=name,
        email=email,
        password_hash=get_password_hash(password),
        role=role,
    )
    db.add(user)
    db.flush()
    logger.info(f"Registered user {user.id} with role {role.value}")
    return user


def authenticate_user(db: Session, email: str, password: str) -> User:
    """Return the user for valid credentials, raise otherwise."""
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        raise UnauthenticatedError("Invalid email or password")
    return user


def create_access_token(user: User) -> Tuple[str, datetime]:
    """Issue a JWT for `user`. Returns the token and its expiry."""
    expires_at = utcnow() + timedelta(hours=settings.jwt_expiration_hours)
    payload = {
        "sub": str(user.id),
        "role": user.role.value,
        "jti": str(uuid.uuid4()),
        "exp": expires_at,
        "iat": utcnow(),
    }
    token = jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALGORITHM)
    return token, expires_at


def ensure_admin(db: Session):
    """Create the bootstrap admin from settings if it does not exist yet."""
    if not settings.admin_email or not settings.admin_password:
        return

    if get_user_by_email(db, settings.admin_email):
        return

    register_user(
        db,
        name=settings.admin_name,
        email=settings.admin_email,
        password=settings.admin_password,
        confirm_password=settings.admin_password,
        role=Role.ADMIN,
    )
    db.commit()
    logger.info(f"Bootstrap admin {settings.admin_email} created")

"""
Dependencies for FastAPI injection.
Includes JWT authentication and ownership checks.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from blogcms.config import settings
from blogcms.database import get_db
from blogcms.exceptions import ForbiddenError, UnauthenticatedError
from blogcms.models import Post, TokenBlacklist, User
from blogcms.services.users import JWT_ALGORITHM

# Bearer authentication scheme; missing credentials are handled below
# so they surface as 401 rather than 403
security = HTTPBearer(auto_error=False)


def _decode_token(token: str, db: Session) -> dict:
    """
    Validate a JWT and return its claims.
    Checks:
    - Valid signature and not expired
    - Token not in blacklist
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[JWT_ALGORITHM])
    except JWTError:
        raise UnauthenticatedError("Could not validate credentials")

    jti = payload.get("jti")
    if jti is None or payload.get("sub") is None:
        raise UnauthenticatedError("Could not validate credentials")

    blacklisted = (
        db.query(TokenBlacklist).filter(TokenBlacklist.jti == jti).first()
    )
    if blacklisted:
        raise UnauthenticatedError("Token has been revoked")

    return payload


def _user_from_credentials(
    credentials: Optional[HTTPAuthorizationCredentials], db: Session
) -> Optional[User]:
    if credentials is None:
        return None

    payload = _decode_token(credentials.credentials, db)
    try:
        user_id = int(payload["sub"])
    except ValueError:
        raise UnauthenticatedError("Could not validate credentials")

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise UnauthenticatedError("Could not validate credentials")
    return user


def get_token_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> dict:
    if credentials is None:
        raise UnauthenticatedError("Not authenticated")
    return _decode_token(credentials.credentials, db)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Authenticated caller, or 401."""
    user = _user_from_credentials(credentials, db)
    if user is None:
        raise UnauthenticatedError("Not authenticated")
    return user


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Authenticated caller if a token was sent, None for anonymous requests."""
    return _user_from_credentials(credentials, db)


def can_manage_post(user: Optional[User], post: Post) -> bool:
    """Admins manage everything; authors manage their own posts."""
    if user is None:
        return False
    return user.is_admin or post.author_id == user.id


def require_post_manager(user: Optional[User], post: Post, action: str = "modify this post"):
    if not can_manage_post(user, post):
        raise ForbiddenError(f"You are not allowed to {action}")

"""
Authentication routes.
Registration, login with email and password, logout via token blacklist.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from blogcms.config import settings
from blogcms.database import get_db
from blogcms.dependencies import get_current_user, get_token_claims
from blogcms.models import TokenBlacklist, User
from blogcms.rate_limiter import limiter
from blogcms.schemas import LoginRequest, LoginResponse, RegisterRequest, UserInfo
from blogcms.services.users import authenticate_user, create_access_token, register_user

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserInfo, status_code=status.HTTP_201_CREATED)
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """Create an AUTHOR account."""
    user = register_user(
        db,
        name=request.name,
        email=request.email,
        password=request.password,
        confirm_password=request.confirm_password,
    )
    db.commit()
    db.refresh(user)
    return user


@router.post("/login", response_model=LoginResponse)
@limiter.limit(f"{settings.login_rate_limit}/minute")
def login(request: Request, credentials: LoginRequest, db: Session = Depends(get_db)):
    """
    Authenticate with email and password and return a JWT token.
    """
    user = authenticate_user(db, credentials.email, credentials.password)
    token, expires_at = create_access_token(user)
    return LoginResponse(
        token=token,
        expires_at=expires_at,
        user=UserInfo.model_validate(user),
    )


@router.post("/logout")
def logout(claims: dict = Depends(get_token_claims), db: Session = Depends(get_db)):
    """
    Invalidate token by adding jti to blacklist.
    """
    expires_at = datetime.fromtimestamp(claims["exp"], timezone.utc).replace(tzinfo=None)
    db.add(TokenBlacklist(jti=claims["jti"], expires_at=expires_at))
    db.commit()

    return {"message": "Successfully logged out"}


@router.get("/me", response_model=UserInfo)
def get_me(user: User = Depends(get_current_user)):
    """
    Return the authenticated user.
    """
    return user

"""
Authentication API endpoints.

Handles registration, password login and Google sign-in, all issuing JWTs.
"""

import re
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Header, status
from pydantic import BaseModel, ValidationError, field_validator
from sqlalchemy.orm import Session

from smartcv.api.deps import get_identity_verifier
from smartcv.core.errors import BadRequest, LoginError
from smartcv.core.security import (
    create_access_token,
    get_password_hash,
    verify_password,
)
from smartcv.db.session import get_db
from smartcv.models import User
from smartcv.services import GoogleIdentityVerifier

router = APIRouter()

EMAIL_PATTERN = r"^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$"


# ============== Pydantic Schemas ==============


class UserRegister(BaseModel):
    """Schema for user registration."""

    email: str
    password: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Validate email format."""
        if not re.match(EMAIL_PATTERN, v):
            raise ValueError("Invalid email format")
        return v.lower()

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v


class UserLogin(BaseModel):
    """Login body; fields are optional so missing ones map to LoginError."""

    email: Optional[str] = None
    password: Optional[str] = None


class UserResponse(BaseModel):
    """Schema for user response (without password)."""

    id: int
    email: str

    class Config:
        from_attributes = True


class Token(BaseModel):
    """Schema for JWT token response."""

    access_token: str


# ============== Helper Functions ==============


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Get a user by email address."""
    return db.query(User).filter(User.email == email.lower()).first()


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Authenticate a password account by email and password."""
    user = get_user_by_email(db, email)
    if not user or not user.hashed_password:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


def issue_token(user: User) -> Token:
    return Token(access_token=create_access_token(data={"sub": str(user.id)}))


# ============== API Endpoints ==============


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserRegister, db: Session = Depends(get_db)):
    """Register a new password account."""
    if get_user_by_email(db, user_data.email):
        raise BadRequest("Email already registered")

    new_user = User(
        email=user_data.email,
        hashed_password=get_password_hash(user_data.password),
        auth_provider="password",
    )

    db.add(new_user)
    db.commit()
    db.refresh(new_user)

    return new_user


@router.post("/login", response_model=Token)
async def login(payload: Any = Body(None), db: Session = Depends(get_db)):
    """
    Login and get a JWT access token.

    Send ``{"email": ..., "password": ...}`` as JSON. Any malformed body is a
    LoginError (401), never a 400.
    """
    try:
        credentials = UserLogin.model_validate(payload or {})
    except ValidationError:
        raise LoginError("Email is required") from None

    if not credentials.email:
        raise LoginError("Email is required")

    if not credentials.password:
        raise LoginError("Password is required")

    user = authenticate_user(db, credentials.email, credentials.password)
    if not user:
        raise LoginError("Invalid email or password")

    return issue_token(user)


@router.post("/auth/google", response_model=Token)
def google_login(
    token: Optional[str] = Header(None),
    db: Session = Depends(get_db),
    verifier: GoogleIdentityVerifier = Depends(get_identity_verifier),
):
    """
    Sign in with a Google ID token sent in the ``token`` header.

    The account is created on first sign-in. Verification errors propagate
    and are reported as a 500.
    """
    claims = verifier.verify(token or "")
    email = claims["email"].lower()

    user = get_user_by_email(db, email)
    if user is None:
        user = User(email=email, hashed_password=None, auth_provider="google")
        db.add(user)
        db.commit()
        db.refresh(user)

    return issue_token(user)

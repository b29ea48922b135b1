"""
Authentication router — email/password sign-in, OTP verification,
password reset, own profile.

Endpoints:
    POST  /api/auth/register         → create a USER account, return JWT
    POST  /api/auth/login            → exchange credentials for a JWT
    POST  /api/auth/logout           → clear the JWT cookie
    POST  /api/auth/send-otp         → mail a 4-digit verification code
    POST  /api/auth/verify-otp       → mark the email verified
    POST  /api/auth/forgot-password  → mail a one-hour reset link
    POST  /api/auth/reset-password   → set a new password from a reset token
    GET   /api/auth/profile          → own profile
    PATCH /api/auth/profile          → update own profile
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.models.password_reset_token import PasswordResetToken
from app.models.user import User, UserRole
from app.schemas.user import (
    AuthResponse,
    ForgotPassword,
    OTPRequest,
    OTPVerify,
    ProfileUpdate,
    ResetPassword,
    UserCreate,
    UserLogin,
    UserOut,
)
from app.services.notifications import Mailer, MailDeliveryError, get_mailer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

COOKIE_KEY = "token"
MIN_PASSWORD_LENGTH = 8
RESET_SENT_MESSAGE = "If the email exists, a reset link was sent."

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# ═══════════════════════════════════════════════════════════════
#  Helpers
# ═══════════════════════════════════════════════════════════════

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)


def create_access_token(user: User) -> str:
    """Create a signed JWT with an expiry claim."""
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    to_encode = {
        "sub": str(user.id),
        "email": user.email,
        "role": getattr(user.role, "value", user.role),
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def _set_auth_cookie(response: Response, token: str) -> Response:
    """Attach the JWT cookie to a response."""
    response.set_cookie(
        key=COOKIE_KEY,
        value=token,
        httponly=True,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        samesite="lax",
        secure=not settings.DEBUG,
    )
    return response


def _auth_response(response: Response, user: User) -> AuthResponse:
    token = create_access_token(user)
    _set_auth_cookie(response, token)
    return AuthResponse(user=UserOut.model_validate(user), access_token=token)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _extract_token(request: Request) -> Optional[str]:
    """Bearer header first, then the cookie."""
    header = request.headers.get("authorization", "")
    if header.lower().startswith("bearer "):
        token = header[7:].strip()
        if token:
            return token
    return request.cookies.get(COOKIE_KEY)


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """
    Extract the JWT from the bearer header or cookie and return the User.
    Returns None when no valid token is present or the account is inactive.
    """
    token = _extract_token(request)
    if not token:
        return None
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
        user_id: int = int(payload.get("sub", 0))
        if not user_id:
            return None
    except (JWTError, ValueError):
        return None

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user or not user.is_active:
        return None
    return user


async def require_user(current_user: Optional[User] = Depends(get_current_user)) -> User:
    if not current_user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return current_user


async def require_admin(current_user: User = Depends(require_user)) -> User:
    if current_user.role != UserRole.ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return current_user


# ═══════════════════════════════════════════════════════════════
#  Registration / login
# ═══════════════════════════════════════════════════════════════

@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: UserCreate,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    if not payload.password or not payload.first_name.strip() or not payload.last_name.strip():
        raise HTTPException(status_code=400, detail="Missing required fields")

    existing = await db.execute(select(User).where(User.email == payload.email))
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=400, detail="User already exists")

    employee_id = (payload.employee_id or "").strip() or None
    if employee_id:
        taken = await db.execute(select(User).where(User.employee_id == employee_id))
        if taken.scalar_one_or_none():
            raise HTTPException(status_code=400, detail="Employee ID already exists")

    user = User(
        email=payload.email,
        password_hash=hash_password(payload.password),
        first_name=payload.first_name.strip(),
        last_name=payload.last_name.strip(),
        employee_id=employee_id,
        department=payload.department or None,
        role=UserRole.USER,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    logger.info(f"Registered user {user.id} <{user.email}>")
    return _auth_response(response, user)


@router.post("/login", response_model=AuthResponse)
async def login(
    payload: UserLogin,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(User).where(User.email == payload.email))
    user = result.scalar_one_or_none()
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if not user.is_active:
        raise HTTPException(status_code=401, detail="Account is disabled")
    return _auth_response(response, user)


@router.post("/logout")
async def logout(response: Response):
    """Clear the auth cookie."""
    response.delete_cookie(key=COOKIE_KEY)
    return {"message": "Logged out"}


# ═══════════════════════════════════════════════════════════════
#  Email verification (OTP)
# ═══════════════════════════════════════════════════════════════

@router.post("/send-otp")
async def send_otp(
    payload: OTPRequest,
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    result = await db.execute(select(User).where(User.email == payload.email))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    user.otp = f"{secrets.randbelow(9000) + 1000}"
    user.otp_expires_at = datetime.now(timezone.utc) + timedelta(minutes=settings.OTP_EXPIRE_MINUTES)
    await db.commit()

    try:
        await mailer.send_otp(user.email, user.otp, settings.OTP_EXPIRE_MINUTES)
    except MailDeliveryError as e:
        # The code is stored; the user can ask for it again.
        logger.error(f"Failed to send OTP email to {user.email}: {e}")

    return {"message": "OTP sent successfully"}


@router.post("/verify-otp")
async def verify_otp(
    payload: OTPVerify,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(User).where(User.email == payload.email))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    if user.email_verified:
        return {"message": "Email already verified", "verified": True}

    bypass = settings.OTP_BYPASS_CODE
    if not (bypass and payload.otp == bypass):
        if not user.otp or user.otp != payload.otp:
            raise HTTPException(status_code=400, detail="Invalid OTP")
        expires_at = _as_utc(user.otp_expires_at)
        if not expires_at or datetime.now(timezone.utc) > expires_at:
            raise HTTPException(status_code=400, detail="OTP has expired")

    user.email_verified = True
    user.otp = None
    user.otp_expires_at = None
    await db.flush()
    await db.refresh(user)

    auth = _auth_response(response, user)
    return {
        "message": "Email verified successfully",
        "verified": True,
        "user": auth.user,
        "access_token": auth.access_token,
    }


# ═══════════════════════════════════════════════════════════════
#  Password reset
# ═══════════════════════════════════════════════════════════════

@router.post("/forgot-password")
async def forgot_password(
    payload: ForgotPassword,
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    result = await db.execute(select(User).where(User.email == payload.email))
    user = result.scalar_one_or_none()
    # Same answer either way so addresses cannot be enumerated.
    if not user:
        return {"message": RESET_SENT_MESSAGE}

    await db.execute(delete(PasswordResetToken).where(PasswordResetToken.user_id == user.id))
    token = secrets.token_hex(32)
    db.add(
        PasswordResetToken(
            token=token,
            user_id=user.id,
            expires_at=datetime.now(timezone.utc)
            + timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES),
        )
    )
    await db.commit()

    reset_url = f"{settings.APP_URL.rstrip('/')}/reset-password/{token}"
    await mailer.send_password_reset(user.email, reset_url, settings.PASSWORD_RESET_EXPIRE_MINUTES)
    logger.info(f"Password reset requested for user {user.id}")
    return {"message": RESET_SENT_MESSAGE}


@router.post("/reset-password")
async def reset_password(
    payload: ResetPassword,
    db: AsyncSession = Depends(get_db),
):
    if not payload.token or not payload.password:
        raise HTTPException(status_code=400, detail="Token and password are required")
    if len(payload.password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(status_code=400, detail="Password must be at least 8 characters")

    result = await db.execute(
        select(PasswordResetToken).where(PasswordResetToken.token == payload.token)
    )
    record = result.scalar_one_or_none()
    if not record or record.used or _as_utc(record.expires_at) < datetime.now(timezone.utc):
        raise HTTPException(status_code=400, detail="Invalid or expired token")

    user_result = await db.execute(select(User).where(User.id == record.user_id))
    user = user_result.scalar_one()
    user.password_hash = hash_password(payload.password)
    record.used = True
    await db.commit()

    logger.info(f"Password reset completed for user {user.id}")
    return {"message": "Password has been reset successfully"}


# ═══════════════════════════════════════════════════════════════
#  Own profile
# ═══════════════════════════════════════════════════════════════

@router.get("/profile", response_model=UserOut)
async def read_profile(current_user: User = Depends(require_user)):
    """Return the authenticated user's profile."""
    return current_user


@router.patch("/profile", response_model=UserOut)
async def update_profile(
    payload: ProfileUpdate,
    current_user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    if not (payload.first_name or "").strip() or not (payload.last_name or "").strip():
        raise HTTPException(status_code=400, detail="First name and last name are required")

    current_user.first_name = payload.first_name.strip()
    current_user.last_name = payload.last_name.strip()
    current_user.phone = payload.phone or None
    current_user.department = payload.department or None
    current_user.position = payload.position or None
    current_user.location = payload.location or None
    current_user.bio = payload.bio or None
    current_user.avatar_url = payload.avatar_url or None
    current_user.skills = payload.skills or []
    await db.flush()
    await db.refresh(current_user)
    return current_user

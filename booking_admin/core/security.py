from datetime import datetime, timezone, timedelta
from typing import Optional
from jose import jwt, JWTError
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from passlib.context import CryptContext
from sqlalchemy.future import select
from booking_admin.db import store
from booking_admin.db.session import get_db
from booking_admin.models.user import User
from booking_admin.core.config import settings
from booking_admin.core.enums import UserRole
from booking_admin.core.errors import AuthenticationError, PermissionDeniedError

JWT_ALGORITHM = "HS256"

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except Exception:
        return False

def create_access_token(subject: str, role: str, expires_minutes: int | None = None) -> str:
    expires = expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
    expire_dt = datetime.now(timezone.utc) + timedelta(minutes=expires)
    to_encode = {"sub": str(subject), "role": str(role), "exp": expire_dt}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=JWT_ALGORITHM)

def decode_access_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError:
        raise AuthenticationError("Invalid or expired token")
    if payload.get("sub") is None:
        raise AuthenticationError("Invalid or expired token")
    return payload

async def get_current_user(token: Optional[str] = Depends(oauth2_scheme), db: AsyncSession = Depends(get_db)) -> User:
    if not token:
        raise AuthenticationError("Authorization header required")
    payload = decode_access_token(token)
    res = await store.execute(db, select(User).where(User.id == str(payload["sub"])), "select_current_user")
    user = res.scalars().first()
    if not user:
        raise AuthenticationError("Invalid or expired token")
    return user

def require_roles(*roles: UserRole):
    """Dependency factory: the stored role of the caller must be one of ``roles``."""
    allowed = set(roles)

    async def _check(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            if allowed == {UserRole.ADMIN}:
                raise PermissionDeniedError("Admin permissions required")
            raise PermissionDeniedError("Insufficient permissions")
        return user

    return _check

require_admin = require_roles(UserRole.ADMIN)

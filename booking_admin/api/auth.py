import logging
from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession
from booking_admin.db import store
from booking_admin.schemas.auth import TokenOut
from booking_admin.models.user import User
from booking_admin.db.session import get_db
from booking_admin.core.security import create_access_token, verify_password
from booking_admin.core.errors import AuthenticationError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenOut)
async def login(form_data: OAuth2PasswordRequestForm = Depends(), db: AsyncSession = Depends(get_db)):
    res = await store.execute(db, select(User).where(User.email == form_data.username), "select_user")
    user = res.scalars().first()
    if not user or not verify_password(form_data.password, user.password_hash):
        logger.info(f"Failed login for {form_data.username}")
        raise AuthenticationError("Invalid credentials")

    token = create_access_token(str(user.id), user.role)
    return {"access_token": token}

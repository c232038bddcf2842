from sqlalchemy import Column, String, Enum
from booking_admin.models.base import BaseModel
from booking_admin.core.enums import UserRole


class User(BaseModel):
    __tablename__ = "users"
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.CUSTOMER)

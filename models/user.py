from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, DateTime, String, func

from enums.user_role import UserRole
from models.base import Base, enum_column


class User(Base):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True)
    email = Column(String, nullable=False, unique=True)
    role = Column(enum_column(UserRole, 'user_role'), nullable=False, default=UserRole.USER)
    full_name = Column(String, nullable=True)
    address = Column(String, nullable=True)
    created_at = Column(DateTime, default=func.now())


class UserDTO(BaseModel):
    id: int | None = None
    email: str | None = None
    role: UserRole | None = None
    full_name: str | None = None
    address: str | None = None
    created_at: datetime | None = None

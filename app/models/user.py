# app/models/user.py
import uuid
from datetime import datetime
from sqlalchemy import Column, Text, String, DateTime, Enum, Uuid
from sqlalchemy.orm import relationship
from app.db.base import Base
from app.models.enums import AppRole


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(60), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(Text, nullable=False)
    address = Column(String(400))
    role = Column(Enum(AppRole, name="app_role"), nullable=False, default=AppRole.user)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    stores = relationship("Store", back_populates="owner", cascade="all, delete-orphan")
    ratings = relationship("Rating", back_populates="user", cascade="all, delete-orphan")

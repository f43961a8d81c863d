"""
BidHub Server - User Database Model

User model for marketplace accounts (clients, consultants and admins).
Stores credentials and account status.
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, Boolean
from sqlalchemy.orm import relationship

from models.database.base import Base


class User(Base):
    """
    Users table - stores user credentials and account info
    """
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String, unique=True, nullable=False)
    password_hash = Column(String, nullable=True)  # NULL for accounts created through an external provider
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    role = Column(String, nullable=False, default="client")  # 'client', 'consultant' or 'admin'
    status = Column(String, nullable=False, default="active")  # 'active', 'pending', 'suspended'
    email_verified = Column(Boolean, default=False)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    last_login = Column(DateTime, nullable=True)

    # Relationship to admin role assignments
    admin_roles = relationship("AdminRole", back_populates="user")

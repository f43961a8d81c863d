"""
BidHub Server - Platform Setting Database Model

Platform settings stored as key-value pairs, grouped by category.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime

from models.database.base import Base


class PlatformSetting(Base):
    """
    Platform settings table - stores server configuration as key-value pairs
    """
    __tablename__ = "platform_settings"

    key = Column(String, primary_key=True)
    value = Column(String, nullable=False)
    category = Column(String, nullable=False, default="general")
    description = Column(String, nullable=True)
    updated_by = Column(String, nullable=True)  # User ID of the admin who last changed it
    updated_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    def ToDict(self) -> dict:
        return {
            "key": self.key,
            "value": self.value,
            "category": self.category,
            "description": self.description,
            "updatedBy": self.updated_by,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None
        }

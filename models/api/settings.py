"""
BidHub Server - Settings API Models

Pydantic models for platform settings endpoints.
"""

from typing import Optional
from pydantic import BaseModel


class PlatformSettingRequest(BaseModel):
    key: str
    value: str
    category: Optional[str] = None
    description: Optional[str] = None

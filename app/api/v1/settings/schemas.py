from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field

from app.core.schemas import CamelModel


class SchoolSettingsUpdate(CamelModel):
    """Editable school profile. code is not accepted: it is fixed at provisioning."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None
    country: Optional[str] = Field(None, max_length=100)
    currency_code: Optional[str] = Field(None, min_length=1, max_length=10)
    currency_symbol: Optional[str] = Field(None, min_length=1, max_length=10)
    date_format: Optional[str] = Field(None, min_length=1, max_length=20)
    timezone: Optional[str] = Field(None, min_length=1, max_length=100)


class SchoolSettingsResponse(CamelModel):
    id: UUID
    code: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    country: Optional[str] = None
    currency_code: str
    currency_symbol: str
    date_format: str
    timezone: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import EmailStr, Field

from app.core.schemas import CamelModel


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    # School code; required only when the same email exists in several schools
    school_code: Optional[str] = None


class CurrentUser(CamelModel):
    """Resolved request context. school_id always comes from here, never from the payload."""

    id: UUID
    school_id: UUID
    school_name: str
    school_code: str
    role_id: Optional[UUID] = None
    role: Optional[str] = None
    role_slug: Optional[str] = None
    permissions: List[str] = []


class LoginResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: CurrentUser


# --- Roles ---
class PermissionResponse(CamelModel):
    id: UUID
    name: str
    slug: str
    module: str
    description: Optional[str] = None


class RoleCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    permission_ids: List[UUID] = []


class RoleUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None


class RolePermissionsUpdate(CamelModel):
    permission_ids: List[UUID]


class RoleResponse(CamelModel):
    id: UUID
    name: str
    slug: str
    description: Optional[str] = None
    is_system: bool
    permissions: List[str] = []
    user_count: int = 0
    created_at: datetime

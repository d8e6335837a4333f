"""
User schemas - what user data is exposed in API responses (never the password).
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr


class UserOut(BaseModel):
    """
    Schema for user data in API responses.

    Used by POST /auth/register and GET /users/me.

    Example response:
    {
        "id": "550e8400-e29b-41d4-a716-446655440000",
        "email": "sam@example.com",
        "display_name": "Sam",
        "is_active": true,
        "created_at": "2026-01-12T10:30:00Z"
    }
    """
    # from_attributes: routes return the User ORM object directly
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: EmailStr
    display_name: str | None
    is_active: bool
    created_at: datetime

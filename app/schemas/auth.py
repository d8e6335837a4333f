"""
Auth schemas - request/response bodies for registration and login.
"""

from pydantic import BaseModel, EmailStr, Field


class UserRegister(BaseModel):
    """
    Schema for POST /auth/register request body.

    Example request body:
    {
        "email": "sam@example.com",
        "password": "correct horse battery",
        "display_name": "Sam"
    }
    """
    email: EmailStr

    # password: plaintext from the client, hashed before storing
    password: str = Field(..., min_length=8)

    # display_name: shown as the actor in the activity log
    display_name: str | None = None


class UserLogin(BaseModel):
    """Schema for POST /auth/login request body."""
    email: EmailStr
    password: str


class Token(BaseModel):
    """
    Schema for POST /auth/login response.

    Clients send it back as: Authorization: Bearer <access_token>
    """
    access_token: str
    token_type: str = "bearer"

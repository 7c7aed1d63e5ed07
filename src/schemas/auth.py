"""Authentication schemas."""

from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints

from src.models.enums import UserRole
from src.schemas.base import ApiModel
from src.validation import NormalizedEmail, StrongPassword

PersonName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]


class UserRegister(ApiModel):
    """User registration request."""

    email: NormalizedEmail
    password: StrongPassword
    first_name: PersonName | None = None
    last_name: PersonName | None = None
    role: UserRole = UserRole.CLIENT


class UserLogin(ApiModel):
    """User login request."""

    email: NormalizedEmail
    password: str = Field(..., min_length=1)


class GoogleProfile(BaseModel):
    """Subset of the Google userinfo payload used for sign-in."""

    id: str
    email: str | None = None
    given_name: str | None = None
    family_name: str | None = None
    picture: str | None = None


class MessageResponse(ApiModel):
    message: str

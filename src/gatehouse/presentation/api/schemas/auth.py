"""Authentication schemas for request/response models.

Payloads use camelCase on the wire (``firstName``); snake_case names are
accepted too.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from gatehouse_identity import Email, User

CAMEL_CASE_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    str_strip_whitespace=True,
)


def _validate_email(value: str) -> str:
    return Email(value).value


class RegisterRequest(BaseModel):
    """Request schema for user registration."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., description="User's email address")
    password: str = Field(
        ...,
        min_length=8,
        description="Password (at least 8 characters)",
    )

    model_config = ConfigDict(
        **CAMEL_CASE_CONFIG,
        json_schema_extra={
            "example": {
                "firstName": "Ada",
                "lastName": "Lovelace",
                "email": "ada@example.com",
                "password": "securepassword123",
            },
        },
    )

    check_email = field_validator("email")(_validate_email)


class LoginRequest(BaseModel):
    """Request schema for user login."""

    email: str
    password: str = Field(..., min_length=1)

    model_config = ConfigDict(
        **CAMEL_CASE_CONFIG,
        json_schema_extra={
            "example": {
                "email": "ada@example.com",
                "password": "securepassword123",
            },
        },
    )

    check_email = field_validator("email")(_validate_email)


class IdResponse(BaseModel):
    """Id of the identity a session was opened for."""

    id: int


class UserResponse(BaseModel):
    """Response schema for user data. Never carries the password hash."""

    id: int
    email: str
    first_name: str
    last_name: str
    role: str
    tenant_id: int | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role.value,
            tenant_id=user.tenant_id,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )

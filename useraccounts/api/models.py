"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Wire names are camelCase (userId, apiToken); Python attributes are snake_case.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class RegisterUserRequest(BaseModel):
    """Request model for user registration."""

    email: EmailStr
    name: str = Field(..., min_length=1, description="Display name")
    password: str = Field(..., min_length=1, description="Plaintext password")


class UpdateUserRequest(BaseModel):
    """Request model for a partial user update. Blank fields are ignored."""

    email: EmailStr | None = None
    name: str | None = None
    password: str | None = None

    @field_validator("email", "name", "password", mode="before")
    @classmethod
    def blank_as_missing(cls, value: object) -> object:
        if isinstance(value, str) and value.strip() == "":
            return None
        return value


class UserResponse(BaseModel):
    """Public projection of a user."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(..., alias="userId")
    user_name: str = Field(..., alias="userName")
    user_email: str = Field(..., alias="userEmail")


class ChangePasswordRequest(BaseModel):
    """Request model for rotating the caller's password."""

    password: str = Field(..., min_length=1)


class RotateApiTokenRequest(BaseModel):
    """Request model for rotating the caller's API token."""

    model_config = ConfigDict(populate_by_name=True)

    api_token: str | None = Field(
        default=None,
        alias="apiToken",
        description='Must be "apiTokenSet" to confirm the rotation',
    )


class ApiTokenResponse(BaseModel):
    """Response model carrying a freshly issued API token."""

    model_config = ConfigDict(populate_by_name=True)

    api_token: str = Field(..., alias="apiToken")


class ConfirmEmailResponse(BaseModel):
    """Response model for a followed confirmation link."""

    message: str
    email: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str

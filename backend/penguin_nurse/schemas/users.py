from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from penguin_nurse.core.security import FORBIDDEN_PASSWORDS
from penguin_nurse.schemas.common import blank_to_none, partial_model


def _check_email(v: str) -> str:
    v = v.strip()
    if "@" not in v:
        raise ValueError("email must contain @")
    return v


def _check_password(v: str) -> str:
    if not v:
        raise ValueError("password must not be empty")
    if v in FORBIDDEN_PASSWORDS:
        raise ValueError("password is too easy to guess")
    return v


class LoginRequest(BaseModel):
    username: str
    password: str


class PasswordField(BaseModel):
    password: str

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        return _check_password(v)


class UserFields(BaseModel):
    username: str = Field(min_length=1, max_length=255)
    full_name: str = Field(min_length=1, max_length=255)
    oidc_id: Optional[str] = None
    email: str
    is_admin: bool = False

    @field_validator("username", "full_name", mode="before")
    @classmethod
    def _strip(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("oidc_id", mode="before")
    @classmethod
    def _blank_oidc(cls, v: Any) -> Any:
        return blank_to_none(v)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _check_email(v)


class NewUser(UserFields, PasswordField):
    pass


ChangeUser = partial_model(NewUser, "ChangeUser")


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    full_name: str
    oidc_id: Optional[str] = None
    email: str
    is_admin: bool
    created_at: datetime
    updated_at: datetime

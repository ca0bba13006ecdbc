from datetime import datetime

from pydantic import EmailStr

from app.models.enums import Role
from app.schemas.base import APIModel, NonEmptyStr, RequestModel, UpdateModel
from app.schemas.common import PageQuery


class UserCreate(RequestModel):
    id: NonEmptyStr
    name: NonEmptyStr
    email: EmailStr
    email_verified: bool = False
    image: str | None = None
    image_ref: str | None = None
    role: Role = Role.STUDENT


class UserUpdate(UpdateModel):
    nullable_fields = frozenset({"image", "image_ref"})

    name: NonEmptyStr | None = None
    email: EmailStr | None = None
    email_verified: bool | None = None
    image: str | None = None
    image_ref: str | None = None
    role: Role | None = None


class UserRead(APIModel):
    id: str
    name: str
    email: str
    email_verified: bool
    image: str | None = None
    image_ref: str | None = None
    role: Role
    created_at: datetime
    updated_at: datetime


class UserListQuery(PageQuery):
    role: Role | None = None
    search: NonEmptyStr | None = None

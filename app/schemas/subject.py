from datetime import datetime

from pydantic import Field

from app.schemas.base import MAX_INT, APIModel, NonEmptyStr, RequestModel, UpdateModel
from app.schemas.common import PageQuery
from app.schemas.department import DepartmentRead


class SubjectCreate(RequestModel):
    department_id: int = Field(gt=0, le=MAX_INT)
    code: NonEmptyStr
    name: NonEmptyStr
    description: str | None = None


class SubjectUpdate(UpdateModel):
    nullable_fields = frozenset({"description"})

    department_id: int | None = Field(None, gt=0, le=MAX_INT)
    code: NonEmptyStr | None = None
    name: NonEmptyStr | None = None
    description: str | None = None


class SubjectRead(APIModel):
    id: int
    department_id: int
    code: str
    name: str
    description: str | None = None
    created_at: datetime
    updated_at: datetime


class SubjectDetail(SubjectRead):
    department: DepartmentRead


class SubjectListQuery(PageQuery):
    search: NonEmptyStr | None = None
    department_id: int | None = Field(None, gt=0, le=MAX_INT)

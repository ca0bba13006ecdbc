from datetime import datetime
from typing import Literal

from app.schemas.base import APIModel, NonEmptyStr, RequestModel, UpdateModel
from app.schemas.common import PageQuery


class DepartmentCreate(RequestModel):
    code: NonEmptyStr
    name: NonEmptyStr
    description: str | None = None


class DepartmentUpdate(UpdateModel):
    nullable_fields = frozenset({"description"})

    code: NonEmptyStr | None = None
    name: NonEmptyStr | None = None
    description: str | None = None


class DepartmentRead(APIModel):
    id: int
    code: str
    name: str
    description: str | None = None
    created_at: datetime
    updated_at: datetime


class DepartmentListItem(DepartmentRead):
    total_subjects: int

    @classmethod
    def from_row(cls, department, total_subjects: int) -> "DepartmentListItem":
        return cls(
            **DepartmentRead.model_validate(department).model_dump(),
            total_subjects=total_subjects or 0,
        )


class DepartmentTotals(APIModel):
    subjects: int
    classes: int
    enrolled_students: int


class DepartmentDetail(APIModel):
    department: DepartmentRead
    totals: DepartmentTotals


class DepartmentListQuery(PageQuery):
    search: NonEmptyStr | None = None


class DepartmentUsersQuery(PageQuery):
    role: Literal["teacher", "student"]

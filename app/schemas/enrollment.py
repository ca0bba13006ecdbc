from datetime import datetime

from pydantic import AliasChoices, Field

from app.schemas.base import MAX_INT, APIModel, NonEmptyStr, RequestModel, UpdateModel
from app.schemas.common import PageQuery
from app.schemas.school_class import ClassRead
from app.schemas.user import UserRead


class EnrollmentCreate(RequestModel):
    class_id: int = Field(gt=0, le=MAX_INT)


class EnrollmentJoin(RequestModel):
    invite_code: NonEmptyStr


class EnrollmentUpdate(UpdateModel):
    class_id: int | None = Field(None, gt=0, le=MAX_INT)
    student_id: NonEmptyStr | None = None


class EnrollmentRead(APIModel):
    id: int
    student_id: str
    class_id: int
    enrolled_at: datetime
    updated_at: datetime


class EnrollmentDetail(EnrollmentRead):
    school_class: ClassRead = Field(
        validation_alias=AliasChoices("school_class", "class"),
        serialization_alias="class",
    )
    student: UserRead


class EnrollmentListQuery(PageQuery):
    class_id: int | None = Field(None, gt=0, le=MAX_INT)
    student_id: NonEmptyStr | None = None

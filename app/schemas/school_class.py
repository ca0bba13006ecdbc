from datetime import datetime
from typing import Annotated

from pydantic import Field, StringConstraints, model_validator

from app.models.enums import ClassStatus
from app.models.school_class import DEFAULT_CAPACITY
from app.schemas.base import MAX_INT, APIModel, NonEmptyStr, RequestModel, UpdateModel
from app.schemas.common import PageQuery
from app.schemas.subject import SubjectRead
from app.schemas.user import UserRead

TimeOfDay = Annotated[str, StringConstraints(pattern=r"^([01]\d|2[0-3]):[0-5]\d$")]


class Schedule(RequestModel):
    day: NonEmptyStr
    start_time: TimeOfDay
    end_time: TimeOfDay

    @model_validator(mode="after")
    def check_times(self):
        # zero-padded HH:MM compares correctly as text
        if self.end_time <= self.start_time:
            raise ValueError("endTime must be after startTime")
        return self


def schedules_to_json(schedules: list[Schedule] | None) -> list[dict]:
    return [s.model_dump(by_alias=True) for s in schedules or []]


class ClassCreate(RequestModel):
    name: NonEmptyStr
    subject_id: int = Field(gt=0, le=MAX_INT)
    teacher_id: NonEmptyStr
    description: str | None = None
    banner_url: str | None = None
    banner_image_ref: str | None = None
    capacity: int = Field(DEFAULT_CAPACITY, ge=1, le=MAX_INT)
    status: ClassStatus = ClassStatus.ACTIVE
    schedules: list[Schedule] = []


class ClassUpdate(UpdateModel):
    nullable_fields = frozenset({"description", "banner_url", "banner_image_ref"})

    name: NonEmptyStr | None = None
    subject_id: int | None = Field(None, gt=0, le=MAX_INT)
    teacher_id: NonEmptyStr | None = None
    description: str | None = None
    banner_url: str | None = None
    banner_image_ref: str | None = None
    capacity: int | None = Field(None, ge=1, le=MAX_INT)
    status: ClassStatus | None = None
    schedules: list[Schedule] | None = None


class ClassRead(APIModel):
    id: int
    name: str
    invite_code: str
    subject_id: int
    teacher_id: str
    description: str | None = None
    banner_url: str | None = None
    banner_image_ref: str | None = None
    capacity: int
    status: ClassStatus
    schedules: list[Schedule]
    created_at: datetime
    updated_at: datetime


class ClassDetail(ClassRead):
    subject: SubjectRead
    teacher: UserRead


class ClassListQuery(PageQuery):
    search: NonEmptyStr | None = None
    subject_id: int | None = Field(None, gt=0, le=MAX_INT)
    teacher_id: NonEmptyStr | None = None
    status: ClassStatus | None = None

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from app.controllers.classes import get_class_by_id, get_class_by_invite_code
from app.controllers.enrollments import find_enrollment, get_enrollment_by_id
from app.controllers.users import get_user_by_id
from app.core.deps import get_db
from app.core.errors import Conflict, NotFound
from app.core.pagination import paginate
from app.core.permissions import require_any_role, require_staff
from app.db.utils import conflict_on_integrity_error
from app.models.enrollment import Enrollment
from app.models.school_class import SchoolClass
from app.models.user import User
from app.schemas.base import MAX_INT
from app.schemas.common import Envelope, MessageOut, Page
from app.schemas.enrollment import (
    EnrollmentCreate,
    EnrollmentDetail,
    EnrollmentJoin,
    EnrollmentListQuery,
    EnrollmentRead,
    EnrollmentUpdate,
)

router = APIRouter()

EnrollmentId = Annotated[int, Path(gt=0, le=MAX_INT)]

ALREADY_ENROLLED = "Student already enrolled in class"
MISSING_REFERENCE = "Class or student no longer exists"


def _ensure_enrollment_exists(db: Session, enrollment_id: int) -> Enrollment:
    enrollment = get_enrollment_by_id(db, enrollment_id)
    if not enrollment:
        raise NotFound("Enrollment not found")
    return enrollment


def _enroll(db: Session, school_class: SchoolClass | None, student: User) -> Enrollment:
    """
    Shared tail of both create paths: class found -> not yet enrolled -> insert.

    The pre-check answers the common duplicate; the unique index on
    (student_id, class_id) answers the concurrent one with the same 409.
    """
    if not school_class:
        raise NotFound("Class not found")

    if find_enrollment(db, student.id, school_class.id):
        raise Conflict(ALREADY_ENROLLED)

    enrollment = Enrollment(student_id=student.id, class_id=school_class.id)
    with conflict_on_integrity_error(db, ALREADY_ENROLLED, MISSING_REFERENCE):
        db.add(enrollment)

    return get_enrollment_by_id(db, enrollment.id)


@router.get("", response_model=Page[EnrollmentRead])
def list_enrollments(
    query: Annotated[EnrollmentListQuery, Query()],
    db: Session = Depends(get_db),
    staff: User = Depends(require_staff),
):
    q = db.query(Enrollment)
    if query.class_id:
        q = q.filter(Enrollment.class_id == query.class_id)
    if query.student_id:
        q = q.filter(Enrollment.student_id == query.student_id)

    rows, pagination = paginate(
        q, query, Enrollment.enrolled_at.desc(), Enrollment.id.desc()
    )
    return {"data": rows, "pagination": pagination}


@router.get("/{enrollment_id}", response_model=Envelope[EnrollmentDetail])
def get_enrollment(
    enrollment_id: EnrollmentId,
    db: Session = Depends(get_db),
    staff: User = Depends(require_staff),
):
    return {"data": _ensure_enrollment_exists(db, enrollment_id)}


@router.post(
    "",
    response_model=Envelope[EnrollmentDetail],
    status_code=status.HTTP_201_CREATED,
    responses={404: {"description": "Class not found"}, 409: {"description": ALREADY_ENROLLED}},
)
def create_enrollment(
    payload: EnrollmentCreate,
    db: Session = Depends(get_db),
    me: User = Depends(require_any_role),
):
    # the student is always the caller, never a body field
    enrollment = _enroll(db, get_class_by_id(db, payload.class_id), me)
    return {"data": enrollment, "message": "Enrolled in class"}


@router.post(
    "/join",
    response_model=Envelope[EnrollmentDetail],
    status_code=status.HTTP_201_CREATED,
    responses={404: {"description": "Class not found"}, 409: {"description": ALREADY_ENROLLED}},
)
def join_class(
    payload: EnrollmentJoin,
    db: Session = Depends(get_db),
    me: User = Depends(require_any_role),
):
    enrollment = _enroll(db, get_class_by_invite_code(db, payload.invite_code), me)
    return {"data": enrollment, "message": "Joined class"}


@router.put("/{enrollment_id}", response_model=Envelope[EnrollmentDetail])
def update_enrollment(
    enrollment_id: EnrollmentId,
    payload: EnrollmentUpdate,
    db: Session = Depends(get_db),
    staff: User = Depends(require_staff),
):
    enrollment = _ensure_enrollment_exists(db, enrollment_id)
    changes = payload.changes()

    if "class_id" in changes and not get_class_by_id(db, changes["class_id"]):
        raise NotFound("Class not found")
    if "student_id" in changes and not get_user_by_id(db, changes["student_id"]):
        raise NotFound("Student not found")

    student_id = changes.get("student_id", enrollment.student_id)
    class_id = changes.get("class_id", enrollment.class_id)
    if find_enrollment(db, student_id, class_id, exclude_id=enrollment_id):
        raise Conflict(ALREADY_ENROLLED)

    with conflict_on_integrity_error(db, ALREADY_ENROLLED, MISSING_REFERENCE):
        for field, value in changes.items():
            setattr(enrollment, field, value)

    return {
        "data": get_enrollment_by_id(db, enrollment_id),
        "message": "Enrollment updated",
    }


@router.delete("/{enrollment_id}", response_model=MessageOut)
def delete_enrollment(
    enrollment_id: EnrollmentId,
    db: Session = Depends(get_db),
    staff: User = Depends(require_staff),
):
    deleted = (
        db.query(Enrollment)
        .filter(Enrollment.id == enrollment_id)
        .delete(synchronize_session=False)
    )
    if not deleted:
        raise NotFound("Enrollment not found")
    db.commit()

    return {"message": "Enrollment deleted"}

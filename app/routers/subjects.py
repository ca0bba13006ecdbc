from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.controllers.departments import get_department_by_id
from app.controllers.subjects import get_subject_by_code, get_subject_by_id
from app.core.deps import get_db
from app.core.errors import Conflict, NotFound
from app.core.pagination import contains, paginate
from app.core.permissions import require_any_role, require_staff
from app.db.utils import conflict_on_integrity_error
from app.models.subject import Subject
from app.models.user import User
from app.schemas.base import MAX_INT
from app.schemas.common import Envelope, MessageOut, Page
from app.schemas.subject import (
    SubjectCreate,
    SubjectDetail,
    SubjectListQuery,
    SubjectRead,
    SubjectUpdate,
)

router = APIRouter()

SubjectId = Annotated[int, Path(gt=0, le=MAX_INT)]

CODE_TAKEN = "Subject code already exists"
DEPARTMENT_GONE = "Department no longer exists"


def _ensure_subject_exists(db: Session, subject_id: int) -> Subject:
    subject = get_subject_by_id(db, subject_id)
    if not subject:
        raise NotFound("Subject not found")
    return subject


def _ensure_department_exists(db: Session, department_id: int) -> None:
    if not get_department_by_id(db, department_id):
        raise NotFound("Department not found")


@router.get("", response_model=Page[SubjectRead])
def list_subjects(
    query: Annotated[SubjectListQuery, Query()],
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role),
):
    q = db.query(Subject)
    if query.department_id:
        q = q.filter(Subject.department_id == query.department_id)
    if query.search:
        q = q.filter(
            or_(contains(Subject.name, query.search), contains(Subject.code, query.search))
        )

    rows, pagination = paginate(q, query, Subject.created_at.desc(), Subject.id.desc())
    return {"data": rows, "pagination": pagination}


@router.get("/{subject_id}", response_model=Envelope[SubjectDetail])
def get_subject(
    subject_id: SubjectId,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role),
):
    return {"data": _ensure_subject_exists(db, subject_id)}


@router.post("", response_model=Envelope[SubjectDetail], status_code=status.HTTP_201_CREATED)
def create_subject(
    payload: SubjectCreate,
    db: Session = Depends(get_db),
    staff: User = Depends(require_staff),
):
    _ensure_department_exists(db, payload.department_id)
    if get_subject_by_code(db, payload.code):
        raise Conflict(CODE_TAKEN)

    subject = Subject(
        department_id=payload.department_id,
        code=payload.code,
        name=payload.name,
        description=payload.description,
    )
    with conflict_on_integrity_error(db, CODE_TAKEN, DEPARTMENT_GONE):
        db.add(subject)

    return {"data": get_subject_by_id(db, subject.id), "message": "Subject created"}


@router.put("/{subject_id}", response_model=Envelope[SubjectDetail])
def update_subject(
    subject_id: SubjectId,
    payload: SubjectUpdate,
    db: Session = Depends(get_db),
    staff: User = Depends(require_staff),
):
    subject = _ensure_subject_exists(db, subject_id)
    changes = payload.changes()

    if "department_id" in changes:
        _ensure_department_exists(db, changes["department_id"])

    if "code" in changes:
        other = get_subject_by_code(db, changes["code"])
        if other and other.id != subject_id:
            raise Conflict(CODE_TAKEN)

    with conflict_on_integrity_error(db, CODE_TAKEN, DEPARTMENT_GONE):
        for field, value in changes.items():
            setattr(subject, field, value)

    return {"data": get_subject_by_id(db, subject_id), "message": "Subject updated"}


@router.delete("/{subject_id}", response_model=MessageOut)
def delete_subject(
    subject_id: SubjectId,
    db: Session = Depends(get_db),
    staff: User = Depends(require_staff),
):
    _ensure_subject_exists(db, subject_id)

    # classes (and their enrollments) go with it via ON DELETE CASCADE
    with conflict_on_integrity_error(db, "Subject is still referenced"):
        db.query(Subject).filter(Subject.id == subject_id).delete(
            synchronize_session=False
        )

    return {"message": "Subject deleted"}

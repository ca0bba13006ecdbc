from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session, joinedload

from app.controllers.classes import (
    generate_invite_code,
    get_class_by_id,
    get_class_by_invite_code,
)
from app.controllers.subjects import get_subject_by_id
from app.controllers.users import get_user_by_id
from app.core.deps import get_db
from app.core.errors import NotFound
from app.core.pagination import contains, paginate
from app.core.permissions import require_any_role, require_staff
from app.db.utils import conflict_on_integrity_error
from app.models.school_class import SchoolClass
from app.models.user import User
from app.schemas.base import MAX_INT
from app.schemas.common import Envelope, MessageOut, Page
from app.schemas.school_class import (
    ClassCreate,
    ClassDetail,
    ClassListQuery,
    ClassUpdate,
    schedules_to_json,
)

router = APIRouter()

ClassId = Annotated[int, Path(gt=0, le=MAX_INT)]

MISSING_REFERENCE = "Subject or teacher no longer exists"


def _ensure_class_exists(db: Session, class_id: int) -> SchoolClass:
    school_class = get_class_by_id(db, class_id)
    if not school_class:
        raise NotFound("Class not found")
    return school_class


def _ensure_references_exist(
    db: Session, subject_id: int | None, teacher_id: str | None
) -> None:
    if subject_id is not None and not get_subject_by_id(db, subject_id):
        raise NotFound("Subject not found")
    if teacher_id is not None and not get_user_by_id(db, teacher_id):
        raise NotFound("Teacher not found")


@router.get("", response_model=Page[ClassDetail])
def list_classes(
    query: Annotated[ClassListQuery, Query()],
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role),
):
    q = db.query(SchoolClass).options(
        joinedload(SchoolClass.subject), joinedload(SchoolClass.teacher)
    )
    if query.subject_id:
        q = q.filter(SchoolClass.subject_id == query.subject_id)
    if query.teacher_id:
        q = q.filter(SchoolClass.teacher_id == query.teacher_id)
    if query.status:
        q = q.filter(SchoolClass.status == query.status)
    if query.search:
        q = q.filter(contains(SchoolClass.name, query.search))

    rows, pagination = paginate(
        q, query, SchoolClass.created_at.desc(), SchoolClass.id.desc()
    )
    return {"data": rows, "pagination": pagination}


@router.get("/invite/{invite_code}", response_model=Envelope[ClassDetail])
def get_class_by_invite(
    invite_code: Annotated[str, Path(min_length=1)],
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role),
):
    school_class = get_class_by_invite_code(db, invite_code.strip())
    if not school_class:
        raise NotFound("Class not found")
    return {"data": school_class}


@router.get("/{class_id}", response_model=Envelope[ClassDetail])
def get_class(
    class_id: ClassId,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role),
):
    return {"data": _ensure_class_exists(db, class_id)}


@router.post("", response_model=Envelope[ClassDetail], status_code=status.HTTP_201_CREATED)
def create_class(
    payload: ClassCreate,
    db: Session = Depends(get_db),
    staff: User = Depends(require_staff),
):
    _ensure_references_exist(db, payload.subject_id, payload.teacher_id)

    school_class = SchoolClass(
        name=payload.name,
        invite_code=generate_invite_code(db),
        subject_id=payload.subject_id,
        teacher_id=payload.teacher_id,
        description=payload.description,
        banner_url=payload.banner_url,
        banner_image_ref=payload.banner_image_ref,
        capacity=payload.capacity,
        status=payload.status,
        schedules=schedules_to_json(payload.schedules),
    )
    with conflict_on_integrity_error(db, "Invite code already exists", MISSING_REFERENCE):
        db.add(school_class)

    return {"data": get_class_by_id(db, school_class.id), "message": "Class created"}


@router.put("/{class_id}", response_model=Envelope[ClassDetail])
def update_class(
    class_id: ClassId,
    payload: ClassUpdate,
    db: Session = Depends(get_db),
    staff: User = Depends(require_staff),
):
    school_class = _ensure_class_exists(db, class_id)
    changes = payload.changes()

    _ensure_references_exist(db, changes.get("subject_id"), changes.get("teacher_id"))

    if "schedules" in changes:
        changes["schedules"] = schedules_to_json(payload.schedules)

    with conflict_on_integrity_error(db, "Class could not be updated", MISSING_REFERENCE):
        for field, value in changes.items():
            setattr(school_class, field, value)

    return {"data": get_class_by_id(db, class_id), "message": "Class updated"}


@router.delete("/{class_id}", response_model=MessageOut)
def delete_class(
    class_id: ClassId,
    db: Session = Depends(get_db),
    staff: User = Depends(require_staff),
):
    _ensure_class_exists(db, class_id)

    # enrollments are removed by ON DELETE CASCADE
    with conflict_on_integrity_error(db, "Class could not be deleted"):
        db.query(SchoolClass).filter(SchoolClass.id == class_id).delete(
            synchronize_session=False
        )

    return {"message": "Class deleted"}

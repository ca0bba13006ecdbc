from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy import distinct, func, or_
from sqlalchemy.orm import Session, joinedload

from app.controllers.departments import (
    department_has_subjects,
    get_department_by_code,
    get_department_by_id,
)
from app.core.deps import get_db
from app.core.errors import Conflict, NotFound
from app.core.pagination import contains, paginate
from app.core.permissions import require_admin, require_any_role
from app.db.utils import conflict_on_integrity_error
from app.models.department import Department
from app.models.enrollment import Enrollment
from app.models.enums import Role
from app.models.school_class import SchoolClass
from app.models.subject import Subject
from app.models.user import User
from app.schemas.base import MAX_INT
from app.schemas.common import Envelope, MessageOut, Page, PageQuery
from app.schemas.department import (
    DepartmentCreate,
    DepartmentDetail,
    DepartmentListItem,
    DepartmentListQuery,
    DepartmentRead,
    DepartmentUpdate,
    DepartmentUsersQuery,
)
from app.schemas.school_class import ClassDetail
from app.schemas.subject import SubjectRead
from app.schemas.user import UserRead

router = APIRouter()

DepartmentId = Annotated[int, Path(gt=0, le=MAX_INT)]

CODE_TAKEN = "Department code already exists"


def _ensure_department_exists(db: Session, department_id: int) -> Department:
    department = get_department_by_id(db, department_id)
    if not department:
        raise NotFound("Department not found")
    return department


@router.get("", response_model=Page[DepartmentListItem])
def list_departments(
    query: Annotated[DepartmentListQuery, Query()],
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role),
):
    q = (
        db.query(Department, func.count(Subject.id).label("total_subjects"))
        .outerjoin(Subject, Subject.department_id == Department.id)
        .group_by(Department.id)
    )
    if query.search:
        q = q.filter(
            or_(
                contains(Department.name, query.search),
                contains(Department.code, query.search),
            )
        )

    rows, pagination = paginate(
        q, query, Department.created_at.desc(), Department.id.desc()
    )
    return {
        "data": [DepartmentListItem.from_row(d, total) for d, total in rows],
        "pagination": pagination,
    }


@router.get("/{department_id}", response_model=Envelope[DepartmentDetail])
def get_department(
    department_id: DepartmentId,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role),
):
    department = _ensure_department_exists(db, department_id)

    subjects_count = (
        db.query(func.count(Subject.id))
        .filter(Subject.department_id == department_id)
        .scalar()
    ) or 0

    classes_count = (
        db.query(func.count(SchoolClass.id))
        .join(Subject, SchoolClass.subject_id == Subject.id)
        .filter(Subject.department_id == department_id)
        .scalar()
    ) or 0

    enrolled_students = (
        db.query(func.count(distinct(User.id)))
        .join(Enrollment, Enrollment.student_id == User.id)
        .join(SchoolClass, Enrollment.class_id == SchoolClass.id)
        .join(Subject, SchoolClass.subject_id == Subject.id)
        .filter(User.role == Role.STUDENT, Subject.department_id == department_id)
        .scalar()
    ) or 0

    return {
        "data": {
            "department": department,
            "totals": {
                "subjects": subjects_count,
                "classes": classes_count,
                "enrolled_students": enrolled_students,
            },
        }
    }


@router.get("/{department_id}/subjects", response_model=Page[SubjectRead])
def list_department_subjects(
    department_id: DepartmentId,
    query: Annotated[PageQuery, Query()],
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role),
):
    _ensure_department_exists(db, department_id)

    q = db.query(Subject).filter(Subject.department_id == department_id)
    rows, pagination = paginate(q, query, Subject.created_at.desc(), Subject.id.desc())
    return {"data": rows, "pagination": pagination}


@router.get("/{department_id}/classes", response_model=Page[ClassDetail])
def list_department_classes(
    department_id: DepartmentId,
    query: Annotated[PageQuery, Query()],
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role),
):
    _ensure_department_exists(db, department_id)

    q = (
        db.query(SchoolClass)
        .join(Subject, SchoolClass.subject_id == Subject.id)
        .options(joinedload(SchoolClass.subject), joinedload(SchoolClass.teacher))
        .filter(Subject.department_id == department_id)
    )
    rows, pagination = paginate(
        q, query, SchoolClass.created_at.desc(), SchoolClass.id.desc()
    )
    return {"data": rows, "pagination": pagination}


@router.get("/{department_id}/users", response_model=Page[UserRead])
def list_department_users(
    department_id: DepartmentId,
    query: Annotated[DepartmentUsersQuery, Query()],
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role),
):
    """
    Teachers who teach, or students enrolled in, any class of the department.

    Each user appears once no matter how many classes connect them.
    """
    _ensure_department_exists(db, department_id)

    if query.role == Role.TEACHER.value:
        q = db.query(User).join(SchoolClass, SchoolClass.teacher_id == User.id)
    else:
        q = (
            db.query(User)
            .join(Enrollment, Enrollment.student_id == User.id)
            .join(SchoolClass, Enrollment.class_id == SchoolClass.id)
        )

    q = (
        q.join(Subject, SchoolClass.subject_id == Subject.id)
        .filter(User.role == Role(query.role), Subject.department_id == department_id)
        .group_by(User.id)
    )
    rows, pagination = paginate(q, query, User.created_at.desc(), User.id.desc())
    return {"data": rows, "pagination": pagination}


@router.post(
    "",
    response_model=Envelope[DepartmentRead],
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": CODE_TAKEN}},
)
def create_department(
    payload: DepartmentCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    if get_department_by_code(db, payload.code):
        raise Conflict(CODE_TAKEN)

    department = Department(
        code=payload.code,
        name=payload.name,
        description=payload.description,
    )
    with conflict_on_integrity_error(db, CODE_TAKEN):
        db.add(department)

    db.refresh(department)
    return {"data": department, "message": "Department created"}


@router.put("/{department_id}", response_model=Envelope[DepartmentRead])
def update_department(
    department_id: DepartmentId,
    payload: DepartmentUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    department = _ensure_department_exists(db, department_id)
    changes = payload.changes()

    if "code" in changes:
        other = get_department_by_code(db, changes["code"])
        if other and other.id != department_id:
            raise Conflict(CODE_TAKEN)

    with conflict_on_integrity_error(db, CODE_TAKEN):
        for field, value in changes.items():
            setattr(department, field, value)

    db.refresh(department)
    return {"data": department, "message": "Department updated"}


@router.delete("/{department_id}", response_model=MessageOut)
def delete_department(
    department_id: DepartmentId,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    _ensure_department_exists(db, department_id)

    if department_has_subjects(db, department_id):
        raise Conflict("Department has subjects and cannot be deleted")

    with conflict_on_integrity_error(db, "Department has subjects and cannot be deleted"):
        db.query(Department).filter(Department.id == department_id).delete(
            synchronize_session=False
        )

    return {"message": "Department deleted"}

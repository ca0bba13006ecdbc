from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.controllers.classes import teacher_has_classes
from app.controllers.users import get_user_by_email, get_user_by_id
from app.core.deps import get_db
from app.core.errors import Conflict, NotFound
from app.core.pagination import contains, paginate
from app.core.permissions import require_admin
from app.db.utils import conflict_on_integrity_error
from app.models.user import User
from app.schemas.common import Envelope, Page
from app.schemas.user import UserCreate, UserListQuery, UserRead, UserUpdate

router = APIRouter()

UserId = Annotated[str, Path(min_length=1)]

EMAIL_TAKEN = "Email already exists"


def _ensure_user_exists(db: Session, user_id: str) -> User:
    user = get_user_by_id(db, user_id)
    if not user:
        raise NotFound("User not found")
    return user


@router.get("", response_model=Page[UserRead])
def list_users(
    query: Annotated[UserListQuery, Query()],
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    q = db.query(User)
    if query.role:
        q = q.filter(User.role == query.role)
    if query.search:
        q = q.filter(or_(contains(User.name, query.search), contains(User.email, query.search)))

    rows, pagination = paginate(q, query, User.created_at.desc(), User.id.desc())
    return {
        "data": rows,
        "pagination": pagination,
        "message": "Users retrieved successfully",
    }


@router.get("/{user_id}", response_model=Envelope[UserRead])
def get_user(
    user_id: UserId,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return {
        "data": _ensure_user_exists(db, user_id),
        "message": "User retrieved successfully",
    }


@router.post(
    "",
    response_model=Envelope[UserRead],
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Email or id already exists"}},
)
def create_user(
    payload: UserCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    if get_user_by_id(db, payload.id):
        raise Conflict("User already exists")
    if get_user_by_email(db, payload.email):
        raise Conflict(EMAIL_TAKEN)

    user = User(**payload.model_dump())
    with conflict_on_integrity_error(db, EMAIL_TAKEN):
        db.add(user)

    db.refresh(user)
    return {"data": user, "message": "User created successfully"}


@router.put("/{user_id}", response_model=Envelope[UserRead])
def update_user(
    user_id: UserId,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    user = _ensure_user_exists(db, user_id)
    changes = payload.changes()

    if "email" in changes:
        other = get_user_by_email(db, changes["email"])
        if other and other.id != user_id:
            raise Conflict(EMAIL_TAKEN)

    with conflict_on_integrity_error(db, EMAIL_TAKEN):
        for field, value in changes.items():
            setattr(user, field, value)

    db.refresh(user)
    return {"data": user, "message": "User updated successfully"}


@router.delete("/{user_id}", response_model=Envelope[UserRead])
def delete_user(
    user_id: UserId,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    user = _ensure_user_exists(db, user_id)
    deleted = UserRead.model_validate(user)

    # classes restrict the delete; enrollments cascade
    if teacher_has_classes(db, user_id):
        raise Conflict("User is the teacher of existing classes")

    with conflict_on_integrity_error(db, "User is the teacher of existing classes"):
        db.query(User).filter(User.id == user_id).delete(synchronize_session=False)

    return {"data": deleted, "message": "User deleted successfully"}

"""
Wipe-and-reload bootstrap for a development or demo database.

Run from the command line, never from request handling::

    python -m app.db.seed [path/to/data.json]

Parents go in first and their generated ids are captured by natural key
(department code, subject code, class invite code) so children can be
resolved before they are inserted.
"""
import json
import logging
import sys
from pathlib import Path

from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.department import Department
from app.models.enrollment import Enrollment
from app.models.enums import ClassStatus, Role
from app.models.school_class import DEFAULT_CAPACITY, SchoolClass
from app.models.subject import Subject
from app.models.user import User
from app.schemas.base import APIModel
from app.schemas.school_class import Schedule, schedules_to_json

logger = logging.getLogger(__name__)


class SeedDepartment(APIModel):
    code: str
    name: str
    description: str | None = None


class SeedSubject(APIModel):
    code: str
    name: str
    description: str | None = None
    department_code: str


class SeedUser(APIModel):
    id: str
    name: str
    email: EmailStr
    email_verified: bool = False
    image: str | None = None
    image_ref: str | None = None
    role: Role = Role.STUDENT


class SeedClass(APIModel):
    name: str
    invite_code: str
    subject_code: str
    teacher_id: str
    description: str | None = None
    banner_url: str | None = None
    banner_image_ref: str | None = None
    capacity: int = DEFAULT_CAPACITY
    status: ClassStatus = ClassStatus.ACTIVE
    schedules: list[Schedule] = Field(default_factory=list)


class SeedEnrollment(APIModel):
    class_invite_code: str
    student_id: str


class SeedData(BaseModel):
    departments: list[SeedDepartment] = Field(default_factory=list)
    subjects: list[SeedSubject] = Field(default_factory=list)
    users: list[SeedUser] = Field(default_factory=list)
    classes: list[SeedClass] = Field(default_factory=list)
    enrollments: list[SeedEnrollment] = Field(default_factory=list)


class SeedError(ValueError):
    pass


def load_seed_data(path: str | Path) -> SeedData:
    with open(path, encoding="utf-8") as fh:
        return SeedData.model_validate(json.load(fh))


def _resolve(mapping: dict, key: str, kind: str):
    try:
        return mapping[key]
    except KeyError:
        raise SeedError(f"Unknown {kind} {key!r} referenced in seed data") from None


def wipe(db: Session) -> None:
    # children before parents so no FK is ever left dangling
    for model in (Enrollment, SchoolClass, Subject, Department, User):
        db.query(model).delete(synchronize_session=False)


def seed(db: Session, data: SeedData) -> dict[str, int]:
    """
    Replace every row in the five tables with ``data``.

    Returns the number of rows inserted per table. The session is committed
    on success and rolled back on any failure.
    """
    try:
        wipe(db)

        departments = [
            Department(code=d.code, name=d.name, description=d.description)
            for d in data.departments
        ]
        db.add_all(departments)
        db.flush()
        department_ids = {d.code: d.id for d in departments}

        subjects = [
            Subject(
                code=s.code,
                name=s.name,
                description=s.description,
                department_id=_resolve(department_ids, s.department_code, "department"),
            )
            for s in data.subjects
        ]
        db.add_all(subjects)
        db.flush()
        subject_ids = {s.code: s.id for s in subjects}

        db.add_all(User(**u.model_dump()) for u in data.users)
        db.flush()
        user_ids = {u.id for u in data.users}

        classes = []
        for c in data.classes:
            if c.teacher_id not in user_ids:
                raise SeedError(f"Unknown teacher {c.teacher_id!r} referenced in seed data")
            classes.append(
                SchoolClass(
                    name=c.name,
                    invite_code=c.invite_code,
                    subject_id=_resolve(subject_ids, c.subject_code, "subject"),
                    teacher_id=c.teacher_id,
                    description=c.description,
                    banner_url=c.banner_url,
                    banner_image_ref=c.banner_image_ref,
                    capacity=c.capacity,
                    status=c.status,
                    schedules=schedules_to_json(c.schedules),
                )
            )
        db.add_all(classes)
        db.flush()
        class_ids = {c.invite_code: c.id for c in classes}

        enrollments = []
        for e in data.enrollments:
            if e.student_id not in user_ids:
                raise SeedError(f"Unknown student {e.student_id!r} referenced in seed data")
            enrollments.append(
                Enrollment(
                    class_id=_resolve(class_ids, e.class_invite_code, "class invite code"),
                    student_id=e.student_id,
                )
            )
        db.add_all(enrollments)
        db.commit()
    except Exception:
        db.rollback()
        raise

    counts = {
        "departments": len(data.departments),
        "subjects": len(data.subjects),
        "users": len(data.users),
        "classes": len(data.classes),
        "enrollments": len(data.enrollments),
    }
    logger.info("Seed completed: %s", counts)
    return counts


def main(argv: list[str] | None = None) -> int:
    from app.db.init_db import init_db
    from app.db.session import SessionLocal

    args = sys.argv[1:] if argv is None else argv
    path = args[0] if args else settings.seed_data_path

    logging.basicConfig(level=settings.log_level)
    init_db()

    db = SessionLocal()
    try:
        seed(db, load_seed_data(path))
    except Exception:
        logger.exception("Seed failed")
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())

from sqlalchemy.orm import Session

from app.models.department import Department
from app.models.subject import Subject


def get_department_by_id(db: Session, department_id: int) -> Department | None:
    return db.query(Department).filter(Department.id == department_id).first()


def get_department_by_code(db: Session, code: str) -> Department | None:
    return db.query(Department).filter(Department.code == code).first()


def department_has_subjects(db: Session, department_id: int) -> bool:
    return (
        db.query(Subject.id).filter(Subject.department_id == department_id).first()
        is not None
    )

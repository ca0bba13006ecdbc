from sqlalchemy.orm import Session, joinedload

from app.models.subject import Subject


def get_subject_by_id(db: Session, subject_id: int) -> Subject | None:
    return (
        db.query(Subject)
        .options(joinedload(Subject.department))
        .filter(Subject.id == subject_id)
        .first()
    )


def get_subject_by_code(db: Session, code: str) -> Subject | None:
    return db.query(Subject).filter(Subject.code == code).first()

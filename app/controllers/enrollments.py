from sqlalchemy.orm import Session, joinedload

from app.models.enrollment import Enrollment


def get_enrollment_by_id(db: Session, enrollment_id: int) -> Enrollment | None:
    return (
        db.query(Enrollment)
        .options(
            joinedload(Enrollment.school_class),
            joinedload(Enrollment.student),
        )
        .filter(Enrollment.id == enrollment_id)
        .first()
    )


def find_enrollment(
    db: Session,
    student_id: str,
    class_id: int,
    exclude_id: int | None = None,
) -> Enrollment | None:
    """The enrollment for (student, class), ignoring ``exclude_id`` when given."""
    query = db.query(Enrollment).filter(
        Enrollment.student_id == student_id,
        Enrollment.class_id == class_id,
    )
    if exclude_id is not None:
        query = query.filter(Enrollment.id != exclude_id)
    return query.first()

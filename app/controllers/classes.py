import secrets
import string

from sqlalchemy.orm import Session, joinedload

from app.core.config import settings
from app.models.school_class import SchoolClass

INVITE_ALPHABET = string.ascii_lowercase + string.digits
MAX_INVITE_ATTEMPTS = 5


def _with_relations(db: Session):
    return db.query(SchoolClass).options(
        joinedload(SchoolClass.subject),
        joinedload(SchoolClass.teacher),
    )


def get_class_by_id(db: Session, class_id: int) -> SchoolClass | None:
    return _with_relations(db).filter(SchoolClass.id == class_id).first()


def get_class_by_invite_code(db: Session, invite_code: str) -> SchoolClass | None:
    return _with_relations(db).filter(SchoolClass.invite_code == invite_code).first()


def generate_invite_code(db: Session) -> str:
    """
    Random lowercase alphanumeric token not used by any class yet.

    The unique index on ``classes.invite_code`` still has the final word if
    another request grabs the same token between this check and the insert.
    """
    for _ in range(MAX_INVITE_ATTEMPTS):
        code = "".join(
            secrets.choice(INVITE_ALPHABET) for _ in range(settings.invite_code_length)
        )
        taken = (
            db.query(SchoolClass.id).filter(SchoolClass.invite_code == code).first()
            is not None
        )
        if not taken:
            return code
    raise RuntimeError("Could not generate a unique invite code")


def teacher_has_classes(db: Session, user_id: str) -> bool:
    return (
        db.query(SchoolClass.id).filter(SchoolClass.teacher_id == user_id).first()
        is not None
    )

from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import Conflict

FOREIGN_KEY_VIOLATION = "23503"


def is_foreign_key_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    # psycopg2 exposes pgcode, psycopg 3 sqlstate; sqlite only has the message
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code:
        return code == FOREIGN_KEY_VIOLATION
    return "FOREIGN KEY" in str(orig).upper()


@contextmanager
def conflict_on_integrity_error(db: Session, detail: str, missing_reference: str | None = None):
    """
    Commit the enclosed writes, turning a constraint violation into a 409.

    Pre-checks catch the common case; this is what answers when two
    requests race past them and the store's unique/foreign key says no.
    Writes that point at other rows pass ``missing_reference`` so a parent
    deleted in the meantime is not reported as a duplicate.
    """
    try:
        yield
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if missing_reference and is_foreign_key_violation(exc):
            raise Conflict(missing_reference) from None
        raise Conflict(detail) from None

from collections.abc import Iterator

from sqlalchemy.orm import Session

from app.db.session import SessionLocal


# one session per request; closing it hands the connection back to the pool
def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

import logging

from app.db.base import Base
from app.db.session import engine

logger = logging.getLogger(__name__)


def init_db() -> None:
    """Create any missing tables. Existing tables are left as they are; schema changes go through alembic."""
    logger.info("Ensuring tables exist on %s", engine.url.render_as_string(hide_password=True))
    Base.metadata.create_all(bind=engine)

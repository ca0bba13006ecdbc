# import models so Base.metadata knows every table
from app.db.base_class import Base  # noqa: F401
from app.models import (  # noqa: F401
    department,
    enrollment,
    school_class,
    subject,
    user,
)

from fastapi import Depends

from app.core.current_user import get_current_user
from app.core.errors import Forbidden
from app.models.enums import Role
from app.models.user import User

ALL_ROLES = (Role.ADMIN, Role.TEACHER, Role.STUDENT)
STAFF_ROLES = (Role.ADMIN, Role.TEACHER)


def require_roles(*roles: Role):
    """Dependency factory: the caller must be authenticated and hold one of ``roles``."""
    allowed = frozenset(roles)

    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise Forbidden("Insufficient permissions")
        return current_user

    return dependency


require_admin = require_roles(Role.ADMIN)
require_staff = require_roles(*STAFF_ROLES)
require_any_role = require_roles(*ALL_ROLES)

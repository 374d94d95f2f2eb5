from typing import Optional
from fastapi import Depends
from .auth import get_current_user
from .errors import Forbidden
from .models.users import User, Role


def require_roles(*roles: Role):
    """Build a dependency that authenticates and then checks the caller's role."""
    allowed = {r.value for r in roles}

    async def dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise Forbidden('You do not have permission to access this resource')
        return current_user

    return dependency


require_admin = require_roles(Role.ADMIN)
require_contributor = require_roles(Role.CONTRIBUTOR, Role.ADMIN)


def ensure_owner_or_admin(owner_id: Optional[int], actor: User):
    # admins bypass ownership entirely
    if actor.is_admin:
        return
    if owner_id is None or owner_id != actor.id:
        raise Forbidden('You can only modify your own resources')

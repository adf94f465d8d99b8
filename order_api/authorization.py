import logging
from typing import Optional

from fastapi import Depends

from .users import ADMIN, UserStore, get_user_store

log = logging.getLogger(__name__)


class RoleAuthorizer:
    """Answers whether a token subject holds a role.

    Every check goes back to the user store, nothing is cached.
    """

    def __init__(self, users: UserStore):
        self.users = users

    def is_in_role(self, user_id: Optional[str], role_name: str) -> bool:
        user = self.users.find_by_id(user_id)
        if user is None:
            log.warning("Role check for unknown user id %r, treating as not in role %s", user_id, role_name)
            return False
        return self.users.is_in_role(user, role_name)

    def is_admin(self, user_id: Optional[str]) -> bool:
        return self.is_in_role(user_id, ADMIN)


def get_role_authorizer(users: UserStore = Depends(get_user_store)) -> RoleAuthorizer:
    return RoleAuthorizer(users)

"""Role capability table.

Route handlers never compare role strings. They declare the capability they
need and `require_capability` checks the caller's role against this table.
Store-scoped capabilities are further narrowed by
`app.utils.helpers.verify_store_access`.
"""

import enum
from typing import Callable, Dict, FrozenSet

from fastapi import Depends

from app.core.exceptions import Forbidden
from app.models.enums import AppRole
from app.models.user import User
from app.utils.auth import get_current_user


class Capability(enum.Enum):
    manage_users = "manage_users"
    manage_stores = "manage_stores"
    edit_store = "edit_store"
    view_own_stores = "view_own_stores"
    rate_stores = "rate_stores"
    view_all_ratings = "view_all_ratings"
    admin_dashboard = "admin_dashboard"
    owner_dashboard = "owner_dashboard"
    user_dashboard = "user_dashboard"
    store_dashboard = "store_dashboard"


CAPABILITIES: Dict[Capability, FrozenSet[AppRole]] = {
    Capability.manage_users: frozenset({AppRole.admin}),
    Capability.manage_stores: frozenset({AppRole.admin}),
    Capability.edit_store: frozenset({AppRole.admin, AppRole.store_owner}),
    Capability.view_own_stores: frozenset({AppRole.store_owner}),
    Capability.rate_stores: frozenset({AppRole.admin, AppRole.user, AppRole.store_owner}),
    Capability.view_all_ratings: frozenset({AppRole.admin}),
    Capability.admin_dashboard: frozenset({AppRole.admin}),
    Capability.owner_dashboard: frozenset({AppRole.store_owner}),
    Capability.user_dashboard: frozenset({AppRole.user}),
    Capability.store_dashboard: frozenset({AppRole.admin, AppRole.store_owner}),
}


def has_capability(role: AppRole, capability: Capability) -> bool:
    return role in CAPABILITIES[capability]


def require_capability(capability: Capability) -> Callable[..., User]:
    """Build a dependency that returns the current user or raises Forbidden."""

    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if not has_capability(current_user.role, capability):
            raise Forbidden()
        return current_user

    return dependency

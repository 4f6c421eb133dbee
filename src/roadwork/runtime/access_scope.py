"""
Access scope resolution.

Decides, from the roles a caller holds and the roles a route allows, which
code path a generated handler takes:

- ALL_ACCESS: a named role matches (or the route is unrestricted), use the
  unscoped model call
- OWNER_ACCESS: only ``$owner`` matches, restrict the model call to the
  caller's own records
- NO_ACCESS: nothing matches, reply unauthorized

The resolver never looks at a record. Whether a record actually belongs to
the caller is left to the owner-scoped model call.
"""

from __future__ import annotations

from collections.abc import Collection

from roadwork.specs.access import OWNER_ROLE, AccessScope


def resolve_access_scope(
    user_scope: str | Collection[str] | None,
    allowed_roles: str | Collection[str] | None,
) -> AccessScope:
    """
    Resolve the access scope of a caller on a route.

    An empty ``allowed_roles`` behaves exactly like ``None``: the route is
    public. Restricting a route therefore needs at least one role.

    Args:
        user_scope: Roles granted to the caller, a single role, or None
        allowed_roles: Roles the route allows, may include ``$owner``; a
            single string is one role

    Returns:
        The resolved AccessScope
    """
    if not allowed_roles:
        return AccessScope.ALL_ACCESS
    if isinstance(allowed_roles, str):
        allowed_roles = (allowed_roles,)

    if user_scope is not None and not isinstance(user_scope, str):
        for role in user_scope:
            if role != OWNER_ROLE and role in allowed_roles:
                return AccessScope.ALL_ACCESS
    elif user_scope is not None and user_scope != OWNER_ROLE and user_scope in allowed_roles:
        return AccessScope.ALL_ACCESS

    if OWNER_ROLE in allowed_roles:
        return AccessScope.OWNER_ACCESS

    return AccessScope.NO_ACCESS

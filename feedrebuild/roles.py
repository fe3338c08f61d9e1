"""Group permission lookups used to classify feed entries."""

from typing import Dict, Iterable, List

from .database import User, UserGroup


class RoleLookup:
    """
    Resolves which groups grant a right, and which accounts belong to them.

    The group -> rights table is configuration; memberships come from
    the user_groups table.
    """

    def __init__(self, group_permissions: Dict[str, Iterable[str]]):
        self.group_permissions = {
            group: set(rights) for group, rights in group_permissions.items()
        }

    def groups_with_permission(self, right: str) -> List[str]:
        """Return the groups granting `right`, sorted by name."""
        return sorted(
            group for group, rights in self.group_permissions.items() if right in rights
        )

    def members_of(self, session, groups: List[str]) -> List[str]:
        """Return distinct user names holding any of `groups`."""
        if not groups:
            return []
        rows = (
            session.query(User.user_name)
            .join(UserGroup, UserGroup.user_id == User.user_id)
            .filter(UserGroup.group.in_(groups))
            .distinct()
            .order_by(User.user_name)
            .all()
        )
        return [name for (name,) in rows]

    def members_with_permission(self, session, right: str) -> List[str]:
        return self.members_of(session, self.groups_with_permission(right))

"""Member name resolution."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from splid_mcp.domain.errors import UnknownMemberName
from splid_mcp.services.groups import GroupService

_logger = logging.getLogger(__name__)


@dataclass
class NameResolver:
    """Resolve display names to member ids, case-insensitively."""

    group_service: GroupService

    async def resolve(self, group_id: str, names: Iterable[str]) -> dict[str, str]:
        """Map each name to a member id or raise on the first unknown name.

        The member snapshot is read on every call so newly added members are
        visible. Duplicate display names collapse to the last one listed.
        """
        members = await self.group_service.list_members(group_id)
        by_name: dict[str, str] = {}
        for member in members:
            key = member.display_name.lower()
            if key in by_name and by_name[key] != member.stable_id:
                _logger.warning(
                    "Duplicate member name in group %s: %s", group_id, key
                )
            by_name[key] = member.stable_id

        resolved: dict[str, str] = {}
        for name in names:
            stable_id = by_name.get(name.lower())
            if stable_id is None:
                raise UnknownMemberName(name)
            resolved[name] = stable_id
        return resolved

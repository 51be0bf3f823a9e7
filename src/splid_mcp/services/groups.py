"""Group data access backed by the Splid API."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import uuid4

from splid_mcp.adapters.splid_balance import compute_balance
from splid_mcp.adapters.splid_client import SplidClient, group_pointer
from splid_mcp.domain.errors import UnsupportedSelector
from splid_mcp.domain.expenses import ExpenseRequest
from splid_mcp.domain.groups import GroupBalance, GroupRef, GroupSelector, Member

SUMMARY_ENTRY_WINDOW = 100

_logger = logging.getLogger(__name__)


class GroupService(Protocol):
    """Interface for group, member, entry and balance operations."""

    async def get_default_group(self) -> GroupRef:
        """Return the configured default group."""

    async def resolve_group(self, selector: GroupSelector) -> GroupRef:
        """Return the group described by a selector."""

    async def list_members(self, group_id: str) -> list[Member]:
        """Return the current member snapshot of a group."""

    async def create_expense(self, request: ExpenseRequest) -> dict[str, object]:
        """Create an expense entry and return the created record."""

    async def list_entries(
        self, group_id: str, offset: int, limit: int
    ) -> list[dict[str, object]]:
        """Return entry records of a group."""

    async def get_group_summary(self, group_id: str) -> GroupBalance:
        """Return the balance record of a group."""


@dataclass
class SplidGroupService(GroupService):
    """GroupService implemented on top of the Splid client."""

    client: SplidClient
    default_code: str

    async def get_default_group(self) -> GroupRef:
        """Join the default invite code and return the group."""
        return await self._group_from_code(self.default_code)

    async def resolve_group(self, selector: GroupSelector) -> GroupRef:
        """Resolve by id, then invite code; names are rejected."""
        if selector.group_id:
            return await self._group_from_id(selector.group_id)
        if selector.group_code:
            return await self._group_from_code(selector.group_code)
        if selector.group_name:
            raise UnsupportedSelector("Group selection by name is not supported yet")
        return await self.get_default_group()

    async def list_members(self, group_id: str) -> list[Member]:
        """Return members parsed from Splid person records."""
        persons = await self.client.get_persons(group_id)
        members: list[Member] = []
        for person in persons:
            name = person.get("name")
            global_id = person.get("GlobalId")
            if isinstance(name, str) and isinstance(global_id, str):
                members.append(Member(display_name=name, stable_id=global_id))
        return members

    async def create_expense(self, request: ExpenseRequest) -> dict[str, object]:
        """Create a Splid expense entry."""
        primary, *secondary = request.payers
        secondary_payers: dict[str, float] = {}
        for payer in secondary:
            secondary_payers[payer.user_id] = (
                secondary_payers.get(payer.user_id, 0.0) + payer.amount
            )
        shares: dict[str, float] = {}
        for profiteer in request.profiteers:
            shares[profiteer.user_id] = (
                shares.get(profiteer.user_id, 0.0) + profiteer.share
            )
        entry: dict[str, object] = {
            "group": group_pointer(request.group_id),
            "GlobalId": str(uuid4()),
            "title": request.title,
            "currencyCode": request.currency_code,
            "primaryPayer": primary.user_id,
            "items": [{"AM": request.amount, "P": {"PT": 0, "P": shares}}],
            "isPayment": False,
            "date": {"__type": "Date", "iso": datetime.now(tz=UTC).isoformat()},
        }
        if secondary_payers:
            entry["secondaryPayers"] = secondary_payers
        created = await self.client.create_entry(entry)
        _logger.info(
            "Created Splid entry: group=%s title=%s", request.group_id, request.title
        )
        return created

    async def list_entries(
        self, group_id: str, offset: int, limit: int
    ) -> list[dict[str, object]]:
        """Return raw entry records."""
        return await self.client.get_entries(group_id, skip=offset, limit=limit)

    async def get_group_summary(self, group_id: str) -> GroupBalance:
        """Compute balances from members, recent entries and group info."""
        persons = await self.client.get_persons(group_id)
        entries = await self.client.get_entries(
            group_id, skip=0, limit=SUMMARY_ENTRY_WINDOW
        )
        group_info = await self.client.get_group_info(group_id)
        return compute_balance(group_id, persons, entries, group_info)

    async def _group_from_code(self, code: str) -> GroupRef:
        group_id = await self.client.join_group(code)
        return await self._group_from_id(group_id)

    async def _group_from_id(self, group_id: str) -> GroupRef:
        info = await self.client.get_group_info(group_id)
        currency = info.get("defaultCurrencyCode")
        return GroupRef(
            id=group_id, currency_code=currency if isinstance(currency, str) else None
        )

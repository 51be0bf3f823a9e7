"""Tool definitions and dispatch for the Splid group tools."""

import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from mcp import types
from pydantic import BaseModel, ValidationError

from splid_mcp.domain.errors import ClientInputError, ToolError, UnknownTool
from splid_mcp.domain.expenses import ExpenseRequest
from splid_mcp.domain.groups import GroupBalance, GroupRef, GroupSelector
from splid_mcp.domain.tool_inputs import (
    CreateExpenseInput,
    GroupSelectorInput,
    ListEntriesInput,
)
from splid_mcp.services.expenses import (
    names_to_resolve,
    normalize_parties,
    validate_share_sum,
)
from splid_mcp.services.groups import GroupService
from splid_mcp.services.names import NameResolver

FALLBACK_CURRENCY = "EUR"

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolResult:
    """Outcome of a tool call in the wire shape clients expect."""

    text: str
    is_error: bool = False

    @classmethod
    def from_payload(cls, payload: object) -> "ToolResult":
        """Serialize a JSON-compatible payload as a successful result."""
        return cls(text=json.dumps(payload))


@dataclass(frozen=True)
class ToolDefinition:
    """Declarative tool: metadata, input schema and handler."""

    name: str
    title: str
    description: str
    handler: Callable[[Any], Awaitable[object]]
    input_model: type[BaseModel] | None = None

    def describe(self) -> types.Tool:
        """Return the tool listing entry with its JSON schema."""
        if self.input_model is None:
            schema: dict[str, Any] = {"type": "object", "properties": {}}
        else:
            schema = self.input_model.model_json_schema(by_alias=True)
        return types.Tool(
            name=self.name,
            title=self.title,
            description=self.description,
            inputSchema=schema,
        )


@dataclass
class ToolRegistry:
    """Registry of callable tools keyed by name."""

    tools: dict[str, ToolDefinition] = field(default_factory=dict)

    def register(self, tool: ToolDefinition) -> None:
        """Add a tool, replacing any tool with the same name."""
        self.tools[tool.name] = tool

    def describe(self) -> list[types.Tool]:
        """Return listing entries for all tools in registration order."""
        return [tool.describe() for tool in self.tools.values()]

    async def call(
        self, name: str, arguments: dict[str, object] | None
    ) -> ToolResult:
        """Validate arguments and run a tool.

        Schema violations raise ClientInputError before the handler runs.
        ToolError is turned into an error result; anything else propagates.
        """
        tool = self.tools.get(name)
        if tool is None:
            raise UnknownTool(name)
        args: BaseModel | None = None
        if tool.input_model is not None:
            try:
                args = tool.input_model.model_validate(arguments or {})
            except ValidationError as exc:
                raise ClientInputError(
                    name, exc.errors(include_url=False, include_context=False)
                ) from exc
        _logger.info("Tool call: %s", name)
        try:
            payload = await tool.handler(args)
        except ToolError as exc:
            _logger.warning("Tool %s returned an error: %s", name, exc)
            return ToolResult(text=str(exc), is_error=True)
        return ToolResult.from_payload(payload)


@dataclass
class SplidTools:
    """Handlers for the Splid tools."""

    group_service: GroupService
    name_resolver: NameResolver

    async def health(self, _: None) -> dict[str, object]:
        """Static liveness check."""
        return {"ok": True}

    async def whoami(self, args: GroupSelectorInput) -> dict[str, object]:
        """Return the group and its members."""
        group = await self._resolve_group(args.selector())
        members = await self.group_service.list_members(group.id)
        return {
            "group": {"id": group.id, "currencyCode": group.currency_code},
            "members": [
                {"name": member.display_name, "userId": member.stable_id}
                for member in members
            ],
        }

    async def create_expense(self, args: CreateExpenseInput) -> object:
        """Validate, resolve member names and create the expense."""
        group = await self._resolve_group(args.selector())
        currency = args.currency_code or group.currency_code or FALLBACK_CURRENCY
        validate_share_sum(profiteer.share for profiteer in args.profiteers)

        names = names_to_resolve(args.payers, args.profiteers)
        name_to_id: dict[str, str] = {}
        if names:
            name_to_id = await self.name_resolver.resolve(group.id, names)
        payers, profiteers = normalize_parties(args.payers, args.profiteers, name_to_id)

        return await self.group_service.create_expense(
            ExpenseRequest(
                group_id=group.id,
                title=args.title,
                amount=args.amount,
                currency_code=currency,
                payers=payers,
                profiteers=profiteers,
            )
        )

    async def list_entries(self, args: ListEntriesInput) -> object:
        """Return the most recent entries up to the requested limit."""
        group = await self._resolve_group(args.selector())
        return await self.group_service.list_entries(group.id, 0, args.limit)

    async def get_group_summary(self, args: GroupSelectorInput) -> dict[str, object]:
        """Return the balance record for the group."""
        group = await self._resolve_group(args.selector())
        balance = await self.group_service.get_group_summary(group.id)
        return {"balance": _balance_payload(balance)}

    async def _resolve_group(self, selector: GroupSelector) -> GroupRef:
        if selector.is_empty:
            return await self.group_service.get_default_group()
        return await self.group_service.resolve_group(selector)


def _balance_payload(balance: GroupBalance) -> dict[str, object]:
    return {
        "groupId": balance.group_id,
        "currencyCode": balance.currency_code,
        "members": [
            {
                "userId": member.user_id,
                "name": member.name,
                "paid": member.paid,
                "consumed": member.consumed,
                "balance": member.balance,
            }
            for member in balance.members
        ],
    }


def build_tool_registry(group_service: GroupService) -> ToolRegistry:
    """Create a registry with all Splid tools wired to a group service."""
    tools = SplidTools(
        group_service=group_service, name_resolver=NameResolver(group_service)
    )
    registry = ToolRegistry()
    registry.register(
        ToolDefinition(
            name="health",
            title="Health",
            description="Basic connectivity check",
            handler=tools.health,
        )
    )
    registry.register(
        ToolDefinition(
            name="whoami",
            title="Who Am I",
            description="Return current group and members",
            handler=tools.whoami,
            input_model=GroupSelectorInput,
        )
    )
    registry.register(
        ToolDefinition(
            name="createExpense",
            title="Create Expense",
            description="Create an expense in the selected or default group",
            handler=tools.create_expense,
            input_model=CreateExpenseInput,
        )
    )
    registry.register(
        ToolDefinition(
            name="listEntries",
            title="List Entries",
            description="List recent entries in the selected or default group",
            handler=tools.list_entries,
            input_model=ListEntriesInput,
        )
    )
    registry.register(
        ToolDefinition(
            name="getGroupSummary",
            title="Group Summary",
            description="Balances/summary for the selected or default group",
            handler=tools.get_group_summary,
            input_model=GroupSelectorInput,
        )
    )
    return registry

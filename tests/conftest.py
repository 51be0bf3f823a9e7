"""Shared test fixtures."""

from dataclasses import dataclass, field

import pytest

from splid_mcp.adapters.splid_client import SplidClient
from splid_mcp.config import Settings
from splid_mcp.containers import AppContainer, build_session_manager
from splid_mcp.domain.errors import UnsupportedSelector
from splid_mcp.domain.expenses import ExpenseRequest
from splid_mcp.domain.groups import (
    GroupBalance,
    GroupRef,
    GroupSelector,
    Member,
    MemberBalance,
)
from splid_mcp.services.groups import GroupService
from splid_mcp.services.tools import build_tool_registry

ALICE_ID = "gid-alice"
BOB_ID = "gid-bob"


@dataclass
class InMemoryGroupService(GroupService):
    """In-memory group service that records calls."""

    default_group: GroupRef = field(
        default_factory=lambda: GroupRef(id="group-1", currency_code="USD")
    )
    groups: dict[str, GroupRef] = field(default_factory=dict)
    codes: dict[str, str] = field(default_factory=dict)
    members: dict[str, list[Member]] = field(default_factory=dict)
    entries: dict[str, list[dict[str, object]]] = field(default_factory=dict)
    created: list[ExpenseRequest] = field(default_factory=list)
    calls: list[str] = field(default_factory=list)
    fail_with: Exception | None = None

    def __post_init__(self) -> None:
        self.groups.setdefault(self.default_group.id, self.default_group)
        self.members.setdefault(
            self.default_group.id,
            [
                Member(display_name="Alice", stable_id=ALICE_ID),
                Member(display_name="Bob", stable_id=BOB_ID),
            ],
        )

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_with is not None:
            raise self.fail_with

    async def get_default_group(self) -> GroupRef:
        self._record("get_default_group")
        return self.default_group

    async def resolve_group(self, selector: GroupSelector) -> GroupRef:
        self._record("resolve_group")
        if selector.group_id:
            return self.groups[selector.group_id]
        if selector.group_code:
            return self.groups[self.codes[selector.group_code]]
        if selector.group_name:
            raise UnsupportedSelector("Group selection by name is not supported yet")
        return self.default_group

    async def list_members(self, group_id: str) -> list[Member]:
        self._record("list_members")
        return list(self.members.get(group_id, []))

    async def create_expense(self, request: ExpenseRequest) -> dict[str, object]:
        self._record("create_expense")
        self.created.append(request)
        return {"objectId": f"entry-{len(self.created)}", "title": request.title}

    async def list_entries(
        self, group_id: str, offset: int, limit: int
    ) -> list[dict[str, object]]:
        self._record("list_entries")
        return self.entries.get(group_id, [])[offset : offset + limit]

    async def get_group_summary(self, group_id: str) -> GroupBalance:
        self._record("get_group_summary")
        return GroupBalance(
            group_id=group_id,
            currency_code=self.groups[group_id].currency_code,
            members=[
                MemberBalance(
                    user_id=ALICE_ID, name="Alice", paid=10.0, consumed=5.0, balance=5.0
                ),
                MemberBalance(
                    user_id=BOB_ID, name="Bob", paid=0.0, consumed=5.0, balance=-5.0
                ),
            ],
        )


@dataclass
class FakeSplidClient(SplidClient):
    """Fake Splid client backed by in-memory records."""

    codes: dict[str, str] = field(default_factory=lambda: {"CODE123": "group-1"})
    infos: dict[str, dict[str, object]] = field(
        default_factory=lambda: {"group-1": {"defaultCurrencyCode": "EUR"}}
    )
    persons: dict[str, list[dict[str, object]]] = field(default_factory=dict)
    entries: dict[str, list[dict[str, object]]] = field(default_factory=dict)
    created: list[dict[str, object]] = field(default_factory=list)
    entry_queries: list[tuple[str, int, int]] = field(default_factory=list)

    async def join_group(self, code: str) -> str:
        return self.codes[code]

    async def get_group_info(self, group_id: str) -> dict[str, object]:
        return self.infos[group_id]

    async def get_persons(self, group_id: str) -> list[dict[str, object]]:
        return self.persons.get(group_id, [])

    async def get_entries(
        self, group_id: str, skip: int, limit: int
    ) -> list[dict[str, object]]:
        self.entry_queries.append((group_id, skip, limit))
        return self.entries.get(group_id, [])[skip : skip + limit]

    async def create_entry(self, entry: dict[str, object]) -> dict[str, object]:
        self.created.append(entry)
        return {**entry, "objectId": "entry-1"}


@pytest.fixture
def settings() -> Settings:
    return Settings(
        splid_code="CODE123",
        splid_app_id="app-id",
        splid_client_key="client-key",
    )


@pytest.fixture
def group_service() -> InMemoryGroupService:
    return InMemoryGroupService()


@pytest.fixture
def container(
    settings: Settings, group_service: InMemoryGroupService
) -> AppContainer:
    registry = build_tool_registry(group_service)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        group_service=group_service,
        tool_registry=registry,
        session_manager=build_session_manager(registry),
        close_resources=close_resources,
    )

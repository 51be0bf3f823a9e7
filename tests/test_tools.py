"""Tests for the tool registry and tool handlers."""

import asyncio
import json

import pytest

from splid_mcp.domain.errors import ClientInputError, UnknownTool
from splid_mcp.domain.expenses import PayerAmount, ProfiteerShare
from splid_mcp.domain.groups import GroupRef
from splid_mcp.services.tools import build_tool_registry
from tests.conftest import ALICE_ID, BOB_ID, InMemoryGroupService


def _call(service: InMemoryGroupService, name: str, arguments: dict | None = None):
    registry = build_tool_registry(service)
    return asyncio.run(registry.call(name, arguments))


def test_registry_lists_five_tools_with_schemas() -> None:
    registry = build_tool_registry(InMemoryGroupService())

    tools = {tool.name: tool for tool in registry.describe()}

    assert list(tools) == [
        "health",
        "whoami",
        "createExpense",
        "listEntries",
        "getGroupSummary",
    ]
    create_schema = tools["createExpense"].inputSchema
    assert {"title", "amount", "payers", "profiteers"} <= set(
        create_schema["required"]
    )
    assert "groupId" in create_schema["properties"]
    assert "currencyCode" in create_schema["properties"]
    limit_schema = tools["listEntries"].inputSchema["properties"]["limit"]
    assert limit_schema["default"] == 20
    assert limit_schema["maximum"] == 100


def test_health_returns_ok() -> None:
    result = _call(InMemoryGroupService(), "health")

    assert result.is_error is False
    assert json.loads(result.text) == {"ok": True}


def test_unknown_tool_raises() -> None:
    with pytest.raises(UnknownTool):
        _call(InMemoryGroupService(), "deleteEverything")


def test_whoami_returns_default_group_and_members() -> None:
    service = InMemoryGroupService()

    result = _call(service, "whoami")

    payload = json.loads(result.text)
    assert payload["group"] == {"id": "group-1", "currencyCode": "USD"}
    assert payload["members"] == [
        {"name": "Alice", "userId": ALICE_ID},
        {"name": "Bob", "userId": BOB_ID},
    ]
    assert service.calls == ["get_default_group", "list_members"]


def test_create_expense_resolves_names_and_forwards_ids() -> None:
    service = InMemoryGroupService()

    result = _call(
        service,
        "createExpense",
        {
            "title": "Dinner",
            "amount": 12.5,
            "payers": [{"name": "Alice", "amount": 12.5}],
            "profiteers": [
                {"name": "Bob", "share": 0.6},
                {"name": "Alice", "share": 0.4},
            ],
        },
    )

    assert result.is_error is False
    assert json.loads(result.text) == {"objectId": "entry-1", "title": "Dinner"}
    request = service.created[0]
    assert request.group_id == "group-1"
    assert request.amount == 12.5
    assert request.currency_code == "USD"
    assert request.payers == [PayerAmount(user_id=ALICE_ID, amount=12.5)]
    assert request.profiteers == [
        ProfiteerShare(user_id=BOB_ID, share=0.6),
        ProfiteerShare(user_id=ALICE_ID, share=0.4),
    ]
    assert service.calls == ["get_default_group", "list_members", "create_expense"]


def test_create_expense_share_mismatch_is_tool_error() -> None:
    service = InMemoryGroupService()

    result = _call(
        service,
        "createExpense",
        {
            "title": "Taxi",
            "amount": 20,
            "payers": [{"userId": ALICE_ID, "amount": 20}],
            "profiteers": [
                {"userId": ALICE_ID, "share": 0.5},
                {"userId": BOB_ID, "share": 0.4},
            ],
        },
    )

    assert result.is_error is True
    assert "0.9" in result.text
    assert "create_expense" not in service.calls
    assert "list_members" not in service.calls


def test_create_expense_unknown_member_is_tool_error() -> None:
    service = InMemoryGroupService()

    result = _call(
        service,
        "createExpense",
        {
            "title": "Taxi",
            "amount": 20,
            "payers": [{"name": "Mallory", "amount": 20}],
            "profiteers": [{"name": "Bob", "share": 1}],
        },
    )

    assert result.is_error is True
    assert result.text == "Unknown member name: Mallory"
    assert not service.created


def test_create_expense_with_ids_skips_member_lookup() -> None:
    service = InMemoryGroupService()

    _call(
        service,
        "createExpense",
        {
            "title": "Groceries",
            "amount": 30,
            "currencyCode": "CHF",
            "payers": [{"userId": BOB_ID, "amount": 30}],
            "profiteers": [{"userId": ALICE_ID, "share": 1}],
        },
    )

    assert service.calls == ["get_default_group", "create_expense"]
    assert service.created[0].currency_code == "CHF"


def test_create_expense_falls_back_to_eur() -> None:
    service = InMemoryGroupService(default_group=GroupRef(id="group-1"))

    _call(
        service,
        "createExpense",
        {
            "title": "Snacks",
            "amount": 4,
            "payers": [{"userId": BOB_ID, "amount": 4}],
            "profiteers": [{"userId": ALICE_ID, "share": 1}],
        },
    )

    assert service.created[0].currency_code == "EUR"


def test_create_expense_uses_selected_group() -> None:
    service = InMemoryGroupService()
    service.groups["group-2"] = GroupRef(id="group-2", currency_code="GBP")
    service.codes["TRIP"] = "group-2"

    _call(
        service,
        "createExpense",
        {
            "groupCode": "TRIP",
            "title": "Museum",
            "amount": 8,
            "payers": [{"userId": BOB_ID, "amount": 8}],
            "profiteers": [{"userId": BOB_ID, "share": 1}],
        },
    )

    assert service.calls[0] == "resolve_group"
    assert service.created[0].group_id == "group-2"
    assert service.created[0].currency_code == "GBP"


def test_group_name_selector_fails_explicitly() -> None:
    service = InMemoryGroupService()

    result = _call(service, "listEntries", {"groupName": "Holidays"})

    assert result.is_error is True
    assert "not supported" in result.text
    assert "list_entries" not in service.calls


@pytest.mark.parametrize(
    "arguments",
    [
        {"amount": 10, "payers": [], "profiteers": []},
        {
            "title": "x",
            "amount": 0,
            "payers": [{"userId": "a", "amount": 1}],
            "profiteers": [{"userId": "a", "share": 1}],
        },
        {
            "title": "x",
            "amount": 1,
            "payers": [{"amount": 1}],
            "profiteers": [{"userId": "a", "share": 1}],
        },
        {
            "title": "x",
            "amount": 1,
            "payers": [{"userId": "a", "amount": -1}],
            "profiteers": [{"userId": "a", "share": 1}],
        },
        {
            "title": "x",
            "amount": 1,
            "payers": [{"userId": "a", "amount": 1}],
            "profiteers": [{"userId": "a", "share": 1.5}],
        },
        {
            "title": "x",
            "amount": 1,
            "payers": [{"userId": "a", "amount": 1}],
            "profiteers": [{"name": "Bob", "share": 0}],
        },
        {
            "title": "x",
            "amount": "inf",
            "payers": [{"userId": "a", "amount": 1}],
            "profiteers": [{"userId": "a", "share": 1}],
        },
        {
            "title": "x",
            "amount": 1,
            "payers": [{"userId": "a", "amount": float("inf")}],
            "profiteers": [{"userId": "a", "share": 1}],
        },
        {
            "title": "x",
            "amount": 1,
            "payers": [{"userId": "a", "amount": 1}],
            "profiteers": [{"userId": "a", "share": float("nan")}],
        },
    ],
)
def test_create_expense_schema_violations_never_reach_service(
    arguments: dict[str, object],
) -> None:
    service = InMemoryGroupService()

    with pytest.raises(ClientInputError):
        _call(service, "createExpense", arguments)

    assert service.calls == []


def test_list_entries_defaults_to_twenty() -> None:
    service = InMemoryGroupService()
    service.entries["group-1"] = [{"objectId": f"e{i}"} for i in range(30)]

    result = _call(service, "listEntries", {})

    assert len(json.loads(result.text)) == 20


def test_list_entries_limit_above_bound_is_rejected() -> None:
    service = InMemoryGroupService()

    with pytest.raises(ClientInputError) as exc_info:
        _call(service, "listEntries", {"limit": 150})

    assert exc_info.value.errors[0]["loc"] == ("limit",)
    assert "limit:" in str(exc_info.value)
    assert service.calls == []


def test_get_group_summary_returns_balance() -> None:
    service = InMemoryGroupService()

    result = _call(service, "getGroupSummary", {"groupId": "group-1"})

    balance = json.loads(result.text)["balance"]
    assert balance["groupId"] == "group-1"
    assert balance["currencyCode"] == "USD"
    assert balance["members"][0] == {
        "userId": ALICE_ID,
        "name": "Alice",
        "paid": 10.0,
        "consumed": 5.0,
        "balance": 5.0,
    }
    assert service.calls == ["resolve_group", "get_group_summary"]


def test_collaborator_errors_propagate() -> None:
    service = InMemoryGroupService(fail_with=RuntimeError("splid down"))

    with pytest.raises(RuntimeError, match="splid down"):
        _call(service, "listEntries", {"limit": 5})

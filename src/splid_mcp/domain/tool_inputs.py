"""Pydantic input schemas for the exposed tools."""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from splid_mcp.domain.groups import GroupSelector

DEFAULT_ENTRY_LIMIT = 20
MAX_ENTRY_LIMIT = 100


class ToolInput(BaseModel):
    """Base model accepting both camelCase aliases and field names."""

    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)


class GroupSelectorInput(ToolInput):
    """Optional group selection shared by group-scoped tools."""

    group_id: str | None = Field(
        default=None, alias="groupId", description="Splid group object id"
    )
    group_code: str | None = Field(
        default=None, alias="groupCode", description="Group invite code"
    )
    group_name: str | None = Field(
        default=None,
        alias="groupName",
        description="Group name (selection by name is not supported yet)",
    )

    def selector(self) -> GroupSelector:
        """Return the domain selector for these fields."""
        return GroupSelector(
            group_id=self.group_id,
            group_code=self.group_code,
            group_name=self.group_name,
        )


class PayerInput(ToolInput):
    """Payer referenced by member id or display name."""

    user_id: str | None = Field(default=None, alias="userId")
    name: str | None = None
    amount: float = Field(gt=0)

    @model_validator(mode="after")
    def _require_reference(self) -> "PayerInput":
        if not self.user_id and not self.name:
            raise ValueError("Either userId or name required for payer")
        return self


class ProfiteerInput(ToolInput):
    """Profiteer referenced by member id or display name."""

    user_id: str | None = Field(default=None, alias="userId")
    name: str | None = None
    share: float = Field(gt=0, le=1)

    @model_validator(mode="after")
    def _require_reference(self) -> "ProfiteerInput":
        if not self.user_id and not self.name:
            raise ValueError("Either userId or name required for profiteer")
        return self


class CreateExpenseInput(GroupSelectorInput):
    """Arguments for the createExpense tool."""

    title: str
    amount: float = Field(gt=0)
    currency_code: str | None = Field(default=None, alias="currencyCode")
    payers: list[PayerInput] = Field(min_length=1)
    profiteers: list[ProfiteerInput] = Field(min_length=1)


class ListEntriesInput(GroupSelectorInput):
    """Arguments for the listEntries tool."""

    limit: int = Field(default=DEFAULT_ENTRY_LIMIT, ge=1, le=MAX_ENTRY_LIMIT)

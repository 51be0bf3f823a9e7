"""Domain models for expense creation."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PayerAmount:
    """Payer with a resolved member id."""

    user_id: str
    amount: float


@dataclass(frozen=True)
class ProfiteerShare:
    """Profiteer with a resolved member id."""

    user_id: str
    share: float


@dataclass(frozen=True)
class ExpenseRequest:
    """Validated expense ready to be forwarded to the group service."""

    group_id: str
    title: str
    amount: float
    currency_code: str
    payers: list[PayerAmount]
    profiteers: list[ProfiteerShare]

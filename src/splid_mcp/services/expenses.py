"""Expense validation and party normalization."""

from collections.abc import Iterable, Mapping, Sequence

from splid_mcp.domain.errors import ShareSumMismatch, UnresolvedParty
from splid_mcp.domain.expenses import PayerAmount, ProfiteerShare
from splid_mcp.domain.tool_inputs import PayerInput, ProfiteerInput

SHARE_EPSILON = 1e-6


def validate_share_sum(shares: Iterable[float]) -> float:
    """Return the share total, raising when it is not 1 within epsilon."""
    total = 0.0
    for share in shares:
        total += share
    if abs(total - 1) > SHARE_EPSILON:
        raise ShareSumMismatch(total)
    return total


def names_to_resolve(
    payers: Sequence[PayerInput], profiteers: Sequence[ProfiteerInput]
) -> list[str]:
    """Return names of parties lacking a user id, deduplicated in order."""
    names = [
        party.name
        for party in [*payers, *profiteers]
        if not party.user_id and party.name
    ]
    return list(dict.fromkeys(names))


def normalize_parties(
    payers: Sequence[PayerInput],
    profiteers: Sequence[ProfiteerInput],
    name_to_id: Mapping[str, str],
) -> tuple[list[PayerAmount], list[ProfiteerShare]]:
    """Replace names with member ids; raise if any id is still missing."""
    normalized_payers: list[PayerAmount] = []
    for payer in payers:
        user_id = payer.user_id or name_to_id.get(payer.name or "")
        if not user_id:
            raise UnresolvedParty()
        normalized_payers.append(PayerAmount(user_id=user_id, amount=payer.amount))

    normalized_profiteers: list[ProfiteerShare] = []
    for profiteer in profiteers:
        user_id = profiteer.user_id or name_to_id.get(profiteer.name or "")
        if not user_id:
            raise UnresolvedParty()
        normalized_profiteers.append(
            ProfiteerShare(user_id=user_id, share=profiteer.share)
        )
    return normalized_payers, normalized_profiteers

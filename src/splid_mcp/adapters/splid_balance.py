"""Balance computation over raw Splid records."""

from collections.abc import Iterable

from splid_mcp.domain.groups import GroupBalance, MemberBalance


def compute_balance(
    group_id: str,
    persons: Iterable[dict[str, object]],
    entries: Iterable[dict[str, object]],
    group_info: dict[str, object],
) -> GroupBalance:
    """Compute paid, consumed and net balance per member.

    Amounts are summed as stored on each entry; entries in a currency other
    than the group default are not converted. Deleted entries are skipped.
    """
    names: dict[str, str] = {}
    for person in persons:
        global_id = person.get("GlobalId")
        if isinstance(global_id, str):
            names[global_id] = str(person.get("name") or "")

    paid: dict[str, float] = dict.fromkeys(names, 0.0)
    consumed: dict[str, float] = dict.fromkeys(names, 0.0)

    for entry in entries:
        if entry.get("isDeleted"):
            continue
        items = entry.get("items") or []
        total = 0.0
        for item in items:
            amount = float(item.get("AM") or 0)
            total += amount
            shares = (item.get("P") or {}).get("P") or {}
            for user_id, share in shares.items():
                consumed[user_id] = consumed.get(user_id, 0.0) + amount * float(share)
        secondary = entry.get("secondaryPayers") or {}
        for user_id, amount in secondary.items():
            paid[user_id] = paid.get(user_id, 0.0) + float(amount)
        primary = entry.get("primaryPayer")
        if isinstance(primary, str):
            remainder = total - sum(float(value) for value in secondary.values())
            paid[primary] = paid.get(primary, 0.0) + remainder

    members = [
        MemberBalance(
            user_id=user_id,
            name=names.get(user_id, ""),
            paid=paid.get(user_id, 0.0),
            consumed=consumed.get(user_id, 0.0),
            balance=paid.get(user_id, 0.0) - consumed.get(user_id, 0.0),
        )
        for user_id in sorted(set(paid) | set(consumed))
    ]
    currency = group_info.get("defaultCurrencyCode")
    return GroupBalance(
        group_id=group_id,
        currency_code=currency if isinstance(currency, str) else None,
        members=members,
    )

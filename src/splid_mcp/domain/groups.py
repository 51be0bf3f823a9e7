"""Domain models for Splid groups and members."""

from dataclasses import dataclass


@dataclass(frozen=True)
class GroupRef:
    """Identifies a resolved group."""

    id: str
    currency_code: str | None = None


@dataclass(frozen=True)
class GroupSelector:
    """Caller-supplied group selection; all fields optional."""

    group_id: str | None = None
    group_code: str | None = None
    group_name: str | None = None

    @property
    def is_empty(self) -> bool:
        """Return true when no selector field carries a value."""
        return not (self.group_id or self.group_code or self.group_name)


@dataclass(frozen=True)
class Member:
    """Group member snapshot entry."""

    display_name: str
    stable_id: str


@dataclass(frozen=True)
class MemberBalance:
    """Per-member balance line."""

    user_id: str
    name: str
    paid: float
    consumed: float
    balance: float


@dataclass(frozen=True)
class GroupBalance:
    """Balance record for a whole group."""

    group_id: str
    currency_code: str | None
    members: list[MemberBalance]

"""Error taxonomy for tool invocation and sessions."""


class ToolError(Exception):
    """Error reported to the caller as a tool-level result, not a failure."""


class ShareSumMismatch(ToolError):
    """Profiteer shares do not add up to one."""

    def __init__(self, actual_sum: float) -> None:
        super().__init__(f"Shares must sum to 1. Current sum: {actual_sum}")
        self.actual_sum = actual_sum


class UnknownMemberName(ToolError):
    """A display name has no matching member in the group."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown member name: {name}")
        self.name = name


class UnresolvedParty(ToolError):
    """A payer or profiteer is still missing a member id after resolution."""

    def __init__(self) -> None:
        super().__init__("Failed to resolve all user names to IDs")


class UnsupportedSelector(ToolError):
    """The group selector variant is not supported."""


class ClientInputError(Exception):
    """Tool arguments failed schema validation."""

    def __init__(self, tool_name: str, errors: list[dict[str, object]]) -> None:
        details = "; ".join(
            ".".join(str(part) for part in error.get("loc", ()))
            + f": {error.get('msg')}"
            for error in errors
        )
        super().__init__(f"Invalid arguments for tool {tool_name}: {details}")
        self.tool_name = tool_name
        self.errors = errors


class UnknownTool(Exception):
    """No tool is registered under the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Tool {name} not found")
        self.name = name


class SessionError(Exception):
    """Missing or unknown session identifier."""

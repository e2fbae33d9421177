"""trimwire exception hierarchy.

All trimwire-specific exceptions inherit from TrimwireError.
"""


class TrimwireError(Exception):
    """Base exception for all trimwire errors."""


class InvalidToolArgumentsError(TrimwireError):
    """Raised when a host tool is invoked with malformed arguments."""


class SquashError(TrimwireError):
    """Base class for squash failures the caller can correct."""


class AnchorNotFoundError(SquashError):
    """Raised when a squash anchor does not occur in the conversation."""

    def __init__(self, label: str) -> None:
        self.label = label
        super().__init__(f"{label} not found in conversation")


class AmbiguousAnchorError(SquashError):
    """Raised when a squash anchor occurs in more than one message."""

    def __init__(self, label: str, count: int) -> None:
        self.label = label
        self.count = count
        super().__init__(
            f"Found multiple matches for {label} ({count} messages). "
            f"Provide a larger string with more surrounding context "
            f"to uniquely identify the intended match."
        )


class RangeOrderError(SquashError):
    """Raised when the start anchor comes after the end anchor."""

    def __init__(self) -> None:
        super().__init__(
            "startString appears after endString in the conversation. "
            "Start must come before end."
        )


class PruneToolError(TrimwireError):
    """Raised when the prune tool receives ids it cannot resolve."""

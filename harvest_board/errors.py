"""Error types for the harvest planner board.

Most failures in the board are recovered locally (malformed references are
skipped, unknown references fall back to raw ids). The types here cover the
cases callers can observe.
"""


class HarvestBoardError(Exception):
    """Base exception for all harvest board errors."""

    pass


class InvalidDayKeyError(HarvestBoardError, ValueError):
    """Raised when a day key is not a valid YYYY-MM-DD string."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid day key: {value!r}")


class MovePersistenceError(HarvestBoardError):
    """Raised by persistence adapters when a plan update is rejected.

    Attributes:
        title: Optional human-readable title supplied by the server
        payload: Optional response payload the error was built from
    """

    def __init__(self, message: str = "", *, title: str | None = None, payload: dict | None = None):
        self.title = title
        self.payload = payload
        super().__init__(message)

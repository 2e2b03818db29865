"""
Typed error hierarchy for league operations.

Services raise these; ActionPipeline converts them into ActionResult
objects so nothing raw ever reaches a caller. ``public_message`` is the
only text a caller sees.
"""

from __future__ import annotations

from typing import Dict, Optional


class LeagueError(Exception):
    """Base class for all handled league errors."""

    kind = "unexpected_error"
    public_message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.public_message
        super().__init__(self.message)


class Unauthenticated(LeagueError):
    kind = "unauthenticated"
    public_message = "Not authenticated"


class Forbidden(LeagueError):
    kind = "forbidden"
    public_message = "You do not have permission to perform this action"


class InvalidInput(LeagueError):
    """Validation failed; ``details`` maps field name -> reason."""

    kind = "invalid_input"
    public_message = "Invalid input"

    def __init__(self, details: Dict[str, str], message: Optional[str] = None):
        self.details = details
        super().__init__(message)


class RateLimited(LeagueError):
    kind = "rate_limited"
    public_message = "Too many requests. Please try again later."

    def __init__(self, retry_after: int, message: Optional[str] = None):
        self.retry_after = retry_after
        super().__init__(message)


class NotFound(LeagueError):
    kind = "not_found"
    public_message = "Not found"


class Conflict(LeagueError):
    kind = "conflict"
    public_message = "Conflicts with existing data"


class PersistenceFailure(LeagueError):
    """Upstream store failed. ``detail`` is logged, never shown."""

    kind = "persistence_failure"
    public_message = "A storage error occurred. Please try again later."

    def __init__(self, detail: str = "", operation: Optional[str] = None):
        self.detail = detail
        self.operation = operation
        super().__init__(None)


class ExternalTimeout(LeagueError):
    kind = "timeout"
    public_message = "The service took too long to respond. Please try again."

    def __init__(self, operation: Optional[str] = None):
        self.operation = operation
        super().__init__(None)


class UnexpectedError(LeagueError):
    kind = "unexpected_error"


class CounterStoreUnavailable(Exception):
    """Rate limit counter store could not be reached. Never leaves RateLimiter."""

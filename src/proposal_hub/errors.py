"""Typed errors raised by the proposal lifecycle core."""

from typing import Optional


class ProposalHubError(Exception):
    """Base class for all errors surfaced to callers of the core."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ProposalHubError, ValueError):
    """Malformed or missing fields, detected before anything is submitted."""

    def __init__(self, message: str, problems: Optional[list[str]] = None):
        super().__init__(message)
        self.problems = problems or [message]


class ConflictError(ProposalHubError):
    """Duplicate vendor response or a transition the state machine does not allow."""


class AuthorizationError(ProposalHubError):
    """The acting user is not the party that owns the record."""


class NotFoundError(ProposalHubError):
    """Referenced proposal, response or solution does not exist."""

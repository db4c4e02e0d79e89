"""Domain errors raised by repositories and the moderation workflow.

The HTTP layer maps each class to a status code in ``soulscribe.main``.
"""
from __future__ import annotations


class SoulScribeError(Exception):
    status_code = 500
    retryable = False

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class NotFound(SoulScribeError):
    status_code = 404


class ValidationError(SoulScribeError):
    status_code = 422


class ConflictError(SoulScribeError):
    status_code = 409


class ExternalServiceFailure(SoulScribeError):
    status_code = 503
    retryable = True


class UnrecordedIssuance(ExternalServiceFailure):
    """The ledger minted a token that could not be recorded locally."""

    status_code = 500
    retryable = False

    def __init__(self, detail: str, *, content_id: int, ledger_token_id: str) -> None:
        super().__init__(detail)
        self.content_id = content_id
        self.ledger_token_id = ledger_token_id

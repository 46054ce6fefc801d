# pocketledger/core/exceptions.py
from fastapi import status


class LedgerError(Exception):
    """Base class for failures of a single ledger, debt or goal operation."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "ledger_error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(LedgerError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"

    def __init__(self, entity: str):
        super().__init__(f"{entity} not found")
        self.entity = entity


class UnauthorizedError(LedgerError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "unauthorized"

    def __init__(self, entity: str):
        super().__init__(f"{entity} belongs to another user")
        self.entity = entity


class TypeMismatchError(LedgerError):
    code = "type_mismatch"


class InsufficientBalanceError(LedgerError):
    code = "insufficient_balance"

    def __init__(self, detail: str = "Insufficient balance"):
        super().__init__(detail)


class InvalidStateError(LedgerError):
    code = "invalid_state"


class ExceedsRemainingError(LedgerError):
    code = "exceeds_remaining"

    def __init__(self, detail: str = "Payment amount exceeds remaining debt"):
        super().__init__(detail)


class ExceedsTargetError(LedgerError):
    code = "exceeds_target"

    def __init__(self, detail: str = "Contribution would exceed target amount"):
        super().__init__(detail)


class MismatchError(LedgerError):
    code = "mismatch"

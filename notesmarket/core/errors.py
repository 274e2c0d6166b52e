"""
Business outcomes of marketplace operations.
None of these is a system fault: each is a terminal, caller-recoverable decision
that the HTTP boundary maps to a response (see notesmarket.main).
"""


class MarketplaceError(Exception):
    code = "marketplace_error"
    status_code = 400
    default_message = "Marketplace operation failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(MarketplaceError):
    code = "not_found"
    status_code = 404
    default_message = "Not found"


class Unavailable(MarketplaceError):
    code = "unavailable"
    status_code = 410
    default_message = "This note is no longer available for purchase"


class SelfPurchaseRejected(MarketplaceError):
    code = "self_purchase_rejected"
    status_code = 400
    default_message = "You cannot purchase your own note"


class AlreadyPurchased(MarketplaceError):
    code = "already_purchased"
    status_code = 409
    default_message = "You have already purchased this note"


class DuplicateTransaction(MarketplaceError):
    code = "duplicate_transaction"
    status_code = 409
    default_message = "Transaction hash already used"


class Unauthorized(MarketplaceError):
    code = "unauthorized"
    status_code = 403
    default_message = "Not allowed"


class ValidationFailed(MarketplaceError):
    code = "validation_failed"
    status_code = 422
    default_message = "Invalid input"


class RateLimited(MarketplaceError):
    code = "rate_limited"
    status_code = 429
    default_message = "Too many purchases. Try again later."

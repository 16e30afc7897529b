# utils/errors.py
"""
Error taxonomy shared by the collection core and the HTTP layer.

Every error carries the HTTP status it maps to, so the blueprints never have
to translate them by hand: the handlers registered in app.py do it.
"""


class FinanceError(Exception):
    status_code = 500
    message = "Server error"

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_dict(self):
        return {"message": self.message}


class ValidationFailed(FinanceError):
    """Missing required field or value out of range. Raised before any write."""

    status_code = 400
    message = "Please provide all required fields"

    def __init__(self, errors, message=None):
        # errors: list of {"field": ..., "reason": ...}
        self.errors = list(errors)
        if message is None and self.errors:
            fields = ", ".join(e["field"] for e in self.errors)
            message = f"Invalid or missing fields: {fields}"
        super().__init__(message)

    @classmethod
    def single(cls, field, reason):
        return cls([{"field": field, "reason": reason}])

    def to_dict(self):
        return {"message": self.message, "errors": self.errors}


class AuthError(FinanceError):
    status_code = 401
    message = "Not authorized"


class Unauthenticated(AuthError):
    message = "Not authorized, no token"


class InvalidToken(AuthError):
    message = "Not authorized, token failed"


class InvalidCredentials(AuthError):
    message = "Invalid credentials"


class DuplicateUser(FinanceError):
    status_code = 400
    message = "User already exists"


class ParentNotFound(FinanceError):
    status_code = 404
    message = "User not found"


class ItemNotFound(FinanceError):
    status_code = 404

    def __init__(self, entity="Item", item_id=None, already_removed=False):
        self.entity = entity
        self.item_id = item_id
        self.already_removed = already_removed
        suffix = " or already deleted" if already_removed else ""
        super().__init__(f"{entity} not found{suffix}")


class StorageUnavailable(FinanceError):
    """The atomic update could not be performed. Callers may retry."""

    status_code = 503
    message = "Storage unavailable, please retry"

    def to_dict(self):
        return {"message": self.message, "retryable": True}

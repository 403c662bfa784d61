"""
Account error taxonomy.

Every error carries the HTTP status it maps to at the request boundary and a
short client-facing message. Handlers in nogod.main turn them into
{"message": ...} JSON responses.
"""


class AccountError(Exception):
    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: str = ""):
        self.message = message or self.default_message
        super().__init__(self.message)


class DuplicateIdentity(AccountError):
    status_code = 400
    default_message = "User already exists"


class AccountNotFound(AccountError):
    status_code = 404
    default_message = "User not found"


class BadFormat(AccountError):
    status_code = 400
    default_message = "Invalid email or mobile number format"


class InvalidCredentials(AccountError):
    status_code = 400
    default_message = "Invalid credentials"


class AccountBlocked(AccountError):
    status_code = 403
    default_message = "Account is blocked"


class NotEligible(AccountError):
    status_code = 404
    default_message = "Agent not found or already approved"


class BadId(AccountError):
    status_code = 400
    default_message = "Invalid account id"


class Unauthorized(AccountError):
    status_code = 401
    default_message = "Unauthorized access"


class Forbidden(AccountError):
    status_code = 403
    default_message = "Forbidden access"


class InvalidToken(Forbidden):
    default_message = "Invalid token"


class StorageUnavailable(AccountError):
    status_code = 500
    default_message = "Storage unavailable"

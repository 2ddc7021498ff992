"""
Security Service Errors

Error taxonomy shared by every layer. Adapters raise StoreUnavailable,
use cases raise NotFound / Invalid / Internal, the API maps them to HTTP.
"""


class SecurityServiceError(Exception):
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, code: str = None):
        self.message = message
        if code is not None:
            self.code = code
        super().__init__(message)


class StoreUnavailable(SecurityServiceError):
    """Backing key-value store failed or could not be reached"""

    code = "STORE_UNAVAILABLE"


class NotFound(SecurityServiceError):
    """Alert, key or event absent"""

    code = "NOT_FOUND"


class Invalid(SecurityServiceError):
    """Malformed input, configuration or state transition"""

    code = "INVALID"


class Internal(SecurityServiceError):
    """Unexpected failure"""

    code = "INTERNAL_ERROR"

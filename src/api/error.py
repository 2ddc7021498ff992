from fastapi import status

from src.domain.errors import Invalid, NotFound, SecurityServiceError


class ClientError(Exception):
    def __init__(self, base_error: SecurityServiceError, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(self, base_error: SecurityServiceError):
        self.base_error = base_error
        super().__init__(base_error.message)


def to_http_error(error: SecurityServiceError) -> Exception:
    """Map a service error to the exception the app's handlers render"""
    if isinstance(error, NotFound):
        return ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
    if isinstance(error, Invalid):
        return ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
    return ServerError(error)

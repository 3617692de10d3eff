"""Domain-specific exceptions"""


class LoansApiError(Exception):
    """Base exception for the loans API client"""

    pass


class InvalidAccessTokenError(LoansApiError):
    """Session token was rejected by the API (HTTP 401), re-authentication is required"""

    pass


class UnexpectedResponseError(LoansApiError):
    """Transport failed before an HTTP response was received (timeout, refused connection, protocol error)"""

    pass

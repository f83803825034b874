class InsightsPortalException(Exception):
    """Base exception for the insights portal"""

    pass


class ValidationException(InsightsPortalException):
    """Raised for missing or malformed local input; never reaches the network"""

    pass


class ConfigurationException(InsightsPortalException):
    """Raised when required configuration (the API base URL) is absent"""

    pass


class UnauthorizedException(InsightsPortalException):
    """
    Raised when the credential is missing, tampered with, expired, or
    rejected by the upstream API with a 401.

    Always escalates to a whole-session invalidation.
    """

    pass


class UpstreamException(InsightsPortalException):
    """Raised when an upstream call fails with a non-success status"""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.message = message
        self.status = status


class MalformedResponseException(UpstreamException):
    """Raised when a success response does not have the expected shape"""

    pass


class UnreachableException(UpstreamException):
    """Raised when no response was obtained (connection error or timeout)"""

    pass

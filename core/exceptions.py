"""Custom exception classes for the city lookup service."""


class LookupServiceError(Exception):
    """Base exception for all lookup service errors.

    ``status_code`` is the HTTP status the error maps to when it escapes a
    request handler; ``message`` is what the client sees.
    """

    status_code: int = 500

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class MissingParameterError(LookupServiceError):
    """Raised when a required query parameter is missing or blank."""

    status_code = 400


class CityNotFoundError(LookupServiceError):
    """Raised when the geocoder has no match for a city."""

    status_code = 404


class UpstreamUnavailableError(LookupServiceError):
    """Raised when a required upstream service fails or returns a non-success status."""

    status_code = 502


class ServiceInitializationError(LookupServiceError):
    """Raised when a service fails to initialize."""

    pass


class ConfigurationError(LookupServiceError):
    """Raised when there's a configuration error."""

    pass

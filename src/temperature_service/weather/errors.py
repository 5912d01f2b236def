"""Error kinds raised by the temperature service."""


class TemperatureServiceError(Exception):
    """Base class for failures that reach the request boundary.

    Each subclass carries a ``kind`` string that the API layer reports
    verbatim and maps to an HTTP status code.
    """

    kind = "InternalError"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(TemperatureServiceError):
    """Raised when request parameters are missing or malformed."""

    kind = "InvalidInput"
    status_code = 400


class NotFoundError(TemperatureServiceError):
    """Raised when a location name has no geocoding candidates."""

    kind = "NotFound"
    status_code = 404


class UpstreamError(TemperatureServiceError):
    """Raised when a geocoding or forecast API is unreachable or fails."""

    kind = "UpstreamFailure"
    status_code = 502

"""Error taxonomy shared by the mutation operations, gateways and API."""
from fastapi import status


class FinTrackError(Exception):
    """Base class for errors surfaced to API clients."""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(FinTrackError):
    """Update/delete target absent or not owned by the caller."""
    status_code = status.HTTP_404_NOT_FOUND


class UnauthorizedError(FinTrackError):
    """Missing or invalid bearer token."""
    status_code = status.HTTP_401_UNAUTHORIZED


class RecordValidationError(FinTrackError):
    """Malformed input rejected before the record store is touched."""
    status_code = status.HTTP_400_BAD_REQUEST


class PersistenceUnavailableError(FinTrackError):
    """The persistence backend failed to load or save a collection."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

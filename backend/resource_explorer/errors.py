"""
Error taxonomy for the resource explorer and the mapping to response envelopes.

InputError                 -> 400
NotFoundError              -> 404 (incl. ConfigurationMissingError)
UpstreamError / anything   -> 500
"""
from typing import Optional, Tuple

from fastapi import status

from resource_explorer.models.schemas import ResourceResponse

UNKNOWN_ERROR_MESSAGE = "Unknown error occurred"


class ResourceExplorerError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class InputError(ResourceExplorerError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(ResourceExplorerError):
    status_code = status.HTTP_404_NOT_FOUND


class ConfigurationMissingError(NotFoundError):
    """A required upstream endpoint is not configured."""


class UpstreamError(ResourceExplorerError):
    """Upstream call failed in transport, timed out or answered non-2xx."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.upstream_status = status_code
        self.body = body


def to_envelope(error: BaseException) -> Tuple[ResourceResponse, int]:
    if isinstance(error, ResourceExplorerError):
        code = error.status_code
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = str(error) or UNKNOWN_ERROR_MESSAGE
    return ResourceResponse(success=False, error=message), code

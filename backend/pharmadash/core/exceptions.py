"""
Domain exceptions and their HTTP translation.

Domain errors are raised by the services layer and never carry HTTP details.
Routes turn them into responses through `BusinessError`.

SECURITY: gateway error messages are surfaced verbatim (the user needs them to
fix a URL or key), but internal failures are logged and hidden.
"""
from typing import Iterable

from fastapi import HTTPException, status
import logging

logger = logging.getLogger(__name__)


class PharmaDashError(Exception):
    """Base class for errors raised by the dashboard services."""


class CredentialError(PharmaDashError):
    """Endpoint URL or access key missing. Never reaches the gateway."""


class NotConnectedError(PharmaDashError):
    """A view or the stats were used without an active gateway handle."""

    def __init__(self, message: str = "Database connection not available. Please connect to your database."):
        super().__init__(message)


class RecordValidationError(PharmaDashError):
    """Insert rejected locally: required fields empty or values of the wrong type."""

    def __init__(self, message: str, fields: Iterable[str] = ()):
        super().__init__(message)
        self.fields = list(fields)


class ReadOnlyViewError(PharmaDashError):
    """The view has no insert form (e.g. low stock)."""


class UnknownViewError(PharmaDashError):
    """No view or tab with that name."""


class BusinessError:
    """HTTP exceptions with safe messages."""

    @staticmethod
    def not_found(resource: str = "Resource", reason: str = "") -> HTTPException:
        if reason:
            logger.warning(f"Not found: {resource} - {reason}")
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found",
        )

    @staticmethod
    def bad_request(detail) -> HTTPException:
        """
        400 for input validation errors.

        OK to include specific details here since user caused the issue.
        Examples: "Missing required fields: drug_name", "Endpoint URL is required"
        """
        logger.info(f"Bad request: {detail}")
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )

    @staticmethod
    def method_not_allowed(detail: str) -> HTTPException:
        logger.info(f"Method not allowed: {detail}")
        return HTTPException(
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            detail=detail,
        )

    @staticmethod
    def bad_gateway(detail: str) -> HTTPException:
        """
        502 - the hosted data API refused the request.

        The gateway's own message is passed through unchanged.
        """
        logger.warning(f"Gateway error: {detail}")
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=detail,
        )

    @staticmethod
    def service_unavailable(detail: str) -> HTTPException:
        """503 - no validated connection to the data API yet."""
        logger.info(f"Service unavailable: {detail}")
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=detail,
        )

    @staticmethod
    def server_error(original_error: Exception = None) -> HTTPException:
        """
        Generic 500 - logs actual error internally, hides from user.
        """
        if original_error:
            logger.error(
                f"Internal server error: {type(original_error).__name__}: {str(original_error)}",
                exc_info=True
            )
        else:
            logger.error("Internal server error occurred", exc_info=True)

        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An internal error occurred. Please try again later.",
        )

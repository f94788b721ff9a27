import logging
from typing import Any, Dict, Optional, Tuple

from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.db import DatabaseError, IntegrityError, OperationalError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ErrorCode:
    # 4xx Client Errors
    BAD_REQUEST = 400
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    CONFLICT = 409
    VALIDATION_ERROR = 422

    # Layout specific errors
    INVALID_SLOT_TREE = 4221
    NO_PUBLISHED_CONFIGURATION = 4091
    EMPTY_PUBLISHED_CONFIGURATION = 4092
    DRAFT_NOT_FOUND = 4041
    REVERT_NOT_ALLOWED = 4093

    # 5xx Server Errors
    INTERNAL_SERVER_ERROR = 500
    SERVICE_UNAVAILABLE = 503
    DATABASE_ERROR = 5001
    INTEGRITY_ERROR = 5005


class ErrorMessage:
    BAD_REQUEST = "Invalid request"
    NOT_FOUND = "The requested resource was not found"
    VALIDATION_ERROR = "Validation error occurred"
    CONFLICT = "The request conflicts with the current layout state"
    INTERNAL_SERVER_ERROR = "An unexpected error occurred"
    DATABASE_ERROR = "Database error occurred"
    OPERATIONAL_ERROR = "Layout storage is temporarily unavailable"


def get_error_details(exception: Exception) -> Tuple[int, int, str, Dict[str, Any]]:
    """
    Get standardized error details from an exception
    Returns: (http_status_code, error_code, error_message, error_params)
    """
    error_params = {}

    if isinstance(exception, ValidationError):
        if hasattr(exception, "message_dict"):
            error_params["field_errors"] = exception.message_dict
        elif hasattr(exception, "messages"):
            error_params["messages"] = exception.messages
        return (
            status.HTTP_400_BAD_REQUEST,
            ErrorCode.VALIDATION_ERROR,
            ErrorMessage.VALIDATION_ERROR,
            error_params,
        )

    if isinstance(exception, ObjectDoesNotExist):
        return (
            status.HTTP_404_NOT_FOUND,
            ErrorCode.NOT_FOUND,
            str(exception) or ErrorMessage.NOT_FOUND,
            error_params,
        )

    if isinstance(exception, Http404):
        return (
            status.HTTP_404_NOT_FOUND,
            ErrorCode.NOT_FOUND,
            ErrorMessage.NOT_FOUND,
            error_params,
        )

    if isinstance(exception, IntegrityError):
        logger.error(f"Integrity error while storing layout: {exception}")
        return (
            status.HTTP_409_CONFLICT,
            ErrorCode.INTEGRITY_ERROR,
            ErrorMessage.CONFLICT,
            error_params,
        )

    if isinstance(exception, OperationalError):
        logger.error(f"Database operational error: {exception}")
        return (
            status.HTTP_503_SERVICE_UNAVAILABLE,
            ErrorCode.SERVICE_UNAVAILABLE,
            ErrorMessage.OPERATIONAL_ERROR,
            error_params,
        )

    if isinstance(exception, DatabaseError):
        logger.error(f"Database error: {exception}")
        return (
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            ErrorCode.DATABASE_ERROR,
            ErrorMessage.DATABASE_ERROR,
            error_params,
        )

    if isinstance(exception, DRFValidationError):
        if isinstance(exception.detail, dict):
            error_params["field_errors"] = exception.detail
        elif isinstance(exception.detail, list):
            error_params["errors"] = exception.detail
        return (
            status.HTTP_400_BAD_REQUEST,
            ErrorCode.VALIDATION_ERROR,
            ErrorMessage.VALIDATION_ERROR,
            error_params,
        )

    # Layout exceptions carry their own code and params
    if isinstance(exception, APIException):
        status_code = getattr(exception, "status_code", status.HTTP_500_INTERNAL_SERVER_ERROR)
        error_code = getattr(exception, "error_code", status_code)
        error_params = dict(getattr(exception, "params", None) or {})
        return (status_code, error_code, str(exception.detail), error_params)

    logger.error(f"Unhandled exception: {type(exception).__name__}: {exception}")
    return (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorCode.INTERNAL_SERVER_ERROR,
        ErrorMessage.INTERNAL_SERVER_ERROR,
        error_params,
    )


class ErrorResponse:
    """
    Standardized error response format for the API
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        code: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
    ):
        self.status_code = status_code
        self.message = message
        self.code = code or ErrorCode.INTERNAL_SERVER_ERROR
        self.params = params or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status_code,
            "error": {
                "code": self.code,
                "message": self.message,
                "params": self.params,
            },
            "success": False,
        }

    def to_response(self) -> Response:
        return Response(self.to_dict(), status=self.status_code)

    @classmethod
    def from_exception(cls, exc: Exception) -> "ErrorResponse":
        status_code, error_code, message, params = get_error_details(exc)
        return cls(status_code=status_code, message=message, code=error_code, params=params)


def handle_error(
    status_code: int,
    message: str,
    code: Optional[int] = None,
    params: Optional[Dict[str, Any]] = None,
) -> Response:
    """Helper function to create a consistent error response"""
    return ErrorResponse(status_code, message, code, params).to_response()


def bad_request(message: str = ErrorMessage.BAD_REQUEST, params: Optional[Dict] = None) -> Response:
    """400 Bad Request"""
    return handle_error(status.HTTP_400_BAD_REQUEST, message, ErrorCode.BAD_REQUEST, params)


def not_found(message: str = ErrorMessage.NOT_FOUND, params: Optional[Dict] = None) -> Response:
    """404 Not Found"""
    return handle_error(status.HTTP_404_NOT_FOUND, message, ErrorCode.NOT_FOUND, params)


def custom_exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    """
    Exception handler that wraps every error in the ErrorResponse envelope.
    """
    if isinstance(exc, (DatabaseError, ValidationError, ObjectDoesNotExist)):
        return ErrorResponse.from_exception(exc).to_response()

    response = exception_handler(exc, context)

    if response is None:
        return ErrorResponse.from_exception(exc).to_response()

    status_code, error_code, message, params = get_error_details(exc)
    response.data = ErrorResponse(
        status_code=response.status_code,
        message=message,
        code=error_code,
        params=params,
    ).to_dict()
    return response

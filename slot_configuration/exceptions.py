from rest_framework import status
from rest_framework.exceptions import APIException

from storefront_layout.utils.error_handler import ErrorCode


class SlotConfigurationError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Slot configuration error"
    default_code = "slot_configuration_error"
    error_code = ErrorCode.BAD_REQUEST

    def __init__(self, detail=None, params=None):
        super().__init__(detail)
        self.params = params or {}


class InvalidSlotConfiguration(SlotConfigurationError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = "Slot configuration failed validation"
    default_code = "invalid_slot_configuration"
    error_code = ErrorCode.INVALID_SLOT_TREE

    def __init__(self, violations=(), detail=None):
        self.violations = list(violations)
        super().__init__(
            detail,
            params={"violations": [violation.as_dict() for violation in self.violations]},
        )


class NoPublishedConfiguration(SlotConfigurationError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "No published configuration exists for this page"
    default_code = "no_published_configuration"
    error_code = ErrorCode.NO_PUBLISHED_CONFIGURATION


class EmptyPublishedConfiguration(SlotConfigurationError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The published configuration has no slots"
    default_code = "empty_published_configuration"
    error_code = ErrorCode.EMPTY_PUBLISHED_CONFIGURATION


class DraftNotFound(SlotConfigurationError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "No draft configuration found"
    default_code = "draft_not_found"
    error_code = ErrorCode.DRAFT_NOT_FOUND


class DraftAlreadyPublished(SlotConfigurationError):
    """Raised by the gateway when a draft was published or removed concurrently."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "Draft was already published"
    default_code = "draft_already_published"
    error_code = ErrorCode.CONFLICT


class RevertNotAllowed(SlotConfigurationError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Configuration cannot be reverted"
    default_code = "revert_not_allowed"
    error_code = ErrorCode.REVERT_NOT_ALLOWED

# backend/utils/exceptions.py
from enum import Enum
from typing import Any, Dict, Optional

from fastapi import status


class ErrorCode(Enum):
    """Error codes returned in the `error.code` field of every rejection."""

    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFLICT = "CONFLICT"
    INTERNAL = "INTERNAL"


class WorkflowError(Exception):
    """Base class for errors raised by the fulfillment workflow core.

    Each subclass fixes its HTTP status; handlers in utils.error_handlers
    turn them into ``{"error": {"code", "message", "context"}}`` bodies.
    """

    code: ErrorCode = ErrorCode.INTERNAL
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(message)

    def to_response(self) -> Dict[str, Any]:
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "context": self.context,
            }
        }


class NotFoundError(WorkflowError):
    code = ErrorCode.NOT_FOUND
    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(WorkflowError):
    code = ErrorCode.FORBIDDEN
    status_code = status.HTTP_403_FORBIDDEN


class InvalidTransitionError(WorkflowError):
    code = ErrorCode.INVALID_TRANSITION
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, current_status: str, requested_status: str):
        self.current_status = current_status
        self.requested_status = requested_status
        super().__init__(
            f"Invalid status transition: {current_status} -> {requested_status}",
            {"currentStatus": current_status, "requestedStatus": requested_status},
        )


class RequestValidationFailed(WorkflowError):
    code = ErrorCode.VALIDATION_ERROR
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(WorkflowError):
    code = ErrorCode.CONFLICT
    status_code = status.HTTP_409_CONFLICT


class InternalError(WorkflowError):
    code = ErrorCode.INTERNAL
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

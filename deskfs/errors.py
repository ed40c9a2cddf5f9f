# python
"""
deskfs/errors.py
Failure taxonomy for rejected filesystem operations.

Mutations report failure as a plain False; the reason is kept alongside so
callers that want a message (the CLI, a dialog) can build one.
"""
from enum import Enum
from typing import Optional


class FailureReason(str, Enum):
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    PERMISSION_DENIED = "permission_denied"
    INVALID_OPERATION = "invalid_operation"


FAILURE_MESSAGES = {
    FailureReason.NOT_FOUND: "No such file or directory",
    FailureReason.ALREADY_EXISTS: "File exists",
    FailureReason.PERMISSION_DENIED: "Permission denied",
    FailureReason.INVALID_OPERATION: "Invalid operation",
}


def describe(reason: Optional[FailureReason]) -> str:
    if reason is None:
        return "Unknown error"
    return FAILURE_MESSAGES[reason]

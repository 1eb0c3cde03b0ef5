# SPDX-License-Identifier: Apache-2.0

"""
Domain exception hierarchy.

Each exception carries the HTTP status and problem type the error handler
renders it with.
"""

from typing import List, Optional


class SafeBridgeError(Exception):
    """Base class for domain exceptions."""

    def __init__(self, message: str, status_code: int = 500, error_type: str = "application-error"):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_type = error_type


class ValidationError(SafeBridgeError):
    """A draft or request is missing a required field or holds an invalid value."""

    def __init__(self, message: str, validation_errors: Optional[List[str]] = None):
        super().__init__(message, 400, "validation-error")
        self.validation_errors = validation_errors or []


class ForbiddenError(SafeBridgeError):
    """The actor's role does not permit the operation."""

    def __init__(self, message: str, missing_capabilities: Optional[List[str]] = None):
        super().__init__(message, 403, "insufficient-permissions")
        self.missing_capabilities = missing_capabilities or []


class NotFoundError(SafeBridgeError):
    """An operation referenced an unknown case, user, resource or legal entry."""

    def __init__(self, message: str):
        super().__init__(message, 404, "resource-not-found")


def from_pydantic(error, message: str = "Invalid input") -> ValidationError:
    """
    Translate a pydantic ValidationError into a domain ValidationError.

    Args:
        error: pydantic.ValidationError instance
        message: Top-level error message

    Returns:
        Domain ValidationError listing each field problem
    """
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ()))
        text = item.get("msg", "invalid value")
        problems.append(f"{location}: {text}" if location else text)
    return ValidationError(message, problems)

# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Error handling middleware with structured problem responses.
Provides centralized error handling and formatting for the Flask application.
"""

from flask import Flask, request, jsonify
from werkzeug.exceptions import HTTPException
from typing import Any, Tuple
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
import logging

from ..domain.errors import SafeBridgeError, ValidationError, ForbiddenError
from ..services.hal import HalFormatter

logger = logging.getLogger(__name__)

ERROR_TITLES = {
    "validation-error": "Validation Error",
    "insufficient-permissions": "Insufficient Permissions",
    "resource-not-found": "Resource Not Found",
    "application-error": "Application Error",
}


class ErrorHandlerMiddleware:
    """Centralized error handling middleware with problem response formatting."""

    def __init__(self, app: Flask, hal_formatter: HalFormatter):
        self.app = app
        self.hal_formatter = hal_formatter
        self.register_error_handlers()

    def register_error_handlers(self):
        """Register error handlers with Flask application."""

        @self.app.errorhandler(SafeBridgeError)
        def handle_domain_error(error):
            return self.handle_domain_error(error)

        @self.app.errorhandler(HTTPException)
        def handle_http_exception(error):
            return self.handle_http_error(error)

        @self.app.errorhandler(Exception)
        def handle_generic_exception(error):
            return self.handle_unexpected_error(error)

    def handle_domain_error(self, error: SafeBridgeError) -> Tuple[Any, int]:
        """
        Handle validation, authorization and lookup failures from the domain.

        Args:
            error: Domain exception

        Returns:
            Tuple of (error response, status code)
        """
        span = trace.get_current_span()
        span.set_attributes({
            "error.type": error.error_type,
            "error.status": error.status_code
        })
        span.set_status(Status(StatusCode.ERROR, error.message))

        validation_errors = None
        if isinstance(error, ValidationError):
            validation_errors = error.validation_errors

        extra = {
            "error_type": error.error_type,
            "status_code": error.status_code,
            "path": request.path,
            "method": request.method
        }
        if isinstance(error, ForbiddenError):
            extra["missing_capabilities"] = error.missing_capabilities

        logger.warning(f"Request rejected: {error.error_type}", extra=extra)

        error_response = self.hal_formatter.format_error(
            error.error_type,
            ERROR_TITLES.get(error.error_type, "Error"),
            error.status_code,
            error.message,
            request.path,
            validation_errors
        )

        return jsonify(error_response), error.status_code

    def handle_http_error(self, error: HTTPException) -> Tuple[Any, int]:
        """
        Handle werkzeug HTTP errors (unknown route, wrong method, bad JSON).

        Args:
            error: HTTP exception

        Returns:
            Tuple of (error response, status code)
        """
        status = error.code or 500
        error_type = (error.name or "error").lower().replace(" ", "-")
        detail = str(error.description) if error.description else error.name

        log = logger.error if status >= 500 else logger.warning
        log(
            f"HTTP error: {error.name}",
            extra={
                "error_type": error_type,
                "status_code": status,
                "path": request.path,
                "method": request.method
            }
        )

        error_response = self.hal_formatter.format_error(
            error_type, error.name, status, detail, request.path
        )

        return jsonify(error_response), status

    def handle_unexpected_error(self, error: Exception) -> Tuple[Any, int]:
        """
        Handle unexpected exceptions not caught by specific handlers.

        Args:
            error: Unexpected exception

        Returns:
            Tuple of (error response, status code)
        """
        span = trace.get_current_span()
        span.record_exception(error)
        span.set_status(Status(StatusCode.ERROR, error.__class__.__name__))

        logger.error(
            f"Unexpected error: {error.__class__.__name__}",
            extra={
                "error_type": "unexpected-error",
                "error_class": error.__class__.__name__,
                "path": request.path,
                "method": request.method
            },
            exc_info=True
        )

        # Don't expose internal error details
        detail = "An unexpected error occurred"
        if self.app.config.get('ENVIRONMENT') != 'production':
            detail = f"{error.__class__.__name__}: {str(error)}"

        error_response = self.hal_formatter.format_error(
            "internal-server-error", "Internal Server Error", 500, detail, request.path
        )

        return jsonify(error_response), 500

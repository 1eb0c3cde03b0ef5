# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request utilities for extracting and processing request data.
"""

from flask import request
from pydantic import BaseModel, ValidationError as PydanticValidationError
from typing import Any, Dict, Optional, Type, TypeVar
import logging

from ..domain.errors import ValidationError, from_pydantic

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class RequestParser:
    """Utility for parsing and extracting request data."""

    @staticmethod
    def get_json_body() -> Dict[str, Any]:
        """
        Extract the JSON object sent with the request.

        An empty body is treated as an empty object.

        Raises:
            ValidationError: If the body is not a JSON object
        """
        if not request.get_data(cache=True):
            return {}

        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError(
                "Request body must be a JSON object",
                ["body: expected a JSON object"]
            )
        return data

    @staticmethod
    def parse_body(model: Type[ModelT]) -> ModelT:
        """
        Validate the JSON body against a request model.

        Args:
            model: Pydantic request model

        Returns:
            Validated model instance

        Raises:
            ValidationError: If the body does not match the model
        """
        data = RequestParser.get_json_body()
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            logger.warning(
                "Request body validation failed",
                extra={"model": model.__name__, "error_count": e.error_count()}
            )
            raise from_pydantic(e, "Invalid request body") from e

    @staticmethod
    def get_limit_param(default: Optional[int] = None, maximum: int = 100) -> Optional[int]:
        """
        Extract an optional positive ``limit`` query parameter.

        Invalid values fall back to the default.
        """
        raw = request.args.get('limit')
        if raw is None:
            return default
        try:
            limit = int(raw)
        except (TypeError, ValueError):
            return default
        return max(1, min(limit, maximum))

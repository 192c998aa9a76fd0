"""Domain errors and their mapping onto JSON API responses."""

from __future__ import annotations

import logging
from typing import Any

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for errors raised by the booking services."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Request could not be processed'

    def __init__(self, message: str | None = None, *, errors: dict[str, Any] | None = None) -> None:
        self.message = message or self.default_message
        self.errors = errors or {}
        super().__init__(self.message)


class ValidationError(ServiceError):
    default_message = 'Missing required fields'


class AvailabilityError(ValidationError):
    """Raised when requested seats cannot be allocated."""

    default_message = 'Selected seats are no longer available'


class Conflict(ServiceError):
    default_message = 'Resource already exists'


class AuthenticationFailed(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = 'Invalid email or password'


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Not found'


def _flatten_detail(detail: Any) -> str:
    if isinstance(detail, dict):
        if 'detail' in detail:
            return str(detail['detail'])
        for value in detail.values():
            return _flatten_detail(value)
        return ''
    if isinstance(detail, (list, tuple)):
        return _flatten_detail(detail[0]) if detail else ''
    return str(detail)


def api_exception_handler(exc: Exception, context: dict[str, Any]) -> Response:
    """Render every failure as ``{"message": ...}``; unexpected errors become a 500."""

    if isinstance(exc, ServiceError):
        payload: dict[str, Any] = {'message': exc.message}
        if exc.errors:
            payload['errors'] = exc.errors
        return Response(payload, status=exc.status_code)

    response = exception_handler(exc, context)
    if response is not None:
        response.data = {'message': _flatten_detail(response.data)}
        return response

    view = context.get('view')
    logger.error(
        'Unhandled error in %s',
        view.__class__.__name__ if view is not None else 'unknown view',
        exc_info=exc,
    )
    return Response({'message': 'Internal server error'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

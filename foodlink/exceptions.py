# foodlink/exceptions.py
"""
API error type and the DRF exception handler that wraps every failure in the
``{success: false, error: ...}`` envelope.
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ApiError(exceptions.APIException):
    """An error with an explicit HTTP status, raised from views and lifecycle code."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Bad request'

    def __init__(self, status_code, message):
        self.status_code = status_code
        super().__init__(detail=message)


def flatten_errors(detail):
    """Collapse a DRF error structure into a flat list of messages."""
    if isinstance(detail, dict):
        messages = []
        for field, value in detail.items():
            for message in flatten_errors(value):
                if field in ('non_field_errors', 'detail', '__all__'):
                    messages.append(message)
                else:
                    messages.append(f"{field}: {message}")
        return messages
    if isinstance(detail, (list, tuple)):
        messages = []
        for item in detail:
            messages.extend(flatten_errors(item))
        return messages
    return [str(detail)]


def api_exception_handler(exc, context):
    if isinstance(exc, DjangoValidationError):
        exc = exceptions.ValidationError(
            exc.message_dict if hasattr(exc, 'error_dict') else exc.messages
        )

    response = exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        logger.exception("Unhandled error in %s", view.__class__.__name__ if view else 'view')
        return Response(
            {'success': False, 'error': 'Server Error'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, exceptions.ValidationError):
        message = ', '.join(flatten_errors(exc.detail))
    elif isinstance(exc, Http404):
        message = 'Not found'
    elif isinstance(exc, exceptions.APIException):
        message = ', '.join(flatten_errors(exc.detail))
    else:
        message = str(exc)

    response.data = {'success': False, 'error': message}
    return response

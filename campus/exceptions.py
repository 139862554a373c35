import logging

from django.db import IntegrityError
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class Conflict(exceptions.APIException):
    """A record with the same unique key already exists."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Record already exists.'
    default_code = 'conflict'


def _flatten_message(data):
    if isinstance(data, list) and len(data) == 1 and isinstance(data[0], str):
        return str(data[0])
    if isinstance(data, dict) and len(data) == 1:
        return _flatten_message(next(iter(data.values())))
    return None


def api_exception_handler(exc, context):
    """
    Render every error as ``{"message": ..., "details": ...}``.

    DRF's own handler takes care of status codes (401 with a WWW-Authenticate
    header, 403, 404, 405, ...). Integrity errors escaping a view are reported
    as conflicts and anything else becomes an opaque 500.
    """
    response = exception_handler(exc, context)
    view = context.get('view')

    if response is None:
        if isinstance(exc, IntegrityError):
            logger.warning(f"Integrity error in {view.__class__.__name__}: {exc}")
            return Response({'message': 'Record already exists'}, status=status.HTTP_400_BAD_REQUEST)
        logger.exception(f"Unhandled error in {view.__class__.__name__}", exc_info=exc)
        return Response({'message': 'Internal Server Error'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    data = response.data
    if isinstance(exc, exceptions.ValidationError):
        message = _flatten_message(data)
        body = {'message': message or 'Validation failed'}
        # field errors stay available to forms, even when one of them is the message
        if message is None or (isinstance(data, dict) and set(data) != {'non_field_errors'}):
            body['details'] = data
        response.data = body
    elif isinstance(data, dict) and 'detail' in data:
        body = {'message': str(data['detail'])}
        extra = {key: value for key, value in data.items() if key != 'detail'}
        if extra:
            body['details'] = extra
        response.data = body
    return response

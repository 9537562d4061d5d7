# foodlink/views/helpers.py
from rest_framework import status
from rest_framework.response import Response

from ..exceptions import ApiError
from ..pagination import EnvelopePagination


def ok(data=None, message=None, status_code=status.HTTP_200_OK, **extra):
    """Success envelope: ``{success, message?, data?, ...extra}``."""
    body = {'success': True}
    if message:
        body['message'] = message
    if data is not None:
        body['data'] = data
    body.update(extra)
    return Response(body, status=status_code)


def paginated(request, queryset, serializer_class, **extra):
    paginator = EnvelopePagination()
    page = paginator.paginate_queryset(queryset, request)
    data = serializer_class(page, many=True, context={'request': request}).data
    return paginator.get_paginated_response(data, **extra)


def query_flag(request, name):
    return request.query_params.get(name, '').lower() == 'true'


def query_number(request, name, default=None, cast=float):
    raw = request.query_params.get(name)
    if raw in (None, ''):
        return default
    try:
        return cast(raw)
    except (TypeError, ValueError):
        raise ApiError(status.HTTP_400_BAD_REQUEST, f"{name} must be a number")

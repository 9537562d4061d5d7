# foodlink/views/impact_views.py
from rest_framework import status
from rest_framework.decorators import api_view

from ..exceptions import ApiError
from ..utils import impact
from .helpers import ok


def leaderboard_response(request):
    category = request.query_params.get('category', 'donors')
    rows = impact.leaderboard(category)
    if rows is None:
        raise ApiError(status.HTTP_400_BAD_REQUEST, 'Invalid category parameter')
    return ok(rows, category=category)


@api_view(['GET'])
def impact_summary(request):
    impact_type = request.query_params.get('type', 'personal')

    if impact_type == 'personal':
        return ok(impact.personal_impact(request.user) or {})
    if impact_type == 'leaderboard':
        return leaderboard_response(request)
    if impact_type == 'platform':
        return ok(impact.platform_impact())

    raise ApiError(status.HTTP_400_BAD_REQUEST, 'Invalid type parameter')


@api_view(['GET'])
def impact_leaderboard(request):
    return leaderboard_response(request)

import math

from django.core.paginator import Page
from rest_framework.exceptions import NotFound
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class EnvelopePagination(PageNumberPagination):
    """``?page=&limit=`` pagination wrapped in the standard response envelope."""

    page_size_query_param = 'limit'
    max_page_size = 100

    def paginate_queryset(self, queryset, request, view=None):
        try:
            return super().paginate_queryset(queryset, request, view)
        except NotFound:
            # Pages past the end are empty rather than missing.
            paginator = self.django_paginator_class(queryset, self.get_page_size(request))
            number = self.get_page_number(request, paginator)
            if not str(number).isdigit() or int(number) <= paginator.num_pages:
                raise
            self.request = request
            self.page = Page([], int(number), paginator)
            return []

    def get_paginated_response(self, data, **extra):
        total = self.page.paginator.count
        limit = self.get_page_size(self.request)
        return Response({
            'success': True,
            'data': data,
            **extra,
            'pagination': {
                'total': total,
                'page': self.page.number,
                'limit': limit,
                'total_pages': math.ceil(total / limit) if limit else 0,
            },
        })

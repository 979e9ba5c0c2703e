"""
ClinicStock — Pagination

Page-number paginator for list endpoints. Accepts ``page_size`` or the
older ``per_page`` alias and reports page totals alongside the rows.

@file core/pagination.py
"""

import math

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response

from core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


class StandardPagination(PageNumberPagination):
    page_size = DEFAULT_PAGE_SIZE
    page_size_query_param = 'page_size'
    max_page_size = MAX_PAGE_SIZE

    def get_page_size(self, request):
        if self.page_size_query_param not in request.query_params and 'per_page' in request.query_params:
            self.page_size_query_param = 'per_page'
        return super().get_page_size(request)

    def get_paginated_response(self, data):
        total = self.page.paginator.count
        per_page = self.page.paginator.per_page
        return Response({
            'count': total,
            'page': self.page.number,
            'per_page': per_page,
            'total_pages': max(1, math.ceil(total / per_page)),
            'next': self.get_next_link(),
            'previous': self.get_previous_link(),
            'results': data,
        })

# shared/pagination.py
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class StandardResultsSetPagination(PageNumberPagination):
    """?page=N&limit=M, 10 per page by default."""

    page_size = 10
    page_size_query_param = "limit"
    max_page_size = 100

    def get_paginated_response(self, data):
        page = self.page
        return Response(
            {
                "results": data,
                "pagination": {
                    "current_page": page.number,
                    "total_pages": page.paginator.num_pages,
                    "total_orders": page.paginator.count,
                    "limit": page.paginator.per_page,
                },
            }
        )

    def get_paginated_response_schema(self, schema):
        return {
            "type": "object",
            "required": ["results", "pagination"],
            "properties": {
                "results": schema,
                "pagination": {
                    "type": "object",
                    "properties": {
                        "current_page": {"type": "integer"},
                        "total_pages": {"type": "integer"},
                        "total_orders": {"type": "integer"},
                        "limit": {"type": "integer"},
                    },
                },
            },
        }

from rest_framework.pagination import PageNumberPagination


class StandardResultsSetPagination(PageNumberPagination):
    """``?page=N&limit=M`` pagination capped at 100 rows per page."""

    page_size = 20
    page_size_query_param = "limit"
    max_page_size = 100

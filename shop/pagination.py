# shop/pagination.py
from django.conf import settings
from rest_framework.pagination import PageNumberPagination


class ShopPagination(PageNumberPagination):
    page_size = settings.SHOP_ORDERS_PAGE_SIZE
    page_query_param = "page"

    def get_paginated_response(self, data):
        response = super().get_paginated_response(data)
        response.data["totalPages"] = self.page.paginator.num_pages
        response.data["currentPage"] = self.page.number
        return response


class CatalogPagination(ShopPagination):
    page_size = settings.SHOP_CATALOG_PAGE_SIZE


class OrdersPagination(ShopPagination):
    page_size = settings.SHOP_ORDERS_PAGE_SIZE


class CustomersPagination(ShopPagination):
    page_size = settings.SHOP_CUSTOMERS_PAGE_SIZE

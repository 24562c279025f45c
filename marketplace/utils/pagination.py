# marketplace/utils/pagination.py
"""Pagination utilities for consistent API responses."""
from pydantic import BaseModel
from math import ceil

class PaginationMeta(BaseModel):
    """Pagination metadata."""
    page: int
    size: int
    total: int
    total_pages: int
    has_next: bool
    has_previous: bool

class Paginator:
    """Pagination utility class."""

    @staticmethod
    def calculate_offset(page: int, size: int) -> int:
        """Calculate offset for database queries."""
        return (page - 1) * size

    @staticmethod
    def create_meta(page: int, size: int, total: int) -> PaginationMeta:
        """Create pagination metadata."""
        total_pages = ceil(total / size) if size > 0 else 0
        return PaginationMeta(
            page=page,
            size=size,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_previous=page > 1
        )

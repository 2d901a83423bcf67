import math

from pydantic import BaseModel


class PaginationMetadata(BaseModel):
    """Pagination metadata for list responses"""

    page: int
    limit: int
    total: int
    pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationMetadata":
        return cls(
            page=page,
            limit=limit,
            total=total,
            pages=math.ceil(total / limit) if total > 0 else 1,
            has_next=page * limit < total,
            has_prev=page > 1,
        )

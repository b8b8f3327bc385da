"""
Pagination Utility Module

List endpoints return the full result set unless the caller asks for a page.
"""
from typing import Optional

from pydantic import BaseModel
from sqlalchemy.sql import Select

from phdhub.core.config import settings


class PaginationParams(BaseModel):
    """Optional page parameters. Leaving both unset returns the full result set."""
    page: Optional[int] = None
    page_size: Optional[int] = None

    @property
    def enabled(self) -> bool:
        return self.page is not None or self.page_size is not None

    @property
    def limit(self) -> int:
        return max(1, min(settings.MAX_PAGE_SIZE, self.page_size or 20))

    @property
    def offset(self) -> int:
        return (max(1, self.page or 1) - 1) * self.limit


def apply_pagination(query: Select, params: PaginationParams) -> Select:
    """Apply LIMIT/OFFSET only when paging was requested"""
    if not params.enabled:
        return query
    return query.offset(params.offset).limit(params.limit)

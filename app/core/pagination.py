from typing import Optional

from fastapi import Query

from app.core.config import settings


class PageParams:
    """page (1-based) and limit query parameters shared by list endpoints."""

    def __init__(
        self,
        page: int = Query(1, ge=1),
        limit: Optional[int] = Query(None, ge=1),
    ) -> None:
        self.page = page
        self.limit = min(limit or settings.default_page_size, settings.max_page_size)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

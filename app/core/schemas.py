"""Shared response envelope and pagination models."""

from math import ceil
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for API schemas: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, total_pages=ceil(total / limit) if limit else 0)


class ApiResponse(CamelModel, Generic[T]):
    """Envelope returned by every endpoint: {success, data?, message?, pagination?}."""

    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None
    pagination: Optional[Pagination] = None


class Page(Generic[T]):
    """Rows of one page plus pagination metadata, returned by list services."""

    def __init__(self, items: List[T], pagination: Pagination) -> None:
        self.items = items
        self.pagination = pagination

    def map(self, fn) -> "Page":
        return Page([fn(i) for i in self.items], self.pagination)


def ok(data=None, message: Optional[str] = None, pagination: Optional[Pagination] = None) -> ApiResponse:
    return ApiResponse(success=True, data=data, message=message, pagination=pagination)


def paged(page: Page, message: Optional[str] = None) -> ApiResponse:
    return ApiResponse(success=True, data=page.items, message=message, pagination=page.pagination)

"""
Tenant scoping for every service query.

A TenantScope is bound to the caller's school_id (taken from the access token,
never from the request payload). Selects built through it always carry the
school_id predicate, rows added through it are always stamped with it, and
lookups by id return 404 for rows of other schools exactly as for absent rows.
"""
from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError
from app.core.pagination import PageParams
from app.core.schemas import Page, Pagination


class TenantScope:
    def __init__(self, db: AsyncSession, school_id: UUID) -> None:
        self.db = db
        self.school_id = school_id

    def where(self, model) -> Any:
        return model.school_id == self.school_id

    def select(self, model, *criteria) -> Select:
        return select(model).where(self.where(model), *criteria)

    def add(self, obj):
        obj.school_id = self.school_id
        self.db.add(obj)
        return obj

    async def get(self, model, obj_id: UUID, *criteria):
        result = await self.db.execute(self.select(model, model.id == obj_id, *criteria))
        return result.scalar_one_or_none()

    async def get_or_404(self, model, obj_id: UUID, label: Optional[str] = None):
        obj = await self.get(model, obj_id)
        if obj is None:
            raise NotFoundError(f"{label or model.__name__} not found")
        return obj

    async def all(self, stmt: Select) -> List[Any]:
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def exists(self, model, *criteria, exclude_id: Optional[UUID] = None) -> bool:
        stmt = select(model.id).where(self.where(model), *criteria)
        if exclude_id is not None:
            stmt = stmt.where(model.id != exclude_id)
        result = await self.db.execute(stmt.limit(1))
        return result.first() is not None

    async def ensure_unique(
        self,
        model,
        message: str,
        *criteria,
        exclude_id: Optional[UUID] = None,
    ) -> None:
        if await self.exists(model, *criteria, exclude_id=exclude_id):
            raise ConflictError(message)

    async def count(self, model, *criteria) -> int:
        stmt = select(func.count(model.id)).where(self.where(model), *criteria)
        result = await self.db.execute(stmt)
        return result.scalar() or 0

    async def paginate(self, stmt: Select, params: PageParams, scalars: bool = True) -> Page:
        total_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        total = (await self.db.execute(total_stmt)).scalar() or 0
        result = await self.db.execute(stmt.offset(params.offset).limit(params.limit))
        items: List[Any] = list(result.scalars().all()) if scalars else list(result.all())
        return Page(items, Pagination.build(params.page, params.limit, total))



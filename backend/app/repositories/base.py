from typing import Any, Generic, List, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import Select, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import BaseModel

ModelType = TypeVar("ModelType", bound=BaseModel)


class BaseRepository(Generic[ModelType]):
    """
    Generic async repository for one policy-store table.

    Filters are keyword equality matches on mapped columns; an unknown
    column name raises instead of being ignored, so a typo can never widen
    a query to every policy.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    def _select_where(self, **filters: Any) -> Select:
        stmt = select(self.model)
        for column, value in filters.items():
            if not hasattr(self.model, column):
                raise AttributeError(f"{self.model.__name__} has no column '{column}'")
            stmt = stmt.where(getattr(self.model, column) == value)
        return stmt

    async def create(self, **values: Any) -> ModelType:
        """
        Insert a row and return it with its generated ID and timestamps.

        The row is flushed, not committed; the caller owns the transaction.
        """
        instance = self.model(**values)
        self.db.add(instance)
        await self.db.flush()
        await self.db.refresh(instance)
        return instance

    async def get_by_id(self, id: UUID) -> Optional[ModelType]:
        result = await self.db.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def update(self, id: UUID, **values: Any) -> Optional[ModelType]:
        """
        Update columns of one row by primary key.

        Returns:
            The updated row, or None when no row has that ID
        """
        stmt = (
            update(self.model)
            .where(self.model.id == id)
            .values(**values)
            .returning(self.model)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def find_by(
        self,
        order_by: Optional[Any] = None,
        limit: Optional[int] = None,
        **filters: Any,
    ) -> List[ModelType]:
        """
        Rows matching every filter.

        Args:
            order_by: Ordering clause, e.g. ``Model.created_at.desc()``
            limit: Maximum number of rows
            **filters: Column equality filters

        Raises:
            AttributeError: If a filter names a column the model does not have
        """
        stmt = self._select_where(**filters)
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def find_one_by(self, **filters: Any) -> Optional[ModelType]:
        """First row matching every filter, or None."""
        result = await self.db.execute(self._select_where(**filters).limit(1))
        return result.scalars().first()

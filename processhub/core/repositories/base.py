"""
Base repository interface for ProcessHub.

This module provides the base repository pattern implementation
that all data access repositories should extend.
"""

from abc import ABC
from typing import Any, Generic, List, Optional, Type, TypeVar, Union
from uuid import UUID

from tortoise.models import Model

T = TypeVar("T", bound=Model)


def parse_uuid(value: Union[str, UUID, None]) -> Optional[UUID]:
    """
    Parse an identifier received from a client.

    Args:
        value: Identifier as string or UUID

    Returns:
        UUID instance or None when the value is not a valid UUID
    """
    if value is None:
        return None
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value).strip())
    except ValueError:
        return None


class BaseRepository(Generic[T], ABC):
    """
    Base repository interface providing common CRUD operations.

    This abstract base class defines the contract that all repositories
    must implement, providing a consistent interface for data access.
    """

    def __init__(self, model: Type[T]):
        """
        Initialize repository with its model.

        Args:
            model: Tortoise model class
        """
        self.model = model

    async def create(self, **kwargs: Any) -> T:
        """
        Create a new entity.

        Args:
            **kwargs: Entity attributes

        Returns:
            Created entity instance
        """
        return await self.model.create(**kwargs)

    async def get_by_id(self, entity_id: Union[str, UUID, None]) -> Optional[T]:
        """
        Get entity by ID.

        Args:
            entity_id: Entity identifier

        Returns:
            Entity instance or None if not found or malformed
        """
        pk = parse_uuid(entity_id)
        if pk is None:
            return None
        return await self.model.get_or_none(id=pk)

    async def get_all(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        order_by: Optional[List[str]] = None,
    ) -> List[T]:
        """
        Get all entities with optional pagination.

        Args:
            limit: Maximum number of entities to return
            offset: Number of entities to skip
            order_by: Tortoise ordering expressions, e.g. ``["-created_at"]``

        Returns:
            List of entities
        """
        query = self.model.all()
        if order_by:
            query = query.order_by(*order_by)
        if offset:
            query = query.offset(offset)
        if limit:
            query = query.limit(limit)
        return await query

    async def find_by(
        self, order_by: Optional[List[str]] = None, **filters: Any
    ) -> List[T]:
        """
        Find entities matching field filters.

        Args:
            order_by: Tortoise ordering expressions
            **filters: Tortoise filter keyword arguments

        Returns:
            List of matching entities
        """
        query = self.model.filter(**filters)
        if order_by:
            query = query.order_by(*order_by)
        return await query

    async def find_one_by(self, **filters: Any) -> Optional[T]:
        """
        Find the first entity matching field filters.

        Returns:
            Entity instance or None
        """
        return await self.model.filter(**filters).first()

    async def update(self, entity: T, **kwargs: Any) -> T:
        """
        Update fields on an entity and save it.

        Args:
            entity: Loaded entity
            **kwargs: Fields to update

        Returns:
            Updated entity instance
        """
        for key, value in kwargs.items():
            setattr(entity, key, value)
        await entity.save()
        return entity

    async def delete(self, entity_id: Union[str, UUID, None]) -> bool:
        """
        Delete entity by ID.

        Args:
            entity_id: Entity identifier

        Returns:
            True if deleted, False if not found
        """
        pk = parse_uuid(entity_id)
        if pk is None:
            return False
        deleted = await self.model.filter(id=pk).delete()
        return deleted > 0

    async def delete_all(self) -> int:
        """
        Delete every entity of this model.

        Returns:
            Number of deleted rows
        """
        return await self.model.all().delete()

    async def exists(self, entity_id: Union[str, UUID, None]) -> bool:
        """
        Check if entity exists by ID.

        Args:
            entity_id: Entity identifier

        Returns:
            True if exists, False otherwise
        """
        pk = parse_uuid(entity_id)
        if pk is None:
            return False
        return await self.model.filter(id=pk).exists()

    async def count(self, **filters: Any) -> int:
        """
        Get total count of entities.

        Args:
            **filters: Optional Tortoise filter keyword arguments

        Returns:
            Number of matching entities
        """
        return await self.model.filter(**filters).count()

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Catalog service for stored resources.

Search, recommendations and admin curation of the resources table.
Searches and recommendations only ever return active resources; deleted
resources stay in the table with is_active false unless removed
permanently.

Example:
    >>> catalog = CatalogService(db)
    >>> page = await catalog.search(ResourceSearchParams(subject="Physics", grade="O"))
    >>> page.total, page.has_more
    (42, True)
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from zimlearn.infrastructure.database.models import Resource, ResourceTag
from zimlearn.models.common import (
    Difficulty,
    Grade,
    ResourceSource,
    ResourceType,
    Subject,
    difficulty_for_grade,
)
from zimlearn.models.resource import (
    DEFAULT_DESCRIPTION,
    ResourceCreateRequest,
    ResourceUpdateRequest,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
SCOPED_RECOMMENDATION_LIMIT = 10
GENERAL_RECOMMENDATION_LIMIT = 5


class CatalogError(Exception):
    """Base exception for catalog operations."""

    pass


class ResourceNotFoundError(CatalogError):
    """Raised when no resource has the requested id."""

    pass


@dataclass
class ResourceSearchParams:
    """Filters and paging for a catalog search.

    Every filter is optional. Tags match when the resource carries any of
    them.
    """

    subject: Subject | None = None
    grade: Grade | None = None
    type: ResourceType | None = None
    difficulty: Difficulty | None = None
    source: ResourceSource | None = None
    tags: list[str] = field(default_factory=list)
    limit: int = DEFAULT_PAGE_SIZE
    skip: int = 0


@dataclass
class ResourcePage:
    """One page of search results."""

    resources: list[Resource]
    total: int
    has_more: bool


class CatalogService:
    """Service for querying and curating stored resources.

    Attributes:
        _db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize the catalog service.

        Args:
            db: Async database session.
        """
        self._db = db

    async def search(self, params: ResourceSearchParams) -> ResourcePage:
        """Search active resources, newest first.

        Args:
            params: Filters and paging.

        Returns:
            ResourcePage with has_more true when more results follow this page.
        """
        query = self._filtered(params)

        total = await self._db.scalar(select(func.count()).select_from(query.subquery()))
        total = total or 0

        result = await self._db.execute(
            query.order_by(Resource.created_at.desc(), Resource.id)
            .offset(params.skip)
            .limit(params.limit)
        )
        resources = list(result.scalars().all())

        return ResourcePage(
            resources=resources,
            total=total,
            has_more=total > params.skip + params.limit,
        )

    async def get(self, resource_id: str, include_inactive: bool = False) -> Resource:
        """Get a resource by id.

        Soft-deleted resources are only returned with include_inactive.

        Raises:
            ResourceNotFoundError: If no matching resource exists.
        """
        resource = await self._db.get(Resource, resource_id)
        if resource is None or not (resource.is_active or include_inactive):
            raise ResourceNotFoundError(f"Resource not found: {resource_id}")
        return resource

    async def recommendations(
        self,
        subject: Subject | None = None,
        grade: Grade | None = None,
        limit: int | None = None,
    ) -> list[Resource]:
        """Most recently added active resources.

        Scoped to subject and grade when either is given. Recommendations
        are not personalised.

        Args:
            subject: Optional subject scope.
            grade: Optional grade scope.
            limit: Cap on results. Defaults to 10 for a scoped request and
                5 otherwise.

        Returns:
            Resources, newest first.
        """
        scoped = subject is not None or grade is not None
        if limit is None:
            limit = SCOPED_RECOMMENDATION_LIMIT if scoped else GENERAL_RECOMMENDATION_LIMIT

        query = self._filtered(ResourceSearchParams(subject=subject, grade=grade))
        result = await self._db.execute(
            query.order_by(Resource.created_at.desc(), Resource.id).limit(limit)
        )
        return list(result.scalars().all())

    async def add_custom(self, data: ResourceCreateRequest) -> Resource:
        """Add an admin-curated resource.

        Args:
            data: Resource fields.

        Returns:
            The stored resource.
        """
        tags = data.tags
        if tags is None:
            tags = [data.subject.value, data.grade.value, data.type.value]

        resource = Resource(
            title=data.title,
            description=data.description or DEFAULT_DESCRIPTION,
            author=data.author,
            subject=data.subject.value,
            grade=data.grade.value,
            type=data.type.value,
            url=data.url,
            thumbnail_url=data.thumbnail_url,
            source=ResourceSource.CUSTOM.value,
            difficulty=(data.difficulty or difficulty_for_grade(data.grade)).value,
            is_active=True,
            extra_metadata=data.metadata,
            tags=tags,
        )
        self._db.add(resource)
        await self._db.commit()
        await self._db.refresh(resource)

        logger.info("Added custom resource: %s", resource.id)
        return resource

    async def update(self, resource_id: str, data: ResourceUpdateRequest) -> Resource:
        """Change the supplied fields of a resource.

        Args:
            resource_id: Resource identifier.
            data: Fields to change. Omitted fields are left as they are.

        Returns:
            The updated resource.

        Raises:
            ResourceNotFoundError: If no resource has this id.
        """
        resource = await self.get(resource_id, include_inactive=True)

        for key, value in data.changes().items():
            if key == "tags":
                resource.tags = value
            elif key == "metadata":
                resource.extra_metadata = value
            elif key == "description":
                resource.description = value or DEFAULT_DESCRIPTION
            else:
                setattr(resource, key, _column_value(value))

        await self._db.commit()
        await self._db.refresh(resource)

        logger.info("Updated resource: %s", resource.id)
        return resource

    async def soft_delete(self, resource_id: str) -> Resource:
        """Hide a resource from searches.

        Deleting an already inactive resource is not an error.

        Raises:
            ResourceNotFoundError: If no resource has this id.
        """
        resource = await self.get(resource_id, include_inactive=True)
        if resource.is_active:
            resource.is_active = False
            await self._db.commit()
            logger.info("Deactivated resource: %s", resource.id)
        return resource

    async def hard_delete(self, resource_id: str) -> None:
        """Remove a resource and its tags permanently.

        Raises:
            ResourceNotFoundError: If no resource has this id.
        """
        resource = await self.get(resource_id, include_inactive=True)
        await self._db.delete(resource)
        await self._db.commit()
        logger.info("Deleted resource: %s", resource_id)

    def _filtered(self, params: ResourceSearchParams) -> Select[tuple[Resource]]:
        query = select(Resource).where(Resource.is_active.is_(True))

        filters: list[tuple[Any, Any]] = [
            (Resource.subject, params.subject),
            (Resource.grade, params.grade),
            (Resource.type, params.type),
            (Resource.difficulty, params.difficulty),
            (Resource.source, params.source),
        ]
        for column, value in filters:
            if value is not None:
                query = query.where(column == _column_value(value))

        if params.tags:
            tagged = select(ResourceTag.resource_id).where(ResourceTag.value.in_(params.tags))
            query = query.where(Resource.id.in_(tagged))

        return query


def _column_value(value: Any) -> Any:
    """Store enum members by value."""
    return getattr(value, "value", value)

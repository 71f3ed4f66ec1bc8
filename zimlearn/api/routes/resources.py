# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Resource API endpoints.

Catalog:
- GET /                  - Search active resources (public)
- GET /recommendations   - Most recent resources (authenticated)
- GET /{resource_id}     - One resource (public)
- POST /, PUT /{id}, DELETE /{id} - Curation (admin)

Provider fetches (fetch, page, store, and return what was fetched):
- POST /fetch                                   - MoPSE, CollegePress and Teacha
- POST /fetch/{mopse,collegepress,teacha}       - One library provider (admin)
- POST /fetch/sbp                               - Secondary Book Press
- POST /fetch/oer                               - OER Commons and CK-12
- POST /fetch/{youtube,zimsec}                  - Videos and past papers (admin)
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status

from zimlearn.api.dependencies import (
    get_catalog_service,
    get_library_aggregator,
    get_oer_aggregator,
    get_sbp_aggregator,
    get_youtube_aggregator,
    get_zimsec_aggregator,
    require_admin,
    require_auth,
)
from zimlearn.api.middleware.auth import CurrentUser, get_current_user
from zimlearn.domains.resources.adapters.base import FetchQuery, ResourceDraft
from zimlearn.domains.resources.aggregation import (
    AggregationService,
    FetchResult,
    UnknownSourceError,
)
from zimlearn.domains.resources.catalog import (
    CatalogService,
    ResourceNotFoundError,
    ResourceSearchParams,
)
from zimlearn.infrastructure.database.models import Resource
from zimlearn.models.common import (
    Difficulty,
    Grade,
    MessageResponse,
    ResourceSource,
    ResourceType,
    Subject,
)
from zimlearn.models.resource import (
    FetchedResourceResponse,
    FetchRequest,
    FetchResponse,
    OERFetchRequest,
    PersistenceOutcomeResponse,
    PersistenceSummary,
    ProviderFetchRequest,
    ResourceCreateRequest,
    ResourceListResponse,
    ResourceResponse,
    ResourceUpdateRequest,
    SBPFetchRequest,
    SubjectGradeRequest,
)
from zimlearn.utils.datetime import ensure_utc

logger = logging.getLogger(__name__)

router = APIRouter()

_TEXT_FIELDS = (
    "id",
    "title",
    "description",
    "author",
    "subject",
    "grade",
    "type",
    "url",
    "thumbnail_url",
    "source",
    "difficulty",
)


# =========================================================================
# Response helpers
# =========================================================================


def _to_response(resource: Resource) -> ResourceResponse:
    """Build the API view of a stored resource."""
    return ResourceResponse(
        id=resource.id,
        title=resource.title,
        description=resource.description,
        author=resource.author,
        subject=resource.subject,
        grade=resource.grade,
        type=resource.type,
        url=resource.url,
        thumbnail_url=resource.thumbnail_url,
        source=resource.source,
        difficulty=resource.difficulty,
        tags=resource.tags,
        is_active=resource.is_active,
        metadata=resource.extra_metadata or {},
        created_at=ensure_utc(resource.created_at),
        updated_at=ensure_utc(resource.updated_at),
    )


def _to_fetched(draft: ResourceDraft) -> FetchedResourceResponse:
    """Build the API view of a fetched draft, stored or not.

    Drafts that failed validation may hold odd values, so text fields are
    stringified and unknown keys dropped.
    """
    data: dict[str, Any] = {
        key: str(draft[key]) if draft.get(key) is not None else None
        for key in _TEXT_FIELDS
    }
    tags = draft.get("tags")
    metadata = draft.get("metadata")
    data["tags"] = [str(tag) for tag in tags] if isinstance(tags, list) else []
    data["is_active"] = bool(draft.get("is_active", True))
    data["metadata"] = metadata if isinstance(metadata, dict) else {}
    return FetchedResourceResponse(**data)


def _fetch_response(result: FetchResult) -> FetchResponse:
    count = len(result.records)
    return FetchResponse(
        message=f"Successfully fetched {count} resources",
        count=count,
        resources=[_to_fetched(draft) for draft in result.records],
        persistence=PersistenceSummary(
            saved=result.saved_count,
            failed=result.failed_count,
            outcomes=[
                PersistenceOutcomeResponse(
                    index=outcome.index,
                    status=outcome.status,
                    id=outcome.id,
                    error=outcome.error,
                )
                for outcome in result.outcomes
            ],
        ),
    )


async def _run_fetch(aggregator: AggregationService, query: FetchQuery) -> FetchResponse:
    try:
        result = await aggregator.fetch(query)
    except UnknownSourceError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return _fetch_response(result)


def _split_tags(tags: str | None) -> list[str]:
    if not tags:
        return []
    return [tag.strip() for tag in tags.split(",") if tag.strip()]


# =========================================================================
# Catalog
# =========================================================================


@router.get(
    "",
    response_model=ResourceListResponse,
    summary="Search resources",
)
async def search_resources(
    subject: Subject | None = Query(None, description="Curriculum subject"),
    grade: Grade | None = Query(None, description="Examination level"),
    resource_type: ResourceType | None = Query(None, alias="type", description="Kind of material"),
    difficulty: Difficulty | None = Query(None),
    source: ResourceSource | None = Query(None),
    tags: str | None = Query(None, description="Comma-separated tags, any may match"),
    limit: int = Query(20, ge=1, le=100),
    skip: int = Query(0, ge=0),
    catalog: CatalogService = Depends(get_catalog_service),
) -> ResourceListResponse:
    """Search active resources, newest first."""
    page = await catalog.search(
        ResourceSearchParams(
            subject=subject,
            grade=grade,
            type=resource_type,
            difficulty=difficulty,
            source=source,
            tags=_split_tags(tags),
            limit=limit,
            skip=skip,
        )
    )
    return ResourceListResponse(
        resources=[_to_response(resource) for resource in page.resources],
        total=page.total,
        has_more=page.has_more,
    )


@router.get(
    "/recommendations",
    response_model=list[ResourceResponse],
    summary="Recommended resources",
)
async def get_recommendations(
    subject: Subject | None = Query(None),
    grade: Grade | None = Query(None),
    limit: int | None = Query(None, ge=1, le=100),
    current_user: CurrentUser = Depends(require_auth),
    catalog: CatalogService = Depends(get_catalog_service),
) -> list[ResourceResponse]:
    """Most recently added active resources, optionally for a subject and grade."""
    resources = await catalog.recommendations(subject=subject, grade=grade, limit=limit)
    return [_to_response(resource) for resource in resources]


@router.get(
    "/{resource_id}",
    response_model=ResourceResponse,
    summary="Get a resource",
)
async def get_resource(
    resource_id: str,
    current_user: CurrentUser | None = Depends(get_current_user),
    catalog: CatalogService = Depends(get_catalog_service),
) -> ResourceResponse:
    """Get one resource by id. Soft-deleted resources are visible to admins only."""
    include_inactive = current_user is not None and current_user.is_admin
    try:
        resource = await catalog.get(resource_id, include_inactive=include_inactive)
    except ResourceNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resource not found")
    return _to_response(resource)


@router.post(
    "",
    response_model=ResourceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a custom resource",
)
async def create_resource(
    data: ResourceCreateRequest,
    current_user: CurrentUser = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog_service),
) -> ResourceResponse:
    """Add an admin-curated resource."""
    resource = await catalog.add_custom(data)
    logger.info("Custom resource %s added by %s", resource.id, current_user.id)
    return _to_response(resource)


@router.put(
    "/{resource_id}",
    response_model=ResourceResponse,
    summary="Update a resource",
)
async def update_resource(
    resource_id: str,
    data: ResourceUpdateRequest,
    current_user: CurrentUser = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog_service),
) -> ResourceResponse:
    """Change the supplied fields of a resource."""
    try:
        resource = await catalog.update(resource_id, data)
    except ResourceNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resource not found")
    return _to_response(resource)


@router.delete(
    "/{resource_id}",
    response_model=MessageResponse,
    summary="Delete a resource",
)
async def delete_resource(
    resource_id: str,
    permanent: bool = Query(False, description="Remove the row instead of deactivating it"),
    current_user: CurrentUser = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog_service),
) -> MessageResponse:
    """Deactivate a resource, or remove it with permanent=true."""
    try:
        if permanent:
            await catalog.hard_delete(resource_id)
        else:
            await catalog.soft_delete(resource_id)
    except ResourceNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resource not found")

    logger.info(
        "Resource %s %s by %s",
        resource_id,
        "deleted" if permanent else "deactivated",
        current_user.id,
    )
    return MessageResponse(message="Resource deleted successfully")


# =========================================================================
# Provider fetches
# =========================================================================


@router.post(
    "/fetch",
    response_model=FetchResponse,
    summary="Fetch from the library providers",
)
async def fetch_resources(
    data: FetchRequest,
    current_user: CurrentUser = Depends(require_auth),
    aggregator: AggregationService = Depends(get_library_aggregator),
) -> FetchResponse:
    """Fetch from MoPSE, CollegePress and Teacha, or the one named in source."""
    query = FetchQuery(
        subject=data.subject,
        grade=data.grade,
        source=data.source,
        limit=data.limit,
        skip=data.skip,
    )
    return await _run_fetch(aggregator, query)


async def _fetch_library_provider(
    source: ResourceSource,
    data: ProviderFetchRequest,
    aggregator: AggregationService,
) -> FetchResponse:
    query = FetchQuery(
        subject=data.subject,
        grade=data.grade,
        source=source,
        limit=data.limit,
        skip=data.skip,
    )
    return await _run_fetch(aggregator, query)


@router.post(
    "/fetch/mopse",
    response_model=FetchResponse,
    summary="Fetch from MoPSE",
)
async def fetch_mopse(
    data: ProviderFetchRequest,
    current_user: CurrentUser = Depends(require_admin),
    aggregator: AggregationService = Depends(get_library_aggregator),
) -> FetchResponse:
    """Fetch digital books from the MoPSE library."""
    return await _fetch_library_provider(ResourceSource.MOPSE, data, aggregator)


@router.post(
    "/fetch/collegepress",
    response_model=FetchResponse,
    summary="Fetch from College Press",
)
async def fetch_college_press(
    data: ProviderFetchRequest,
    current_user: CurrentUser = Depends(require_admin),
    aggregator: AggregationService = Depends(get_library_aggregator),
) -> FetchResponse:
    """Fetch digital textbooks from College Press."""
    return await _fetch_library_provider(ResourceSource.COLLEGE_PRESS, data, aggregator)


@router.post(
    "/fetch/teacha",
    response_model=FetchResponse,
    summary="Fetch from Teacha!",
)
async def fetch_teacha(
    data: ProviderFetchRequest,
    current_user: CurrentUser = Depends(require_admin),
    aggregator: AggregationService = Depends(get_library_aggregator),
) -> FetchResponse:
    """Fetch teacher-made materials from Teacha!."""
    return await _fetch_library_provider(ResourceSource.TEACHA, data, aggregator)


@router.post(
    "/fetch/sbp",
    response_model=FetchResponse,
    summary="Fetch from Secondary Book Press",
)
async def fetch_secondary_book_press(
    data: SBPFetchRequest,
    current_user: CurrentUser = Depends(require_auth),
    aggregator: AggregationService = Depends(get_sbp_aggregator),
) -> FetchResponse:
    """Scrape free downloads from Secondary Book Press.

    Accepts the extended subject list.
    """
    query = FetchQuery(
        subject=data.subject,
        grade=data.grade,
        limit=data.limit,
        material=data.type,
    )
    return await _run_fetch(aggregator, query)


@router.post(
    "/fetch/oer",
    response_model=FetchResponse,
    summary="Fetch open educational resources",
)
async def fetch_open_resources(
    data: OERFetchRequest,
    current_user: CurrentUser = Depends(require_auth),
    aggregator: AggregationService = Depends(get_oer_aggregator),
) -> FetchResponse:
    """Fetch from OER Commons and CK-12, or the one named in source."""
    query = FetchQuery(
        subject=data.subject,
        grade=data.grade,
        source=data.source,
        limit=data.limit,
    )
    return await _run_fetch(aggregator, query)


@router.post(
    "/fetch/youtube",
    response_model=FetchResponse,
    summary="Fetch educational videos",
)
async def fetch_youtube(
    data: SubjectGradeRequest,
    current_user: CurrentUser = Depends(require_admin),
    aggregator: AggregationService = Depends(get_youtube_aggregator),
) -> FetchResponse:
    """Search YouTube for ZIMSEC lessons."""
    return await _run_fetch(aggregator, FetchQuery(subject=data.subject, grade=data.grade))


@router.post(
    "/fetch/zimsec",
    response_model=FetchResponse,
    summary="Fetch ZIMSEC past papers",
)
async def fetch_zimsec(
    data: SubjectGradeRequest,
    current_user: CurrentUser = Depends(require_admin),
    aggregator: AggregationService = Depends(get_zimsec_aggregator),
) -> FetchResponse:
    """Add the latest ZIMSEC past paper link."""
    return await _run_fetch(aggregator, FetchQuery(subject=data.subject, grade=data.grade))

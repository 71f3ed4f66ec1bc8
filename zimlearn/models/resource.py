# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Resource API schemas.

Request bodies for searching, fetching and curating resources, plus the
ResourceCreate schema that every record must satisfy before it is stored.
"""

from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator

from zimlearn.models.common import (
    CORE_SUBJECTS,
    Difficulty,
    Grade,
    RequestModel,
    ResourceSource,
    ResourceType,
    ResponseModel,
    Subject,
)

DEFAULT_DESCRIPTION = "No description available"


def _require_core_subject(subject: Subject) -> Subject:
    if subject not in CORE_SUBJECTS:
        raise ValueError(f"Subject '{subject.value}' is not available from this provider")
    return subject


CoreSubject = Annotated[Subject, AfterValidator(_require_core_subject)]


def _clean_tags(tags: list[str] | None) -> list[str] | None:
    if tags is None:
        return None
    return [tag.strip() for tag in tags if tag and tag.strip()]


# =============================================================================
# Storage contract
# =============================================================================


class ResourceCreate(BaseModel):
    """A complete resource record ready to be inserted.

    Adapter drafts and custom resources are validated against this schema
    before they reach the database.
    """

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=500)
    description: str = Field(default=DEFAULT_DESCRIPTION)
    author: str = Field(..., min_length=1, max_length=255)
    subject: Subject
    grade: Grade
    type: ResourceType
    url: str = Field(..., min_length=1, max_length=2048)
    thumbnail_url: str | None = Field(default=None, max_length=2048)
    source: ResourceSource
    difficulty: Difficulty
    tags: list[str] = Field(default_factory=list)
    is_active: bool = True
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("description", mode="before")
    @classmethod
    def default_description(cls, value: Any) -> Any:
        """Replace an empty description with the placeholder text."""
        return value or DEFAULT_DESCRIPTION

    @field_validator("tags")
    @classmethod
    def strip_tags(cls, value: list[str]) -> list[str]:
        """Drop blank tags."""
        return _clean_tags(value) or []


# =============================================================================
# Catalog requests
# =============================================================================


class ResourceCreateRequest(RequestModel):
    """Admin request to add a custom resource."""

    title: str = Field(..., min_length=1, max_length=500, description="Resource title")
    description: str | None = Field(default=None, description="Short description")
    author: str = Field(..., min_length=1, max_length=255, description="Author or publisher")
    subject: Subject = Field(..., description="Curriculum subject")
    grade: Grade = Field(..., description="Examination level (O or A)")
    type: ResourceType = Field(..., description="Kind of material")
    url: str = Field(..., min_length=1, max_length=2048, description="Link to the material")
    thumbnail_url: str | None = Field(default=None, max_length=2048)
    difficulty: Difficulty | None = Field(
        default=None,
        description="Defaults to the grade's difficulty when omitted",
    )
    tags: list[str] | None = Field(
        default=None,
        description="Defaults to [subject, grade, type] when omitted",
    )
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("tags")
    @classmethod
    def strip_tags(cls, value: list[str] | None) -> list[str] | None:
        """Drop blank tags."""
        return _clean_tags(value)


class ResourceUpdateRequest(RequestModel):
    """Admin request to update a resource.

    Only fields present in the body are changed.
    """

    title: str | None = Field(default=None, min_length=1, max_length=500)
    description: str | None = None
    author: str | None = Field(default=None, min_length=1, max_length=255)
    subject: Subject | None = None
    grade: Grade | None = None
    type: ResourceType | None = None
    url: str | None = Field(default=None, min_length=1, max_length=2048)
    thumbnail_url: str | None = Field(default=None, max_length=2048)
    difficulty: Difficulty | None = None
    tags: list[str] | None = None
    is_active: bool | None = None
    metadata: dict[str, Any] | None = None

    @field_validator("tags")
    @classmethod
    def strip_tags(cls, value: list[str] | None) -> list[str] | None:
        """Drop blank tags."""
        return _clean_tags(value)

    def changes(self) -> dict[str, Any]:
        """Fields explicitly supplied by the caller.

        Required columns cannot be cleared, so explicit nulls for them are
        dropped. thumbnail_url may be set to null.
        """
        data = self.model_dump(exclude_unset=True)
        return {
            key: value
            for key, value in data.items()
            if value is not None or key == "thumbnail_url"
        }


# =============================================================================
# Fetch requests
# =============================================================================


class FetchRequest(RequestModel):
    """Aggregate fetch across the library providers."""

    subject: CoreSubject
    grade: Grade
    source: ResourceSource | None = Field(
        default=None,
        description="Restrict the fetch to a single provider",
    )
    limit: int = Field(default=20, ge=1, le=100)
    skip: int = Field(default=0, ge=0)


class ProviderFetchRequest(RequestModel):
    """Fetch from one named library provider."""

    subject: CoreSubject
    grade: Grade
    limit: int = Field(default=20, ge=1, le=100)
    skip: int = Field(default=0, ge=0)


class SBPFetchRequest(RequestModel):
    """Fetch from Secondary Book Press.

    Accepts the extended subject list.
    """

    subject: Subject
    grade: Grade
    type: Literal["textbook", "revision-guide"] | None = Field(
        default=None,
        description="Force the material type instead of inferring it from the title",
    )
    limit: int = Field(default=20, ge=1, le=100)


class OERFetchRequest(RequestModel):
    """Fetch from the open educational resource providers."""

    subject: CoreSubject
    grade: Grade
    source: Literal["OERCommons", "CK12"] | None = None
    limit: int = Field(default=20, ge=1, le=100)


class SubjectGradeRequest(RequestModel):
    """Fetch keyed only by subject and grade."""

    subject: CoreSubject
    grade: Grade


# =============================================================================
# Responses
# =============================================================================


class ResourceResponse(ResponseModel):
    """A stored resource."""

    id: str
    title: str
    description: str
    author: str
    subject: Subject
    grade: Grade
    type: ResourceType
    url: str
    thumbnail_url: str | None = None
    source: ResourceSource
    difficulty: Difficulty
    tags: list[str]
    is_active: bool
    metadata: dict[str, Any]
    created_at: datetime
    updated_at: datetime


class ResourceListResponse(ResponseModel):
    """One page of search results."""

    resources: list[ResourceResponse]
    total: int
    has_more: bool


class FetchedResourceResponse(ResponseModel):
    """A record returned by a fetch.

    Fields are optional because a provider may return incomplete records
    that were not persisted.
    """

    id: str | None = None
    title: str | None = None
    description: str | None = None
    author: str | None = None
    subject: str | None = None
    grade: str | None = None
    type: str | None = None
    url: str | None = None
    thumbnail_url: str | None = None
    source: str | None = None
    difficulty: str | None = None
    tags: list[str] = Field(default_factory=list)
    is_active: bool = True
    metadata: dict[str, Any] = Field(default_factory=dict)


class PersistenceOutcomeResponse(ResponseModel):
    """Storage result for one fetched record."""

    index: int
    status: Literal["saved", "invalid", "failed"]
    id: str | None = None
    error: str | None = None


class PersistenceSummary(ResponseModel):
    """Storage results for a whole fetch."""

    saved: int
    failed: int
    outcomes: list[PersistenceOutcomeResponse]


class FetchResponse(ResponseModel):
    """Result of a provider fetch."""

    message: str
    count: int
    resources: list[FetchedResourceResponse]
    persistence: PersistenceSummary

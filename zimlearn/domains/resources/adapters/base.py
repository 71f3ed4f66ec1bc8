# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Base class for resource provider adapters.

An adapter turns one provider's API (or web page) into canonical resource
drafts: plain dicts with the same keys as ResourceCreate. Drafts are not
validated here; the aggregation service validates each one before it is
stored, so a single malformed item never hides the rest of a response.

Adapters never raise. Any failure (network, HTTP status, unexpected
payload shape) is logged and reported as an empty result.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar

import httpx

from zimlearn.models.common import (
    Difficulty,
    Grade,
    ResourceSource,
    Subject,
    difficulty_for_grade,
)
from zimlearn.models.resource import DEFAULT_DESCRIPTION

logger = logging.getLogger(__name__)

ResourceDraft = dict[str, Any]


@dataclass
class FetchQuery:
    """Parameters of a provider fetch.

    Attributes:
        subject: Curriculum subject.
        grade: Examination level.
        source: Restrict an aggregate fetch to this provider.
        limit: Page size applied to the aggregate.
        skip: Page offset applied to the aggregate.
        material: Secondary Book Press material hint ("textbook" or
            "revision-guide").
    """

    subject: Subject
    grade: Grade
    source: ResourceSource | None = None
    limit: int = 20
    skip: int = 0
    material: str | None = None

    def __post_init__(self) -> None:
        self.subject = Subject(self.subject)
        self.grade = Grade(self.grade)
        if self.source is not None:
            self.source = ResourceSource(self.source)


class ResourceAdapter(ABC):
    """Fetches resources from one provider.

    Subclasses set the class attributes and implement _fetch().

    Attributes:
        source: Provider identity stamped on every draft.
        default_author: Author used when the provider omits one.
        subject_map: Provider vocabulary for subjects. None sends the
            subject name unchanged; otherwise unmapped subjects are
            lower-cased.
    """

    source: ClassVar[ResourceSource]
    default_author: ClassVar[str]
    subject_map: ClassVar[dict[str, str] | None] = None

    def __init__(self, client: httpx.AsyncClient, base_url: str) -> None:
        """Initialize the adapter.

        Args:
            client: Shared HTTP client.
            base_url: Provider base URL without a trailing slash.
        """
        self._client = client
        self._base_url = base_url.rstrip("/")

    @property
    def name(self) -> str:
        """Provider name, as stored in Resource.source."""
        return self.source.value

    async def fetch(self, query: FetchQuery) -> list[ResourceDraft]:
        """Fetch drafts for a subject and grade.

        Args:
            query: Fetch parameters.

        Returns:
            Drafts in provider order, or an empty list if the provider
            could not be reached or returned something unexpected.
        """
        try:
            drafts = await self._fetch(query)
        except Exception as e:
            logger.error(
                "Error fetching %s resources for %s %s: %s",
                self.name,
                query.subject.value,
                query.grade.value,
                str(e),
                exc_info=True,
            )
            return []

        logger.info(
            "Fetched %d %s resources for %s %s",
            len(drafts),
            self.name,
            query.subject.value,
            query.grade.value,
        )
        return drafts

    @abstractmethod
    async def _fetch(self, query: FetchQuery) -> list[ResourceDraft]:
        """Provider-specific fetch. May raise."""
        ...

    def map_subject(self, subject: Subject) -> str:
        """Translate a subject into the provider's vocabulary."""
        if self.subject_map is None:
            return subject.value
        return self.subject_map.get(subject.value, subject.value.lower())

    def difficulty_for(self, grade: Grade) -> Difficulty:
        """Difficulty assigned to every draft of this grade."""
        return difficulty_for_grade(grade)

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET a provider endpoint and decode its JSON body.

        Raises:
            httpx.HTTPError: On transport errors or non-2xx responses.
            ValueError: If the body is not JSON.
        """
        response = await self._client.get(f"{self._base_url}{path}", params=params)
        response.raise_for_status()
        return response.json()

    def build_draft(
        self,
        query: FetchQuery,
        *,
        title: Any,
        url: Any,
        resource_type: str,
        author: Any = None,
        description: Any = None,
        thumbnail_url: Any = None,
        tags: list[Any] | None = None,
        metadata: dict[str, Any] | None = None,
        difficulty: Difficulty | None = None,
    ) -> ResourceDraft:
        """Assemble a canonical draft.

        Missing optional values are filled with defaults. Tags default to
        [subject, grade, type, source]; None tags and None metadata values
        are dropped.
        """
        subject = query.subject.value
        grade = query.grade.value
        if tags is None:
            tags = [subject, grade, resource_type, self.name]

        return {
            "title": title,
            "description": description or DEFAULT_DESCRIPTION,
            "author": author or self.default_author,
            "subject": subject,
            "grade": grade,
            "type": resource_type,
            "url": url,
            "thumbnail_url": thumbnail_url,
            "source": self.name,
            "difficulty": (difficulty or self.difficulty_for(query.grade)).value,
            "tags": [str(tag) for tag in tags if tag is not None and tag != ""],
            "is_active": True,
            "metadata": {
                key: value for key, value in (metadata or {}).items() if value is not None
            },
        }


def year_from_date(value: Any) -> int | None:
    """Extract the year from an ISO-8601 date string.

    Args:
        value: Date string such as "2021-03-04T10:00:00Z".

    Returns:
        The year, or None if it cannot be read.
    """
    if not isinstance(value, str) or len(value) < 4 or not value[:4].isdigit():
        return None
    return int(value[:4])

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Resource aggregation service.

Fans a fetch out to an ordered set of provider adapters, concatenates
their drafts in that order, pages the aggregate, and stores the page.

Storage is best effort and reported per record:
1. Each draft is validated against ResourceCreate; invalid drafts are
   reported as "invalid" and skipped.
2. Valid drafts are inserted in one commit.
3. If that commit fails, each valid draft is retried in its own commit,
   so one bad row cannot take the rest of the page with it.

The fetched drafts are returned whether or not they were stored.

Example:
    >>> service = AggregationService([mopse, college_press, teacha], db)
    >>> result = await service.fetch(FetchQuery(subject="Physics", grade="O"))
    >>> result.saved_count, len(result.records)
    (12, 12)
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Literal, Sequence

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from zimlearn.domains.resources.adapters.base import FetchQuery, ResourceAdapter, ResourceDraft
from zimlearn.infrastructure.database.models import Resource
from zimlearn.models.resource import ResourceCreate
from zimlearn.utils.logging import get_logger

logger = get_logger(__name__)

OutcomeStatus = Literal["saved", "invalid", "failed"]


class AggregationError(Exception):
    """Base exception for aggregation operations."""

    pass


class UnknownSourceError(AggregationError):
    """Raised when a fetch names a provider this aggregator does not serve."""

    pass


@dataclass
class PersistenceOutcome:
    """Storage result for one record of a fetch.

    Attributes:
        index: Position of the record in FetchResult.records.
        status: "saved", "invalid" (failed validation) or "failed" (storage error).
        id: Database id when saved.
        error: Reason when not saved.
    """

    index: int
    status: OutcomeStatus
    id: str | None = None
    error: str | None = None


@dataclass
class FetchResult:
    """Records returned by a fetch and how each was stored.

    Attributes:
        records: Drafts in aggregate order. Saved records carry their "id".
        outcomes: One outcome per record, same order.
    """

    records: list[ResourceDraft] = field(default_factory=list)
    outcomes: list[PersistenceOutcome] = field(default_factory=list)

    @property
    def saved_count(self) -> int:
        """Number of records stored."""
        return sum(1 for outcome in self.outcomes if outcome.status == "saved")

    @property
    def failed_count(self) -> int:
        """Number of records not stored."""
        return len(self.outcomes) - self.saved_count


def _validation_message(error: ValidationError) -> str:
    parts = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"])
        parts.append(f"{location}: {detail['msg']}")
    return "; ".join(parts)


def _to_model(record: ResourceCreate) -> Resource:
    data: dict[str, Any] = record.model_dump(mode="json")
    metadata = data.pop("metadata")
    return Resource(**data, extra_metadata=metadata)


class AggregationService:
    """Fetches from several providers and stores the results.

    Attributes:
        _adapters: Adapters in their fixed aggregation order.
        _db: Async database session.
    """

    def __init__(self, adapters: Sequence[ResourceAdapter], db: AsyncSession) -> None:
        """Initialize the aggregation service.

        Args:
            adapters: Adapters in the order their results are concatenated.
            db: Async database session.
        """
        self._adapters = list(adapters)
        self._db = db

    @property
    def sources(self) -> list[str]:
        """Provider names served, in aggregation order."""
        return [adapter.name for adapter in self._adapters]

    async def fetch(self, query: FetchQuery) -> FetchResult:
        """Fetch, page and store resources.

        Args:
            query: Subject, grade, optional source, and paging.

        Returns:
            FetchResult with the page of drafts and per-record outcomes.

        Raises:
            UnknownSourceError: If query.source is not served here.
        """
        adapters = self._select(query)

        batches = await asyncio.gather(*(adapter.fetch(query) for adapter in adapters))
        aggregate = [draft for batch in batches for draft in batch]
        page = aggregate[query.skip : query.skip + query.limit]

        logger.info(
            "Aggregated resources",
            subject=query.subject.value,
            grade=query.grade.value,
            sources=[adapter.name for adapter in adapters],
            fetched=len(aggregate),
            page=len(page),
        )

        outcomes = await self.persist(page)
        return FetchResult(records=page, outcomes=outcomes)

    async def persist(self, drafts: list[ResourceDraft]) -> list[PersistenceOutcome]:
        """Store drafts and report what happened to each.

        Saved drafts get their new id written back under "id". Storage
        errors are logged, never raised.

        Args:
            drafts: Drafts to store.

        Returns:
            One outcome per draft, in order.
        """
        outcomes: list[PersistenceOutcome | None] = [None] * len(drafts)
        pending: list[tuple[int, Resource]] = []

        for index, draft in enumerate(drafts):
            try:
                record = ResourceCreate.model_validate(draft)
            except ValidationError as e:
                outcomes[index] = PersistenceOutcome(
                    index=index,
                    status="invalid",
                    error=_validation_message(e),
                )
                continue
            pending.append((index, _to_model(record)))

        if pending:
            await self._insert(pending, outcomes)

        for index, outcome in enumerate(outcomes):
            if outcome is not None and outcome.status == "saved":
                drafts[index]["id"] = outcome.id

        result = [outcome for outcome in outcomes if outcome is not None]
        failed = sum(1 for outcome in result if outcome.status != "saved")
        if failed:
            logger.error(
                "Some fetched resources were not saved",
                saved=len(result) - failed,
                failed=failed,
            )
        elif result:
            logger.info("Saved fetched resources", saved=len(result))
        return result

    async def _insert(
        self,
        pending: list[tuple[int, Resource]],
        outcomes: list[PersistenceOutcome | None],
    ) -> None:
        try:
            self._db.add_all([resource for _, resource in pending])
            await self._db.commit()
        except SQLAlchemyError as e:
            await self._db.rollback()
            logger.warning("Batch insert failed, retrying individually", error=str(e))
        else:
            for index, resource in pending:
                outcomes[index] = PersistenceOutcome(index=index, status="saved", id=resource.id)
            return

        for index, resource in pending:
            retry = Resource(
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
                is_active=resource.is_active,
                extra_metadata=resource.extra_metadata,
                tags=[link.value for link in resource.tag_links],
            )
            try:
                self._db.add(retry)
                await self._db.commit()
            except SQLAlchemyError as e:
                await self._db.rollback()
                outcomes[index] = PersistenceOutcome(index=index, status="failed", error=str(e))
            else:
                outcomes[index] = PersistenceOutcome(index=index, status="saved", id=retry.id)

    def _select(self, query: FetchQuery) -> list[ResourceAdapter]:
        if query.source is None:
            return self._adapters

        for adapter in self._adapters:
            if adapter.source == query.source:
                return [adapter]

        raise UnknownSourceError(
            f"Source '{query.source.value}' is not available here. "
            f"Choose one of: {', '.join(self.sources)}"
        )

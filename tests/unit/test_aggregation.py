# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the resource aggregation service."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from zimlearn.domains.resources.adapters import FetchQuery
from zimlearn.domains.resources.aggregation import AggregationService, UnknownSourceError
from zimlearn.infrastructure.database.models import Resource
from zimlearn.models.common import ResourceSource


async def _stored_count(db_session: AsyncSession) -> int:
    return await db_session.scalar(select(func.count()).select_from(Resource))


def _flaky_commit(monkeypatch: pytest.MonkeyPatch, db_session: AsyncSession, failures: int) -> None:
    """Make the first commits of the session fail."""
    real_commit = db_session.commit
    calls = {"count": 0}

    async def commit() -> None:
        calls["count"] += 1
        if calls["count"] <= failures:
            await db_session.flush()
            raise OperationalError("INSERT INTO resources", {}, Exception("database is locked"))
        await real_commit()

    monkeypatch.setattr(db_session, "commit", commit)


class TestAggregationFetch:
    """Tests for AggregationService.fetch."""

    async def test_concatenates_in_adapter_order(self, library_adapters, db_session) -> None:
        """Test that drafts keep the fixed provider order."""
        service = AggregationService(library_adapters, db_session)

        result = await service.fetch(FetchQuery(subject="Mathematics", grade="O"))

        assert [record["title"] for record in result.records] == [
            "MoPSE Mathematics 1",
            "MoPSE Mathematics 2",
            "CollegePress Mathematics 1",
            "CollegePress Mathematics 2",
            "Teacha Mathematics 1",
            "Teacha Mathematics 2",
        ]
        assert result.saved_count == 6
        assert result.failed_count == 0

    async def test_saved_records_carry_ids(self, library_adapters, db_session) -> None:
        """Test that stored records get their database id back."""
        service = AggregationService(library_adapters, db_session)

        result = await service.fetch(FetchQuery(subject="Physics", grade="A"))

        ids = [record["id"] for record in result.records]
        assert all(ids)
        assert [outcome.id for outcome in result.outcomes] == ids
        assert await _stored_count(db_session) == 6

        stored = await db_session.get(Resource, ids[0])
        assert stored.source == "MoPSE"
        assert stored.difficulty == "advanced"
        assert stored.tags == ["Physics", "A", "book", "MoPSE"]

    async def test_applies_skip_and_limit_to_aggregate(self, library_adapters, db_session) -> None:
        """Test that paging slices the concatenated list and only the page is stored."""
        service = AggregationService(library_adapters, db_session)

        result = await service.fetch(
            FetchQuery(subject="Mathematics", grade="O", skip=1, limit=3)
        )

        assert [record["title"] for record in result.records] == [
            "MoPSE Mathematics 2",
            "CollegePress Mathematics 1",
            "CollegePress Mathematics 2",
        ]
        assert await _stored_count(db_session) == 3

    async def test_skip_past_end_returns_nothing(self, library_adapters, db_session) -> None:
        """Test that a page beyond the aggregate is empty."""
        service = AggregationService(library_adapters, db_session)

        result = await service.fetch(FetchQuery(subject="Mathematics", grade="O", skip=50))

        assert result.records == []
        assert result.outcomes == []

    async def test_source_restricts_to_one_adapter(self, library_adapters, db_session) -> None:
        """Test that naming a source queries only that provider."""
        mopse, college_press, teacha = library_adapters
        service = AggregationService(library_adapters, db_session)

        result = await service.fetch(
            FetchQuery(subject="Biology", grade="O", source="Teacha")
        )

        assert {record["source"] for record in result.records} == {"Teacha"}
        assert len(teacha.queries) == 1
        assert mopse.queries == []
        assert college_press.queries == []

    async def test_unknown_source_raises(self, library_adapters, db_session) -> None:
        """Test that a provider outside the group is rejected."""
        service = AggregationService(library_adapters, db_session)

        with pytest.raises(UnknownSourceError, match="YouTube"):
            await service.fetch(FetchQuery(subject="Biology", grade="O", source="YouTube"))

    async def test_failing_adapter_does_not_hide_others(self, make_adapter, db_session) -> None:
        """Test that one broken provider only drops its own results."""
        adapters = [
            make_adapter(ResourceSource.MOPSE, error=RuntimeError("provider down")),
            make_adapter(ResourceSource.COLLEGE_PRESS),
            make_adapter(ResourceSource.TEACHA, count=1),
        ]
        service = AggregationService(adapters, db_session)

        result = await service.fetch(FetchQuery(subject="History", grade="O"))

        assert [record["source"] for record in result.records] == [
            "CollegePress",
            "CollegePress",
            "Teacha",
        ]
        assert result.saved_count == 3

    async def test_every_provider_failing_yields_empty_result(self, make_adapter, db_session) -> None:
        """Test that total provider failure is an empty result, not an error."""
        adapters = [
            make_adapter(ResourceSource.OER_COMMONS, error=KeyError("items")),
            make_adapter(ResourceSource.CK12, error=ValueError("bad json")),
        ]
        service = AggregationService(adapters, db_session)

        result = await service.fetch(FetchQuery(subject="English", grade="A"))

        assert result.records == []
        assert await _stored_count(db_session) == 0

    async def test_sources(self, library_adapters, db_session) -> None:
        """Test the provider names in aggregation order."""
        service = AggregationService(library_adapters, db_session)

        assert service.sources == ["MoPSE", "CollegePress", "Teacha"]


class TestAggregationPersist:
    """Tests for AggregationService.persist."""

    async def test_invalid_draft_reported_and_skipped(self, make_adapter, db_session) -> None:
        """Test that a draft failing validation is returned but not stored."""
        stub = make_adapter(ResourceSource.TEACHA)
        query = FetchQuery(subject="Chemistry", grade="O")
        good = stub.build_draft(query, title="Moles", url="https://t.example/1", resource_type="quiz")
        bad = stub.build_draft(query, title=None, url="https://t.example/2", resource_type="quiz")
        stub.drafts = [good, bad]
        service = AggregationService([stub], db_session)

        result = await service.fetch(query)

        assert len(result.records) == 2
        saved, invalid = result.outcomes
        assert saved.status == "saved"
        assert invalid.status == "invalid"
        assert invalid.index == 1
        assert "title" in invalid.error
        assert "id" not in result.records[1]
        assert await _stored_count(db_session) == 1

    async def test_unknown_type_is_invalid(self, make_adapter, db_session) -> None:
        """Test that values outside the enumerations fail validation."""
        stub = make_adapter(ResourceSource.MOPSE)
        query = FetchQuery(subject="Chemistry", grade="O")
        stub.drafts = [
            stub.build_draft(query, title="Poster", url="https://m.example/p", resource_type="poster")
        ]
        service = AggregationService([stub], db_session)

        result = await service.fetch(query)

        assert result.outcomes[0].status == "invalid"
        assert "type" in result.outcomes[0].error

    async def test_batch_failure_retries_each_record(
        self,
        library_adapters,
        db_session,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test that a failed batch commit falls back to one commit per record."""
        _flaky_commit(monkeypatch, db_session, failures=1)
        service = AggregationService(library_adapters, db_session)

        result = await service.fetch(FetchQuery(subject="Geography", grade="O"))

        assert result.saved_count == 6
        assert await _stored_count(db_session) == 6

    async def test_record_failure_is_isolated(
        self,
        library_adapters,
        db_session,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test that a record failing on its own retry does not affect the rest."""
        _flaky_commit(monkeypatch, db_session, failures=2)
        service = AggregationService(library_adapters, db_session)

        result = await service.fetch(FetchQuery(subject="Geography", grade="O"))

        statuses = [outcome.status for outcome in result.outcomes]
        assert statuses == ["failed", "saved", "saved", "saved", "saved", "saved"]
        assert "database is locked" in result.outcomes[0].error
        assert "id" not in result.records[0]
        assert result.failed_count == 1
        assert await _stored_count(db_session) == 5

    async def test_persist_empty(self, db_session) -> None:
        """Test that persisting nothing is a no-op."""
        service = AggregationService([], db_session)

        assert await service.persist([]) == []

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ZIMSEC past paper adapter.

ZIMSEC publishes no API, so this adapter makes no request. It produces
one past-paper link per subject and grade pointing at the examination
council's paper archive.
"""

import httpx

from zimlearn.domains.resources.adapters.base import FetchQuery, ResourceAdapter, ResourceDraft
from zimlearn.models.common import Difficulty, ResourceSource, ResourceType
from zimlearn.utils.datetime import utc_now


class ZimsecAdapter(ResourceAdapter):
    """Zimbabwe School Examinations Council past papers."""

    source = ResourceSource.ZIMSEC
    default_author = "ZIMSEC"

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        paper_year: int | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            client: Shared HTTP client (unused, kept for a uniform signature).
            base_url: ZIMSEC base URL.
            paper_year: Examination year, defaults to last year.
        """
        super().__init__(client, base_url)
        self._paper_year = paper_year

    @property
    def paper_year(self) -> int:
        """Year of the most recent published paper."""
        return self._paper_year or utc_now().year - 1

    async def _fetch(self, query: FetchQuery) -> list[ResourceDraft]:
        subject = query.subject.value
        grade = query.grade.value
        year = self.paper_year
        slug = f"{subject.lower().replace(' ', '-')}-{grade.lower()}-{year}"

        return [
            self.build_draft(
                query,
                title=f"{subject} {grade} Level Past Paper {year}",
                description=f"Official {subject} {grade} Level past paper from ZIMSEC",
                resource_type=ResourceType.DOCUMENT.value,
                url=f"{self._base_url}/papers/{slug}.pdf",
                difficulty=Difficulty.ADVANCED,
                tags=[subject, grade, "past-paper", "zimsec"],
                metadata={
                    "publisher": "ZIMSEC",
                    "year": year,
                    "format": "pdf",
                    "resourceType": "past-paper",
                },
            )
        ]

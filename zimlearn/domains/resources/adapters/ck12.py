# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""CK-12 Foundation adapter.

GET {base}/concepts?subject=<ck12 subject>&grade=<band>&limit=20 returns
{"concepts": [...]}.
"""

from zimlearn.domains.resources.adapters.base import FetchQuery, ResourceAdapter, ResourceDraft
from zimlearn.models.common import Grade, ResourceSource, ResourceType
from zimlearn.utils.datetime import utc_now

GRADE_BANDS = {
    Grade.ORDINARY: "9-12",
    Grade.ADVANCED: "11-12",
}

LICENSE = "CC BY-NC-SA"


class CK12Adapter(ResourceAdapter):
    """CK-12 concept pages."""

    source = ResourceSource.CK12
    default_author = "CK-12 Foundation"
    subject_map = {
        "Mathematics": "math",
        "Physics": "physics",
        "Chemistry": "chemistry",
        "Biology": "biology",
        "English": "english",
        "History": "history",
        "Geography": "geography",
        "Computer Science": "computer-science",
    }

    async def _fetch(self, query: FetchQuery) -> list[ResourceDraft]:
        payload = await self._get_json(
            "/concepts",
            params={
                "subject": self.map_subject(query.subject),
                "grade": GRADE_BANDS[query.grade],
                "limit": 20,
            },
        )

        return [
            self.build_draft(
                query,
                title=concept.get("title"),
                description=concept.get("description"),
                resource_type=ResourceType.DOCUMENT.value,
                url=concept.get("url"),
                thumbnail_url=concept.get("thumbnail_url"),
                tags=[
                    query.subject.value,
                    query.grade.value,
                    self.name,
                    *(concept.get("tags") or []),
                ],
                metadata={
                    "publisher": self.default_author,
                    "year": utc_now().year,
                    "language": "en",
                    "format": "interactive",
                    "license": LICENSE,
                },
            )
            for concept in payload["concepts"]
        ]

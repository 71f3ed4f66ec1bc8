# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Teacha! resource marketplace adapter.

GET {base}/resources?subject=<name>&grade=O|A&type=all returns a JSON
array of teacher-made resources of mixed kinds.
"""

from zimlearn.domains.resources.adapters.base import FetchQuery, ResourceAdapter, ResourceDraft
from zimlearn.models.common import ResourceSource, ResourceType

TEACHA_TYPES = {
    "lesson-plan": ResourceType.DOCUMENT,
    "worksheet": ResourceType.PRACTICE,
    "test": ResourceType.QUIZ,
    "textbook": ResourceType.BOOK,
    "video": ResourceType.VIDEO,
}


def map_teacha_type(teacha_type: str | None) -> ResourceType:
    """Map a Teacha! resource kind onto a resource type.

    Unknown kinds are treated as documents.
    """
    return TEACHA_TYPES.get(teacha_type or "", ResourceType.DOCUMENT)


class TeachaAdapter(ResourceAdapter):
    """Teacha! marketplace."""

    source = ResourceSource.TEACHA
    default_author = "Teacha!"

    async def _fetch(self, query: FetchQuery) -> list[ResourceDraft]:
        items = await self._get_json(
            "/resources",
            params={
                "subject": self.map_subject(query.subject),
                "grade": query.grade.value,
                "type": "all",
            },
        )

        drafts = []
        for item in items:
            teacha_type = item.get("type")
            drafts.append(
                self.build_draft(
                    query,
                    title=item.get("title"),
                    description=item.get("description"),
                    resource_type=map_teacha_type(teacha_type).value,
                    url=item.get("downloadUrl") or item.get("previewUrl"),
                    thumbnail_url=item.get("thumbnail"),
                    author=item.get("author"),
                    tags=[query.subject.value, query.grade.value, teacha_type, self.name],
                    metadata={
                        "resourceType": teacha_type,
                        "fileSize": item.get("fileSize"),
                        "downloadCount": item.get("downloadCount"),
                        "rating": item.get("rating"),
                    },
                )
            )
        return drafts

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""MoPSE digital library adapter.

GET {base}/books?subject=<name>&grade=Ordinary|Advanced&format=digital
returns a JSON array of books.
"""

from zimlearn.domains.resources.adapters.base import FetchQuery, ResourceAdapter, ResourceDraft
from zimlearn.models.common import Grade, ResourceSource, ResourceType

GRADE_NAMES = {
    Grade.ORDINARY: "Ordinary",
    Grade.ADVANCED: "Advanced",
}


class MoPSEAdapter(ResourceAdapter):
    """Ministry of Primary and Secondary Education digital library."""

    source = ResourceSource.MOPSE
    default_author = "MoPSE"

    async def _fetch(self, query: FetchQuery) -> list[ResourceDraft]:
        books = await self._get_json(
            "/books",
            params={
                "subject": self.map_subject(query.subject),
                "grade": GRADE_NAMES[query.grade],
                "format": "digital",
            },
        )

        return [
            self.build_draft(
                query,
                title=book.get("title"),
                description=book.get("description"),
                resource_type=ResourceType.BOOK.value,
                url=book.get("downloadUrl") or book.get("readUrl"),
                thumbnail_url=book.get("coverImage"),
                author=book.get("author"),
                metadata={
                    "isbn": book.get("isbn"),
                    "publisher": "MoPSE",
                    "year": book.get("publicationYear"),
                    "language": book.get("language"),
                    "format": book.get("format"),
                },
            )
            for book in books
        ]

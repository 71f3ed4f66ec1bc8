# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""College Press textbook adapter.

GET {base}/textbooks?subject=<name>&level=O|A&format=digital returns a
JSON array of textbooks, some of which are paid.
"""

from zimlearn.domains.resources.adapters.base import FetchQuery, ResourceAdapter, ResourceDraft
from zimlearn.models.common import ResourceSource, ResourceType


class CollegePressAdapter(ResourceAdapter):
    """College Press publisher catalogue."""

    source = ResourceSource.COLLEGE_PRESS
    default_author = "College Press"

    async def _fetch(self, query: FetchQuery) -> list[ResourceDraft]:
        books = await self._get_json(
            "/textbooks",
            params={
                "subject": self.map_subject(query.subject),
                "level": query.grade.value,
                "format": "digital",
            },
        )

        return [
            self.build_draft(
                query,
                title=book.get("title"),
                description=book.get("description"),
                resource_type=ResourceType.BOOK.value,
                url=book.get("purchaseUrl") or book.get("previewUrl"),
                thumbnail_url=book.get("coverImage"),
                author=book.get("author"),
                metadata={
                    "isbn": book.get("isbn"),
                    "publisher": "College Press",
                    "year": book.get("publicationYear"),
                    "language": book.get("language"),
                    "price": book.get("price"),
                    "currency": book.get("currency"),
                },
            )
            for book in books
        ]

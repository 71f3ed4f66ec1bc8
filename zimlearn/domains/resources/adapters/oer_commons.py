# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""OER Commons adapter.

GET {base}/search?subject=<oer subject>&grade_level=<bands>&format=json
&per_page=20 returns {"items": [...]}.
"""

from zimlearn.domains.resources.adapters.base import (
    FetchQuery,
    ResourceAdapter,
    ResourceDraft,
    year_from_date,
)
from zimlearn.models.common import Grade, ResourceSource, ResourceType

GRADE_LEVELS = {
    Grade.ORDINARY: ("9-10", "11-12"),
    Grade.ADVANCED: ("11-12", "13-14"),
}

MATERIAL_TYPES = {
    "textbook": ResourceType.BOOK,
    "video": ResourceType.VIDEO,
    "lesson": ResourceType.DOCUMENT,
    "activity": ResourceType.PRACTICE,
    "assessment": ResourceType.QUIZ,
    "simulation": ResourceType.PRACTICE,
    "interactive": ResourceType.PRACTICE,
}


def map_material_type(material_type: str | None) -> ResourceType:
    """Map an OER Commons material type, defaulting to document."""
    return MATERIAL_TYPES.get(material_type or "", ResourceType.DOCUMENT)


class OERCommonsAdapter(ResourceAdapter):
    """OER Commons open educational resources."""

    source = ResourceSource.OER_COMMONS
    default_author = "OER Commons"
    subject_map = {
        "Mathematics": "mathematics",
        "Physics": "physics",
        "Chemistry": "chemistry",
        "Biology": "biology",
        "English": "english-language-arts",
        "History": "history",
        "Geography": "geography",
        "Computer Science": "computer-science",
        "Commerce": "business",
        "Accounts": "accounting",
        "Literature": "literature",
        "Agriculture": "agriculture",
    }

    async def _fetch(self, query: FetchQuery) -> list[ResourceDraft]:
        payload = await self._get_json(
            "/search",
            params={
                "subject": self.map_subject(query.subject),
                "grade_level": ",".join(GRADE_LEVELS[query.grade]),
                "format": "json",
                "per_page": 20,
            },
        )

        drafts = []
        for item in payload["items"]:
            material_type = item.get("material_type")
            drafts.append(
                self.build_draft(
                    query,
                    title=item.get("title"),
                    description=item.get("description"),
                    resource_type=map_material_type(material_type).value,
                    url=item.get("url"),
                    thumbnail_url=item.get("thumbnail_url"),
                    author=item.get("provider"),
                    tags=[
                        query.subject.value,
                        query.grade.value,
                        material_type,
                        self.name,
                        *(item.get("keywords") or []),
                    ],
                    metadata={
                        "publisher": item.get("provider"),
                        "year": year_from_date(item.get("date_created")),
                        "language": item.get("language"),
                        "format": material_type,
                        "license": item.get("license"),
                    },
                )
            )
        return drafts

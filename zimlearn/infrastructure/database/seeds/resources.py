# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Starter resource catalog."""

import logging
from typing import Any

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from zimlearn.infrastructure.database.models import Resource, ResourceTag
from zimlearn.models.resource import ResourceCreate

logger = logging.getLogger(__name__)

STARTER_RESOURCES: list[dict[str, Any]] = [
    {
        "title": "Introduction to Mathematics O-Level",
        "description": (
            "A comprehensive guide to O-Level Mathematics covering basic concepts "
            "and problem-solving techniques."
        ),
        "subject": "Mathematics",
        "grade": "O",
        "type": "book",
        "url": "https://example.com/math-o-level",
        "source": "MoPSE",
        "author": "Ministry of Education",
        "difficulty": "beginner",
        "tags": ["Mathematics", "O", "book", "MoPSE"],
        "metadata": {
            "publisher": "MoPSE",
            "year": 2023,
            "language": "English",
            "format": "PDF",
        },
    },
    {
        "title": "Advanced Mathematics A-Level",
        "description": (
            "Advanced Mathematics concepts for A-Level students, including calculus "
            "and complex numbers."
        ),
        "subject": "Mathematics",
        "grade": "A",
        "type": "book",
        "url": "https://example.com/math-a-level",
        "source": "CollegePress",
        "author": "College Press",
        "difficulty": "advanced",
        "tags": ["Mathematics", "A", "book", "CollegePress"],
        "metadata": {
            "publisher": "College Press",
            "year": 2023,
            "language": "English",
            "format": "PDF",
        },
    },
    {
        "title": "O-Level English Literature Guide",
        "description": (
            "Complete guide to O-Level English Literature, including poetry, prose, "
            "and drama analysis."
        ),
        "subject": "English",
        "grade": "O",
        "type": "book",
        "url": "https://example.com/english-o-level",
        "source": "Teacha",
        "author": "Teacha!",
        "difficulty": "intermediate",
        "tags": ["English", "O", "book", "Teacha"],
        "metadata": {
            "publisher": "Teacha!",
            "year": 2023,
            "language": "English",
            "format": "PDF",
        },
    },
    {
        "title": "Physics O-Level Video Tutorials",
        "description": (
            "Video tutorials covering all O-Level Physics topics with practical "
            "demonstrations."
        ),
        "subject": "Physics",
        "grade": "O",
        "type": "video",
        "url": "https://youtube.com/playlist?list=physics-o-level",
        "source": "YouTube",
        "author": "Physics Tutor ZW",
        "difficulty": "intermediate",
        "tags": ["Physics", "O", "video", "YouTube"],
        "metadata": {"resourceType": "video", "language": "English"},
    },
    {
        "title": "Chemistry A-Level Practice Questions",
        "description": (
            "Comprehensive set of practice questions for A-Level Chemistry with "
            "detailed solutions."
        ),
        "subject": "Chemistry",
        "grade": "A",
        "type": "practice",
        "url": "https://example.com/chemistry-a-level-practice",
        "source": "Teacha",
        "author": "Chemistry Expert",
        "difficulty": "advanced",
        "tags": ["Chemistry", "A", "practice", "Teacha"],
        "metadata": {"resourceType": "practice", "language": "English", "format": "PDF"},
    },
]


async def seed_resources(session: AsyncSession, replace: bool = True) -> list[Resource]:
    """Insert the starter catalog.

    Args:
        session: Database session.
        replace: Delete every existing resource first.

    Returns:
        The inserted resources.
    """
    if replace:
        await session.execute(delete(ResourceTag))
        result = await session.execute(delete(Resource))
        logger.info("Cleared %d existing resources", result.rowcount)

    resources = []
    for data in STARTER_RESOURCES:
        record = ResourceCreate.model_validate(data).model_dump(mode="json")
        metadata = record.pop("metadata")
        resource = Resource(**record, extra_metadata=metadata)
        session.add(resource)
        resources.append(resource)

    await session.commit()
    logger.info("Seeded %d resources", len(resources))
    return resources

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared enumerations and base schemas.

The enumerations here are the single source of truth for subject, grade,
resource type, source, difficulty and role values. Database columns store
the enum values as plain strings.

Request schemas derive from RequestModel, which rejects unknown fields.
Response schemas derive from ResponseModel, which serialises field names
in camelCase for the mobile client.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Subject(str, Enum):
    """Curriculum subjects."""

    MATHEMATICS = "Mathematics"
    PHYSICS = "Physics"
    CHEMISTRY = "Chemistry"
    BIOLOGY = "Biology"
    ENGLISH = "English"
    HISTORY = "History"
    GEOGRAPHY = "Geography"
    COMMERCE = "Commerce"
    ACCOUNTS = "Accounts"
    LITERATURE = "Literature"
    AGRICULTURE = "Agriculture"
    COMPUTER_SCIENCE = "Computer Science"
    # Secondary Book Press only
    BUSINESS_ENTERPRISE = "Business Enterprise"
    FOOD_TECHNOLOGY = "Food Technology"
    FAMILY_RELIGIOUS_STUDIES = "Family Religious Studies"
    SHONA = "Shona"
    NDEBELE = "Ndebele"


CORE_SUBJECTS = frozenset({
    Subject.MATHEMATICS,
    Subject.PHYSICS,
    Subject.CHEMISTRY,
    Subject.BIOLOGY,
    Subject.ENGLISH,
    Subject.HISTORY,
    Subject.GEOGRAPHY,
    Subject.COMMERCE,
    Subject.ACCOUNTS,
    Subject.LITERATURE,
    Subject.AGRICULTURE,
    Subject.COMPUTER_SCIENCE,
})


class Grade(str, Enum):
    """ZIMSEC examination level."""

    ORDINARY = "O"
    ADVANCED = "A"


class ResourceType(str, Enum):
    """Kind of learning material."""

    BOOK = "book"
    VIDEO = "video"
    DOCUMENT = "document"
    PRACTICE = "practice"
    QUIZ = "quiz"


class ResourceSource(str, Enum):
    """Provider a resource record was obtained from."""

    MOPSE = "MoPSE"
    COLLEGE_PRESS = "CollegePress"
    TEACHA = "Teacha"
    YOUTUBE = "YouTube"
    ZIMSEC = "ZIMSEC"
    SECONDARY_BOOK_PRESS = "SecondaryBookPress"
    OER_COMMONS = "OERCommons"
    CK12 = "CK12"
    CUSTOM = "Custom"


class Difficulty(str, Enum):
    """Difficulty band of a resource."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class UserRole(str, Enum):
    """Account role carried in the access token."""

    STUDENT = "student"
    ADMIN = "admin"


def difficulty_for_grade(grade: Grade | str) -> Difficulty:
    """Default difficulty for a grade: O is intermediate, A is advanced."""
    return Difficulty.ADVANCED if Grade(grade) is Grade.ADVANCED else Difficulty.INTERMEDIATE


class RequestModel(BaseModel):
    """Base for request bodies.

    Accepts camelCase or snake_case keys and rejects anything else.
    """

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class ResponseModel(BaseModel):
    """Base for response bodies serialised with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(ResponseModel):
    """Plain acknowledgement."""

    message: str

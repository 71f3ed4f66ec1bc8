# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Secondary Book Press adapter.

Secondary Book Press has no API. Its downloads page groups PDF links into
".download-section" blocks whose <h3> names the form and subject, e.g.
"Form 3 Maths" rendered as "form-3 maths". A block matches when its
heading contains the provider's subject token and any form of the grade.
Each PDF link may be followed by a ".file-size" sibling such as "2.5 MB".
"""

import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from zimlearn.domains.resources.adapters.base import FetchQuery, ResourceAdapter, ResourceDraft
from zimlearn.models.common import Grade, ResourceSource, ResourceType
from zimlearn.utils.datetime import utc_now

FORM_BANDS = {
    Grade.ORDINARY: ("form-1", "form-2", "form-3", "form-4"),
    Grade.ADVANCED: ("form-5", "form-6"),
}

MATERIAL_TYPES = {
    "textbook": ResourceType.BOOK,
    "revision-guide": ResourceType.DOCUMENT,
}

FILE_SIZE_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)\s*(KB|MB|GB)$", re.IGNORECASE)
FILE_SIZE_UNITS = {"KB": 1024, "MB": 1024**2, "GB": 1024**3}


def parse_file_size(size: str | None) -> int:
    """Convert a size label such as "2.5 MB" into bytes.

    Args:
        size: Size label, case-insensitive.

    Returns:
        Size in bytes, or 0 if the label is missing or malformed.
    """
    if not size:
        return 0
    match = FILE_SIZE_PATTERN.match(size.strip())
    if not match:
        return 0
    number, unit = match.groups()
    return int(float(number) * FILE_SIZE_UNITS[unit.upper()])


def determine_resource_type(title: str, material: str | None = None) -> ResourceType:
    """Pick book or document for a download.

    An explicit material hint wins; otherwise revision guides are
    recognised by their title.
    """
    if material:
        return MATERIAL_TYPES.get(material, ResourceType.BOOK)
    lowered = title.lower()
    if "revision" in lowered or "guide" in lowered:
        return ResourceType.DOCUMENT
    return ResourceType.BOOK


def _file_size_label(link: Tag) -> str:
    sibling = link.find_next_sibling()
    if isinstance(sibling, Tag) and "file-size" in (sibling.get("class") or []):
        return sibling.get_text(strip=True)
    return ""


class SecondaryBookPressAdapter(ResourceAdapter):
    """Secondary Book Press free downloads."""

    source = ResourceSource.SECONDARY_BOOK_PRESS
    default_author = "Secondary Book Press"
    subject_map = {
        "Mathematics": "maths",
        "Physics": "physics",
        "Chemistry": "chemistry",
        "Biology": "biology",
        "English": "english",
        "History": "history",
        "Geography": "geography",
        "Computer Science": "computer-science",
        "Commerce": "commerce",
        "Accounts": "accounts",
        "Literature": "english-literature",
        "Agriculture": "agriculture",
        "Business Enterprise": "business-enterprise",
        "Food Technology": "food-technology",
        "Family Religious Studies": "frs",
        "Shona": "shona",
        "Ndebele": "ndebele",
    }

    async def _fetch(self, query: FetchQuery) -> list[ResourceDraft]:
        response = await self._client.get(f"{self._base_url}/downloads")
        response.raise_for_status()
        return self.parse_downloads(response.text, query)

    def parse_downloads(self, html: str, query: FetchQuery) -> list[ResourceDraft]:
        """Extract drafts from the downloads page.

        Args:
            html: Page markup.
            query: Fetch parameters.

        Returns:
            Drafts in page order.
        """
        soup = BeautifulSoup(html, "html.parser")
        subject_token = self.map_subject(query.subject)
        bands = FORM_BANDS[query.grade]

        drafts = []
        for section in soup.select(".download-section"):
            heading = section.find("h3")
            heading_text = heading.get_text().lower() if heading else ""
            if subject_token not in heading_text:
                continue
            if not any(band in heading_text for band in bands):
                continue

            for link in section.select('a[href*=".pdf"]'):
                title = link.get_text(strip=True)
                href = link.get("href")
                if not title or not href:
                    continue
                drafts.append(self._build(query, title, str(href), _file_size_label(link)))
        return drafts

    def _build(self, query: FetchQuery, title: str, href: str, size_label: str) -> ResourceDraft:
        resource_type = determine_resource_type(title, query.material)
        url = urljoin(f"{self._base_url}/", href)

        return self.build_draft(
            query,
            title=title,
            description=(
                f"Secondary Book Press {resource_type.value} for "
                f"{query.subject.value} {query.grade.value} Level"
            ),
            resource_type=resource_type.value,
            url=url,
            metadata={
                "publisher": self.default_author,
                "year": utc_now().year,
                "language": "en",
                "format": "pdf",
                "fileSize": parse_file_size(size_label),
            },
        )

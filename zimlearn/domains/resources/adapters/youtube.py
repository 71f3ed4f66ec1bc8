# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""YouTube Data API v3 adapter.

Two calls per fetch: search.list finds embeddable medium-length videos for
"<subject> <grade> level education", then videos.list loads snippet,
duration and statistics for the hits.
"""

import logging

import httpx

from zimlearn.domains.resources.adapters.base import (
    FetchQuery,
    ResourceAdapter,
    ResourceDraft,
    year_from_date,
)
from zimlearn.models.common import Difficulty, Grade, ResourceSource, ResourceType

logger = logging.getLogger(__name__)

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"
MAX_RESULTS = 20


def _to_int(value: object) -> int | None:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


class YouTubeAdapter(ResourceAdapter):
    """Educational videos from YouTube."""

    source = ResourceSource.YOUTUBE
    default_author = "Unknown Author"

    def __init__(self, client: httpx.AsyncClient, base_url: str, api_key: str | None) -> None:
        """Initialize the adapter.

        Args:
            client: Shared HTTP client.
            base_url: YouTube Data API base URL.
            api_key: API key. Without one every fetch returns nothing.
        """
        super().__init__(client, base_url)
        self._api_key = api_key

    def difficulty_for(self, grade: Grade) -> Difficulty:
        """O level videos are aimed at beginners."""
        return Difficulty.ADVANCED if grade is Grade.ADVANCED else Difficulty.BEGINNER

    async def _fetch(self, query: FetchQuery) -> list[ResourceDraft]:
        if not self._api_key:
            logger.warning("YouTube API key not configured, skipping video fetch")
            return []

        search = await self._get_json(
            "/search",
            params={
                "part": "snippet",
                "q": f"{query.subject.value} {query.grade.value} level education",
                "type": "video",
                "maxResults": MAX_RESULTS,
                "relevanceLanguage": "en",
                "videoEmbeddable": "true",
                "videoDuration": "medium",
                "key": self._api_key,
            },
        )

        video_ids = [
            item["id"]["videoId"]
            for item in search.get("items", [])
            if isinstance(item.get("id"), dict) and item["id"].get("videoId")
        ]
        if not video_ids:
            return []

        details = await self._get_json(
            "/videos",
            params={
                "part": "snippet,contentDetails,statistics",
                "id": ",".join(video_ids),
                "key": self._api_key,
            },
        )

        drafts = []
        for video in details.get("items", []):
            snippet = video.get("snippet") or {}
            statistics = video.get("statistics") or {}
            content = video.get("contentDetails") or {}
            video_id = video.get("id")
            thumbnail = (snippet.get("thumbnails") or {}).get("high") or {}

            drafts.append(
                self.build_draft(
                    query,
                    title=snippet.get("title"),
                    description=snippet.get("description"),
                    resource_type=ResourceType.VIDEO.value,
                    url=WATCH_URL.format(video_id=video_id) if video_id else None,
                    thumbnail_url=thumbnail.get("url"),
                    author=snippet.get("channelTitle"),
                    tags=[
                        query.subject.value,
                        query.grade.value,
                        ResourceType.VIDEO.value,
                        self.name,
                        *(snippet.get("tags") or []),
                    ],
                    metadata={
                        "publisher": snippet.get("channelTitle"),
                        "year": year_from_date(snippet.get("publishedAt")),
                        "language": snippet.get("defaultLanguage") or "en",
                        "format": "video",
                        "resourceType": "video",
                        "publishedAt": snippet.get("publishedAt"),
                        "channelId": snippet.get("channelId"),
                        "videoId": video_id,
                        "duration": content.get("duration"),
                        "viewCount": _to_int(statistics.get("viewCount")),
                        "likeCount": _to_int(statistics.get("likeCount")),
                        "commentCount": _to_int(statistics.get("commentCount")),
                    },
                )
            )
        return drafts

"""
Video recommendations via the YouTube Data API v3 search endpoint
"""

import logging
from typing import List, Optional

import httpx

from errors import InputValidationError, VideoSearchError
from parsing.schemas import ApiModel

log = logging.getLogger(__name__)

YOUTUBE_SEARCH_URL = "https://www.googleapis.com/youtube/v3/search"
QUERY_SUFFIX = " educational tutorial"
DEFAULT_MAX_RESULTS = 5


class VideoRecommendation(ApiModel):
    id: str
    title: str
    thumbnail: str = ""
    url: str


def videos_from_payload(payload: dict) -> List[VideoRecommendation]:
    """Map a search.list response to recommendations, skipping non-video items."""
    videos = []
    for item in payload.get("items") or []:
        video_id = (item.get("id") or {}).get("videoId")
        if not video_id:
            continue
        snippet = item.get("snippet") or {}
        thumbnails = snippet.get("thumbnails") or {}
        thumbnail = (thumbnails.get("medium") or thumbnails.get("default") or {}).get("url", "")
        videos.append(
            VideoRecommendation(
                id=video_id,
                title=snippet.get("title", ""),
                thumbnail=thumbnail,
                url=f"https://www.youtube.com/watch?v={video_id}",
            )
        )
    return videos


class YouTubeSearchClient:
    def __init__(
        self,
        api_key: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 15.0,
    ):
        self.api_key = api_key
        self.timeout = timeout
        self._http = http_client

    async def search(self, topic: Optional[str], max_results: int = DEFAULT_MAX_RESULTS) -> List[VideoRecommendation]:
        """
        Search educational videos for a topic.

        Raises:
            InputValidationError: blank topic
            VideoSearchError: missing API key, HTTP or payload failure
        """
        if not topic or not topic.strip():
            raise InputValidationError("Topic must not be empty")
        if not self.api_key:
            raise VideoSearchError(detail="YOUTUBE_API_KEY is not configured")

        params = {
            "part": "snippet",
            "q": topic.strip() + QUERY_SUFFIX,
            "type": "video",
            "maxResults": max_results,
            "key": self.api_key,
        }
        try:
            if self._http is not None:
                response = await self._http.get(YOUTUBE_SEARCH_URL, params=params, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(YOUTUBE_SEARCH_URL, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise VideoSearchError(detail=f"YouTube returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise VideoSearchError(detail=str(e)) from e
        except ValueError as e:
            raise VideoSearchError(detail=f"Invalid JSON from YouTube: {e}") from e

        if not isinstance(payload, dict):
            raise VideoSearchError(detail="Unexpected YouTube response")
        videos = videos_from_payload(payload)
        log.info(f"YouTube search '{topic.strip()}': {len(videos)} videos")
        return videos

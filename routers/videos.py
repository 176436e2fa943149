"""
Videos Router
POST /youtube-search — educational video recommendations for a topic
"""

from typing import List, Optional

from fastapi import APIRouter, Depends

from parsing.schemas import ApiModel
from routers.deps import get_video_client
from services.video_search import VideoRecommendation, YouTubeSearchClient

router = APIRouter(tags=["videos"])


class VideoSearchRequest(ApiModel):
    topic: Optional[str] = None


class VideoSearchResponse(ApiModel):
    success: bool = True
    videos: List[VideoRecommendation]


@router.post("/youtube-search", response_model=VideoSearchResponse)
async def youtube_search(
    request: VideoSearchRequest,
    client: YouTubeSearchClient = Depends(get_video_client),
):
    videos = await client.search(request.topic)
    return VideoSearchResponse(videos=videos)

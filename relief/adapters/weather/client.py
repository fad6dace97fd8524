"""
National Weather Service alert feed client for Insta-Relief.

This module fetches the currently active alerts from the public
NWS API as GeoJSON features.
"""

import aiohttp
import asyncio
from typing import List
from relief.core.errors import FeedError
from relief.observability.logging_setup import get_logger

log = get_logger("relief.feed")

class NoaaAlertFeed:
    """NWS 활성 경보 피드 클라이언트"""

    def __init__(self,
                 url: str = "https://api.weather.gov/alerts/active",
                 user_agent: str = "insta-relief",
                 timeout: int = 15):
        """
        초기화합니다.

        Args:
            url: 활성 경보 엔드포인트
            user_agent: NWS API가 요구하는 User-Agent
            timeout: 요청 타임아웃 (초)
        """
        self.url = url
        self.user_agent = user_agent
        self.timeout = timeout

        log.info(f"NWS 경보 피드 클라이언트 초기화됨 url:{url}")

    async def fetch_active(self) -> List[dict]:
        """
        활성 경보 feature 목록을 가져옵니다.

        Returns:
            GeoJSON feature 목록 (피드 순서 유지)

        Raises:
            FeedError: non-2xx 응답, 네트워크 오류, 잘못된 응답 본문
        """
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "application/geo+json",
        }
        try:
            async with aiohttp.ClientSession(
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as session:
                async with session.get(self.url) as response:
                    if not 200 <= response.status < 300:
                        raise FeedError(
                            f"NOAA API returned {response.status}: {response.reason}",
                            status=response.status
                        )
                    # NWS는 application/geo+json을 반환하므로 content_type 검사 생략
                    data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise FeedError(f"NOAA API request failed: {e}") from e

        if not isinstance(data, dict):
            raise FeedError("NOAA API returned an unexpected payload")

        features = data.get("features") or []
        log.info(f"활성 경보 가져옴 count:{len(features)}")
        return list(features)

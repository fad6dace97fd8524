"""
Alert feed port interface.

This module defines the protocol for fetching active weather alerts.
"""

from typing import List, Protocol

class AlertFeedPort(Protocol):
    """경보 피드 포트 인터페이스"""
    
    async def fetch_active(self) -> List[dict]:
        """
        현재 활성 경보 목록을 가져옵니다.
        
        Returns:
            원시 feature 딕셔너리 목록 (피드 순서 유지)
            
        Raises:
            FeedError: 피드가 non-2xx를 반환한 경우
        """
        ...

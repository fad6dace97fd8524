"""
Document store port interfaces.

This module defines the protocols for the users, processed-alert
marker and catastrophe collections.
"""

from datetime import datetime
from typing import List, Optional, Protocol
from relief.core.models import Catastrophe, ProcessedAlertMarker, User

class UserStorePort(Protocol):
    """사용자 저장소 포트 인터페이스"""

    async def find_by_zip(self, zip_code: str, status: Optional[str] = None) -> List[User]:
        ...

    async def credit_payout(self, user_id: str, amount: float, now: datetime) -> float:
        """
        잔액에 amount를 더하고 상태를 PAID로 바꾸는 원자적 트랜잭션.

        Returns:
            갱신된 잔액
        """
        ...

    async def record_alert(self, user_id: str, alert_id: str, now: datetime) -> None:
        """마지막 알림 시각/ID를 덮어씁니다 (last-write-wins)."""
        ...

class MarkerStorePort(Protocol):
    """처리 완료 경보 마커 저장소 포트 인터페이스"""

    async def add_if_absent(self, marker: ProcessedAlertMarker) -> bool:
        """
        마커가 없으면 생성하고 True, 이미 있으면 False를 반환합니다.
        """
        ...

    async def exists(self, alert_id: str) -> bool:
        ...

class CatastropheStorePort(Protocol):
    """재난 이벤트 이력 저장소 포트 인터페이스"""

    async def add(self, catastrophe: Catastrophe) -> int:
        ...

    async def recent(self, limit: int = 10) -> List[Catastrophe]:
        ...

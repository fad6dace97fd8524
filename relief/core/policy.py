"""
Policy evaluation functions for Insta-Relief.

This module contains pure functions for the payout decision and the
per-user notification rate limit.
"""

from datetime import datetime, timedelta
from typing import Optional

# 지급 대상 심각도 (소문자 비교)
PAYOUT_SEVERITIES = frozenset({"extreme", "severe"})

# 사용자당 최소 알림 간격
RATE_LIMIT_WINDOW = timedelta(minutes=30)

def should_payout(severity: Optional[str]) -> bool:
    """
    심각도 라벨로 지급 여부를 결정합니다.

    Args:
        severity: 경보 심각도 (대소문자 무관, None 허용)

    Returns:
        extreme/severe이면 True, 그 외 모두 False
    """
    return (severity or "").strip().lower() in PAYOUT_SEVERITIES

def can_receive_alert(last_alert_at: Optional[datetime],
                      now: datetime,
                      window: timedelta = RATE_LIMIT_WINDOW) -> bool:
    """
    마지막 알림 이후 window 이상 지났는지 확인합니다.

    Args:
        last_alert_at: 마지막 알림 시각 (None이면 무한히 오래 전)
        now: 현재 시각
        window: 최소 알림 간격

    Returns:
        알림 가능 여부
    """
    if last_alert_at is None:
        return True
    return now - last_alert_at >= window

"""
Normalization functions for Insta-Relief.

This module contains pure functions for converting raw weather-feed
payloads into internal domain models.
"""

from typing import Any, Dict
from .models import Alert

def to_alert(raw: Dict[str, Any]) -> Alert:
    """
    NWS GeoJSON feature(또는 properties 딕셔너리)를 Alert로 변환합니다.

    Args:
        raw: {"properties": {...}} 형태의 feature 또는 properties 자체

    Returns:
        Alert 모델

    Raises:
        ValueError: 경보 식별자가 없는 경우
    """
    props = raw.get("properties") if isinstance(raw.get("properties"), dict) else raw

    # 식별자 추출 (feature 최상위 id로 폴백)
    alert_id = str(props.get("id") or raw.get("id") or "").strip()
    if not alert_id:
        raise ValueError("alert has no identifier")

    severity = props.get("severity") or "Unknown"

    return Alert(
        id=alert_id,
        severity=str(severity),
        event=str(props.get("event") or ""),
        headline=props.get("headline"),
        description=props.get("description"),
        area_desc=props.get("areaDesc") or props.get("area_desc"),
    )

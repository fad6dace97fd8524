"""
SQLite-based processed-alert marker store for Insta-Relief.

This module implements the "processedAlerts" collection used to
deduplicate weather alerts across ingestion runs.
"""

import aiosqlite
from typing import Optional
from relief.core.models import ProcessedAlertMarker
from relief.observability.logging_setup import get_logger

log = get_logger("relief.markers")

# SQLite 스키마
SCHEMA = """
CREATE TABLE IF NOT EXISTS processed_alerts (
    alert_id TEXT PRIMARY KEY,
    severity TEXT,
    area_desc TEXT,
    processed_at TEXT NOT NULL
);
"""

class SQLiteMarkerStore:
    """SQLite 기반 처리 완료 경보 마커 저장소"""

    def __init__(self, path: str):
        """
        초기화합니다.

        Args:
            path: SQLite 데이터베이스 파일 경로
        """
        self.path = path
        log.info(f"SQLiteMarkerStore 초기화: {path}")

    async def init(self) -> None:
        """데이터베이스를 초기화합니다."""
        async with aiosqlite.connect(self.path) as db:
            await db.executescript(SCHEMA)
            await db.commit()
        log.info("SQLiteMarkerStore 스키마 초기화 완료")

    async def add_if_absent(self, marker: ProcessedAlertMarker) -> bool:
        """
        마커가 없으면 추가하고 True를 반환, 있으면 False를 반환합니다.

        Args:
            marker: 추가할 마커

        Returns:
            추가 성공 여부
        """
        try:
            async with aiosqlite.connect(self.path) as db:
                await db.execute(
                    "INSERT INTO processed_alerts (alert_id, severity, area_desc, processed_at) VALUES (?, ?, ?, ?)",
                    (marker.alert_id, marker.severity, marker.area_desc, marker.processed_at.isoformat())
                )
                await db.commit()
                return True
        except aiosqlite.IntegrityError:
            # 이미 처리된 경보
            return False

    async def exists(self, alert_id: str) -> bool:
        """마커 존재 여부를 확인합니다."""
        return await self.get(alert_id) is not None

    async def get(self, alert_id: str) -> Optional[ProcessedAlertMarker]:
        """
        마커를 조회합니다.

        Args:
            alert_id: 경보 ID

        Returns:
            마커 또는 None
        """
        async with aiosqlite.connect(self.path) as db:
            cursor = await db.execute(
                "SELECT alert_id, severity, area_desc, processed_at FROM processed_alerts WHERE alert_id = ?",
                (alert_id,)
            )
            row = await cursor.fetchone()
            if row:
                return ProcessedAlertMarker(
                    alert_id=row[0],
                    severity=row[1],
                    area_desc=row[2],
                    processed_at=row[3]
                )
            return None

    async def get_count(self) -> int:
        """
        현재 저장된 마커 수를 반환합니다.

        Returns:
            마커 수
        """
        async with aiosqlite.connect(self.path) as db:
            cursor = await db.execute("SELECT COUNT(*) FROM processed_alerts")
            result = await cursor.fetchone()
            return result[0] if result else 0

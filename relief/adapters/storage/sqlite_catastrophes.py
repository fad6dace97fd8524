"""
SQLite-based catastrophe history for Insta-Relief.

This module records admin-triggered relief events so operators can
review recent payouts.
"""

import aiosqlite
import json
from typing import List, Set
from relief.core.models import Catastrophe
from relief.observability.logging_setup import get_logger

log = get_logger("relief.catastrophes")

# SQLite 스키마
SCHEMA = """
CREATE TABLE IF NOT EXISTS catastrophes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    type TEXT NOT NULL,
    location TEXT NOT NULL,
    zip_codes TEXT NOT NULL,
    amount REAL NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL,
    created_by TEXT NOT NULL,
    total_affected INTEGER NOT NULL DEFAULT 0,
    successful_payouts INTEGER NOT NULL DEFAULT 0,
    failed_payouts INTEGER NOT NULL DEFAULT 0,
    emails_sent INTEGER NOT NULL DEFAULT 0
);
CREATE INDEX IF NOT EXISTS idx_catastrophes_created ON catastrophes(created_at);
"""

class SQLiteCatastropheStore:
    """SQLite 기반 재난 이벤트 이력"""

    def __init__(self, path: str):
        self.path = path
        log.info(f"SQLiteCatastropheStore 초기화: {path}")

    async def init(self) -> None:
        """데이터베이스를 초기화합니다."""
        async with aiosqlite.connect(self.path) as db:
            await db.executescript(SCHEMA)
            await db.commit()
        log.info(f"SQLiteCatastropheStore 스키마 초기화 완료: {self.path}")

    async def add(self, catastrophe: Catastrophe) -> int:
        """
        이벤트를 기록합니다.

        Args:
            catastrophe: 기록할 이벤트

        Returns:
            생성된 항목의 ID
        """
        async with aiosqlite.connect(self.path) as db:
            cursor = await db.execute(
                "INSERT INTO catastrophes (type, location, zip_codes, amount, description, created_at, "
                "created_by, total_affected, successful_payouts, failed_payouts, emails_sent) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    catastrophe.type,
                    catastrophe.location,
                    json.dumps(catastrophe.zip_codes),
                    catastrophe.amount,
                    catastrophe.description,
                    catastrophe.created_at.isoformat(),
                    catastrophe.created_by,
                    catastrophe.total_affected,
                    catastrophe.successful_payouts,
                    catastrophe.failed_payouts,
                    catastrophe.emails_sent,
                )
            )
            await db.commit()
            return cursor.lastrowid

    async def recent(self, limit: int = 10) -> List[Catastrophe]:
        """
        최근 이벤트를 생성 시각 역순으로 조회합니다.

        Args:
            limit: 최대 개수

        Returns:
            이벤트 목록
        """
        async with aiosqlite.connect(self.path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM catastrophes ORDER BY created_at DESC, id DESC LIMIT ?",
                (limit,)
            )
            rows = await cursor.fetchall()

        events = []
        for row in rows:
            data = dict(row)
            data["zip_codes"] = json.loads(data["zip_codes"] or "[]")
            events.append(Catastrophe.model_validate(data))
        return events

    async def used_types(self, limit: int = 20) -> Set[str]:
        """최근 사용된 재난 유형 집합"""
        return {c.type for c in await self.recent(limit)}

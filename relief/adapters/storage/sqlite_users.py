"""
SQLite-based user store for Insta-Relief.

This module implements the "users" collection, including the atomic
balance credit used for payouts.
"""

import aiosqlite
from datetime import datetime
from typing import List, Optional
from relief.core.errors import UserNotFoundError
from relief.core.models import User
from relief.observability.logging_setup import get_logger

log = get_logger("relief.users")

# SQLite 스키마
SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    email TEXT NOT NULL,
    name TEXT,
    zip TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'ACTIVE',
    balance REAL NOT NULL DEFAULT 0,
    last_alert_at TEXT,
    last_alert_id TEXT,
    last_payout_at TEXT,
    last_balance_update TEXT,
    last_balance_reason TEXT,
    wallet_address TEXT,
    policy_id TEXT
);
CREATE INDEX IF NOT EXISTS idx_users_zip_status ON users(zip, status);
"""

COLUMNS = (
    "id", "email", "name", "zip", "status", "balance", "last_alert_at",
    "last_alert_id", "last_payout_at", "last_balance_update",
    "last_balance_reason", "wallet_address", "policy_id",
)

def _ts(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None

class SQLiteUserStore:
    """SQLite 기반 사용자 저장소"""

    def __init__(self, path: str, busy_timeout_sec: float = 10.0):
        """
        초기화합니다.

        Args:
            path: SQLite 데이터베이스 파일 경로
            busy_timeout_sec: 잠금 대기 시간 (초), 동시 트랜잭션 직렬화에 사용
        """
        self.path = path
        self.busy_timeout = busy_timeout_sec
        log.info(f"SQLiteUserStore 초기화: {path}")

    def _connect(self, **kwargs):
        return aiosqlite.connect(self.path, timeout=self.busy_timeout, **kwargs)

    async def init(self) -> None:
        """데이터베이스를 초기화합니다."""
        async with self._connect() as db:
            await db.executescript(SCHEMA)
            await db.commit()
        log.info("SQLiteUserStore 스키마 초기화 완료")

    async def upsert(self, user: User) -> User:
        """
        사용자를 추가하거나 전체 필드를 덮어씁니다.

        Args:
            user: 저장할 사용자

        Returns:
            저장된 사용자
        """
        data = user.model_dump()
        values = [
            _ts(v) if isinstance(v, datetime) else v
            for v in (data[c] for c in COLUMNS)
        ]
        placeholders = ", ".join("?" for _ in COLUMNS)
        updates = ", ".join(f"{c} = excluded.{c}" for c in COLUMNS if c != "id")
        async with self._connect() as db:
            await db.execute(
                f"INSERT INTO users ({', '.join(COLUMNS)}) VALUES ({placeholders}) "
                f"ON CONFLICT(id) DO UPDATE SET {updates}",
                values
            )
            await db.commit()
        return user

    async def get(self, user_id: str) -> Optional[User]:
        """ID로 사용자를 조회합니다."""
        async with self._connect() as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute("SELECT * FROM users WHERE id = ?", (user_id,))
            row = await cursor.fetchone()
            return User.model_validate(dict(row)) if row else None

    async def find_by_zip(self, zip_code: str, status: Optional[str] = None) -> List[User]:
        """
        우편번호(및 상태)로 사용자 목록을 조회합니다.

        Args:
            zip_code: 우편번호
            status: 상태 필터 (None이면 전체)

        Returns:
            사용자 목록
        """
        query = "SELECT * FROM users WHERE zip = ?"
        params: list = [zip_code]
        if status is not None:
            query += " AND status = ?"
            params.append(status)
        query += " ORDER BY id"

        async with self._connect() as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(query, params)
            rows = await cursor.fetchall()
            return [User.model_validate(dict(r)) for r in rows]

    async def list_all(self) -> List[User]:
        """전체 사용자 목록을 조회합니다."""
        async with self._connect() as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute("SELECT * FROM users ORDER BY id")
            rows = await cursor.fetchall()
            return [User.model_validate(dict(r)) for r in rows]

    async def credit_payout(self, user_id: str, amount: float, now: datetime) -> float:
        """
        잔액 가산 + PAID 전환을 하나의 쓰기 트랜잭션으로 수행합니다.

        BEGIN IMMEDIATE로 쓰기 잠금을 먼저 잡은 뒤 잔액을 읽으므로
        동시 지급 시도는 직렬화되고 갱신이 유실되지 않습니다.

        Args:
            user_id: 사용자 ID
            amount: 가산 금액
            now: 지급 시각

        Returns:
            갱신된 잔액

        Raises:
            UserNotFoundError: 사용자가 없는 경우
        """
        async with self._connect(isolation_level=None) as db:
            await db.execute("BEGIN IMMEDIATE")
            try:
                cursor = await db.execute("SELECT balance FROM users WHERE id = ?", (user_id,))
                row = await cursor.fetchone()
                if row is None:
                    raise UserNotFoundError(user_id)
                new_balance = (row[0] or 0) + amount
                await db.execute(
                    "UPDATE users SET balance = ?, status = 'PAID', last_payout_at = ? WHERE id = ?",
                    (new_balance, _ts(now), user_id)
                )
                await db.execute("COMMIT")
            except BaseException:
                await db.execute("ROLLBACK")
                raise
        log.info(f"지급 트랜잭션 완료 user_id:{user_id} balance:{new_balance}")
        return new_balance

    async def record_alert(self, user_id: str, alert_id: str, now: datetime) -> None:
        """마지막 알림 시각과 경보 ID를 기록합니다."""
        async with self._connect() as db:
            await db.execute(
                "UPDATE users SET last_alert_at = ?, last_alert_id = ? WHERE id = ?",
                (_ts(now), alert_id, user_id)
            )
            await db.commit()

    async def add_balance(self, user_id: str, amount: float, reason: str, now: datetime) -> float:
        """
        관리자 발동 구호금 가산 (상태는 변경하지 않음).

        Returns:
            갱신된 잔액
        """
        async with self._connect(isolation_level=None) as db:
            await db.execute("BEGIN IMMEDIATE")
            try:
                cursor = await db.execute("SELECT balance FROM users WHERE id = ?", (user_id,))
                row = await cursor.fetchone()
                if row is None:
                    raise UserNotFoundError(user_id)
                new_balance = (row[0] or 0) + amount
                await db.execute(
                    "UPDATE users SET balance = ?, last_balance_update = ?, last_balance_reason = ? WHERE id = ?",
                    (new_balance, _ts(now), reason, user_id)
                )
                await db.execute("COMMIT")
            except BaseException:
                await db.execute("ROLLBACK")
                raise
        return new_balance

    async def set_balance(self, user_id: str, balance: float, now: datetime) -> User:
        """
        관리자가 잔액을 직접 설정합니다.

        Raises:
            UserNotFoundError: 사용자가 없는 경우
        """
        async with self._connect() as db:
            cursor = await db.execute(
                "UPDATE users SET balance = ?, last_balance_update = ?, last_balance_reason = ? WHERE id = ?",
                (balance, _ts(now), "Admin balance edit", user_id)
            )
            await db.commit()
            if cursor.rowcount == 0:
                raise UserNotFoundError(user_id)
        user = await self.get(user_id)
        log.info(f"잔액 수정됨 user_id:{user_id} balance:{balance}")
        return user

    async def get_count(self) -> int:
        """
        현재 저장된 사용자 수를 반환합니다.

        Returns:
            사용자 수
        """
        async with self._connect() as db:
            cursor = await db.execute("SELECT COUNT(*) FROM users")
            result = await cursor.fetchone()
            return result[0] if result else 0

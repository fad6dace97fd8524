"""
Storage Adapter 모듈 단위 테스트

이 모듈은 SQLite 기반 사용자/마커/재난 이력 저장소를 테스트합니다.
"""

import pytest
import asyncio
import os
from datetime import datetime, timedelta, timezone
from relief.adapters.storage import SQLiteUserStore, SQLiteMarkerStore, SQLiteCatastropheStore
from relief.core.errors import UserNotFoundError
from relief.core.models import Catastrophe, ProcessedAlertMarker


NOW = datetime(2025, 8, 30, 12, 0, tzinfo=timezone.utc)


class TestSQLiteUserStore:
    """사용자 저장소 테스트"""

    @pytest.fixture
    def store(self, temp_db_path):
        return SQLiteUserStore(temp_db_path)

    @pytest.mark.asyncio
    async def test_init_schema(self, store):
        await store.init()

        assert os.path.exists(store.path)
        assert await store.get_count() == 0

    @pytest.mark.asyncio
    async def test_upsert_and_get(self, store, make_user):
        await store.init()
        await store.upsert(make_user("alice", balance=10.0, last_alert_at=NOW))

        user = await store.get("alice")

        assert user.email == "alice@example.com"
        assert user.balance == 10.0
        assert user.status == "ACTIVE"
        assert user.last_alert_at == NOW

    @pytest.mark.asyncio
    async def test_upsert_overwrites(self, store, make_user):
        await store.init()
        await store.upsert(make_user("alice"))
        await store.upsert(make_user("alice", zip_code="70112", status="PAID"))

        user = await store.get("alice")

        assert user.zip == "70112"
        assert user.status == "PAID"
        assert await store.get_count() == 1

    @pytest.mark.asyncio
    async def test_get_missing(self, store):
        await store.init()
        assert await store.get("nobody") is None

    @pytest.mark.asyncio
    async def test_find_by_zip_with_status(self, store, make_user):
        await store.init()
        await store.upsert(make_user("b"))
        await store.upsert(make_user("a"))
        await store.upsert(make_user("paid", status="PAID"))
        await store.upsert(make_user("other", zip_code="70112"))

        active = await store.find_by_zip("70401", status="ACTIVE")
        everyone = await store.find_by_zip("70401")

        assert [u.id for u in active] == ["a", "b"]
        assert {u.id for u in everyone} == {"a", "b", "paid"}
        assert await store.find_by_zip("00000") == []

    @pytest.mark.asyncio
    async def test_credit_payout(self, store, make_user):
        """지급은 잔액 가산과 PAID 전환을 함께 수행"""
        await store.init()
        await store.upsert(make_user("alice", balance=5.0))

        balance = await store.credit_payout("alice", 100.0, NOW)
        user = await store.get("alice")

        assert balance == 105.0
        assert user.balance == 105.0
        assert user.status == "PAID"
        assert user.last_payout_at == NOW

    @pytest.mark.asyncio
    async def test_credit_payout_missing_user(self, store):
        await store.init()
        with pytest.raises(UserNotFoundError):
            await store.credit_payout("ghost", 100.0, NOW)

    @pytest.mark.asyncio
    async def test_concurrent_credits_are_not_lost(self, store, make_user):
        """동시 지급 시 모든 가산이 반영되어야 함"""
        await store.init()
        await store.upsert(make_user("alice"))

        await asyncio.gather(*(store.credit_payout("alice", 10.0, NOW) for _ in range(10)))

        user = await store.get("alice")
        assert user.balance == 100.0

    @pytest.mark.asyncio
    async def test_record_alert(self, store, make_user):
        await store.init()
        await store.upsert(make_user("alice"))

        await store.record_alert("alice", "alert-1", NOW)
        user = await store.get("alice")

        assert user.last_alert_at == NOW
        assert user.last_alert_id == "alert-1"
        assert user.status == "ACTIVE"

    @pytest.mark.asyncio
    async def test_add_balance_keeps_status(self, store, make_user):
        await store.init()
        await store.upsert(make_user("alice", balance=20.0))

        balance = await store.add_balance("alice", 50.0, "Flood relief", NOW)
        user = await store.get("alice")

        assert balance == 70.0
        assert user.status == "ACTIVE"
        assert user.last_balance_reason == "Flood relief"

    @pytest.mark.asyncio
    async def test_set_balance(self, store, make_user):
        await store.init()
        await store.upsert(make_user("alice", balance=20.0))

        user = await store.set_balance("alice", 3.5, NOW)

        assert user.balance == 3.5
        assert user.last_balance_update == NOW

    @pytest.mark.asyncio
    async def test_set_balance_missing_user(self, store):
        await store.init()
        with pytest.raises(UserNotFoundError):
            await store.set_balance("ghost", 1.0, NOW)


class TestSQLiteMarkerStore:
    """처리 완료 마커 저장소 테스트"""

    @pytest.fixture
    def store(self, temp_db_path):
        return SQLiteMarkerStore(temp_db_path)

    def _marker(self, alert_id):
        return ProcessedAlertMarker(alert_id=alert_id, severity="Extreme", area_desc="Tangipahoa", processed_at=NOW)

    @pytest.mark.asyncio
    async def test_add_if_absent(self, store):
        await store.init()

        assert await store.add_if_absent(self._marker("a1")) is True
        assert await store.add_if_absent(self._marker("a1")) is False
        assert await store.add_if_absent(self._marker("a2")) is True
        assert await store.get_count() == 2

    @pytest.mark.asyncio
    async def test_concurrent_add_single_winner(self, store):
        """같은 ID의 동시 추가는 하나만 성공"""
        await store.init()

        results = await asyncio.gather(*(store.add_if_absent(self._marker("same")) for _ in range(5)))

        assert results.count(True) == 1

    @pytest.mark.asyncio
    async def test_get_and_exists(self, store):
        await store.init()
        await store.add_if_absent(self._marker("a1"))

        marker = await store.get("a1")

        assert marker.severity == "Extreme"
        assert marker.processed_at == NOW
        assert await store.exists("a1") is True
        assert await store.exists("zzz") is False


class TestSQLiteCatastropheStore:
    """재난 이력 저장소 테스트"""

    @pytest.fixture
    def store(self, temp_db_path):
        return SQLiteCatastropheStore(temp_db_path)

    def _event(self, type_, created_at):
        return Catastrophe(type=type_, location="Hammond, LA", zip_codes=["70401", "70403"],
                           amount=100.0, created_at=created_at, successful_payouts=2)

    @pytest.mark.asyncio
    async def test_add_and_recent(self, store):
        await store.init()
        first = await store.add(self._event("Flood", NOW))
        second = await store.add(self._event("Hurricane", NOW + timedelta(hours=1)))

        events = await store.recent(10)

        assert first != second
        assert [e.type for e in events] == ["Hurricane", "Flood"]
        assert events[0].zip_codes == ["70401", "70403"]
        assert events[0].id == second

    @pytest.mark.asyncio
    async def test_recent_limit_and_used_types(self, store):
        await store.init()
        for i, t in enumerate(["Flood", "Flood", "Tornado"]):
            await store.add(self._event(t, NOW + timedelta(minutes=i)))

        assert len(await store.recent(2)) == 2
        assert await store.used_types() == {"Flood", "Tornado"}

"""
테스트 설정 및 픽스처

이 모듈은 pytest 설정과 공통 픽스처(임시 DB, 가짜 피드/메일러, 고정 시계)를 제공합니다.
"""

import pytest
import tempfile
import os
from datetime import datetime, timedelta, timezone
from relief.bootstrap import build_services
from relief.core.errors import MailSendError
from relief.core.models import User
from relief.settings import Settings


class FakeFeed:
    """메모리 기반 경보 피드"""

    def __init__(self, features=None, error=None):
        self.features = list(features or [])
        self.error = error
        self.calls = 0

    async def fetch_active(self):
        self.calls += 1
        if self.error:
            raise self.error
        return list(self.features)


class FakeMailer:
    """발송 내역을 기록하는 메일러"""

    def __init__(self, configured=True):
        self._configured = configured
        self.fail_for = set()
        self.sent = []

    @property
    def configured(self):
        return self._configured

    async def send(self, *, to, sender, subject, html_body, text_body):
        for recipient in to:
            if any(addr in recipient for addr in self.fail_for):
                raise MailSendError("SMTP2GO error (500): rejected", status=500)
        self.sent.append({
            "to": list(to),
            "sender": sender,
            "subject": subject,
            "html_body": html_body,
            "text_body": text_body,
        })
        return {"data": {"succeeded": len(to)}}

    def sent_to(self, email):
        return [m for m in self.sent if any(email in r for r in m["to"])]


class FixedClock:
    """수동으로 진행시키는 시계"""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def temp_db_path():
    """임시 데이터베이스 파일 경로"""
    with tempfile.NamedTemporaryFile(suffix='.db', delete=False) as f:
        temp_path = f.name
    yield temp_path
    # 테스트 후 파일 정리
    for suffix in ("", "-journal", "-wal", "-shm"):
        if os.path.exists(temp_path + suffix):
            os.unlink(temp_path + suffix)


@pytest.fixture
def sample_settings(temp_db_path):
    """테스트용 설정"""
    settings = Settings()
    settings.storage.db_path = temp_db_path
    settings.mail.api_key = "test-key"
    settings.observability.service_name = "test-service"
    settings.observability.build_version = "1.0.0"
    settings.observability.log_level = "INFO"
    return settings


@pytest.fixture
def clock():
    return FixedClock(datetime(2025, 8, 30, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def feed():
    return FakeFeed()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def services(sample_settings, feed, mailer, clock):
    """가짜 피드/메일러와 임시 DB로 구성된 서비스 (스키마 초기화는 테스트에서 수행)"""
    return build_services(sample_settings, feed=feed, mailer=mailer, clock=clock)


@pytest.fixture
def make_user():
    """User 팩토리"""
    def _make(user_id, zip_code="70401", **kwargs):
        kwargs.setdefault("email", f"{user_id}@example.com")
        kwargs.setdefault("name", user_id.capitalize())
        return User(id=user_id, zip=zip_code, **kwargs)
    return _make


@pytest.fixture
def make_feature():
    """NWS GeoJSON feature 팩토리"""
    def _make(alert_id, severity="Extreme", area_desc="Tangipahoa", event="Hurricane Warning", **props):
        properties = {
            "id": alert_id,
            "severity": severity,
            "event": event,
            "areaDesc": area_desc,
            "headline": f"{event} issued",
            "description": f"{event} in effect.",
        }
        properties.update(props)
        return {"id": f"https://api.weather.gov/alerts/{alert_id}", "type": "Feature", "properties": properties}
    return _make

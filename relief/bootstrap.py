"""
Service wiring for Insta-Relief.

Builds the stores, external clients and orchestrators from Settings so the
HTTP app, the scheduler and the tests share one construction path.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional
from relief.adapters.mail.client import Smtp2goMailer
from relief.adapters.storage import SQLiteCatastropheStore, SQLiteMarkerStore, SQLiteUserStore
from relief.adapters.weather.client import NoaaAlertFeed
from relief.core.zipmap import ZipLookup
from relief.orchestrators import AdminTools, AlertIngestor, DisasterSimulator, NotificationDispatcher
from relief.ports.feed import AlertFeedPort
from relief.ports.mail import MailSenderPort
from relief.settings import Settings

@dataclass
class ReliefServices:
    """애플리케이션 서비스 묶음"""
    users: SQLiteUserStore
    markers: SQLiteMarkerStore
    catastrophes: SQLiteCatastropheStore
    zip_lookup: ZipLookup
    dispatcher: NotificationDispatcher
    ingestor: AlertIngestor
    simulator: DisasterSimulator
    admin: AdminTools

    async def init(self) -> None:
        """저장소 스키마를 초기화합니다."""
        await self.users.init()
        await self.markers.init()
        await self.catastrophes.init()

def build_services(settings: Settings,
                   *,
                   feed: Optional[AlertFeedPort] = None,
                   mailer: Optional[MailSenderPort] = None,
                   clock: Optional[Callable[[], datetime]] = None) -> ReliefServices:
    """
    설정으로부터 서비스를 구성합니다.

    Args:
        settings: 애플리케이션 설정
        feed: 경보 피드 (None이면 NWS 클라이언트)
        mailer: 메일 발송기 (None이면 SMTP2GO 클라이언트)
        clock: 현재 시각 함수

    Returns:
        ReliefServices
    """
    db_path = settings.storage.db_path
    users = SQLiteUserStore(db_path)
    markers = SQLiteMarkerStore(db_path)
    catastrophes = SQLiteCatastropheStore(db_path)
    zip_lookup = ZipLookup.load(settings.zipmap.table_path)

    if feed is None:
        feed = NoaaAlertFeed(
            url=settings.feed.url,
            user_agent=settings.feed.user_agent,
            timeout=settings.feed.timeout_sec,
        )
    if mailer is None:
        mailer = Smtp2goMailer(
            api_key=settings.mail.api_key,
            api_url=settings.mail.api_url,
            timeout=settings.mail.timeout_sec,
        )

    dispatcher = NotificationDispatcher(
        users,
        mailer,
        sender=settings.mail.sender,
        payout_amount=settings.dispatch.payout_amount,
        rate_limit=timedelta(minutes=settings.dispatch.rate_limit_minutes),
        clock=clock,
    )
    return ReliefServices(
        users=users,
        markers=markers,
        catastrophes=catastrophes,
        zip_lookup=zip_lookup,
        dispatcher=dispatcher,
        ingestor=AlertIngestor(feed, markers, dispatcher, zip_lookup, clock=clock),
        simulator=DisasterSimulator(dispatcher, zip_lookup, clock=clock),
        admin=AdminTools(users, catastrophes, mailer, relief_sender=settings.mail.relief_sender, clock=clock),
    )

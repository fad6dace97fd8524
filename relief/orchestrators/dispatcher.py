"""
Notification dispatcher for Insta-Relief.

For one postal code and one alert, this module notifies every ACTIVE user
in that code, applying the per-user rate limit and the optional payout.
Users are processed concurrently and their failures are isolated.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional
from relief.core.errors import ConfigurationError
from relief.core.message import AlertEmailTemplate, format_recipient
from relief.core.models import Alert, DispatchOutcome, User
from relief.core.policy import RATE_LIMIT_WINDOW, can_receive_alert
from relief.observability import metrics
from relief.observability.logging_setup import get_logger
from relief.ports.mail import MailSenderPort
from relief.ports.store import UserStorePort

log = get_logger("relief.dispatcher")

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

class NotificationDispatcher:
    """우편번호 단위 알림/지급 발송기"""

    def __init__(self,
                 users: UserStorePort,
                 mailer: MailSenderPort,
                 *,
                 sender: str,
                 payout_amount: float = 100.0,
                 rate_limit: timedelta = RATE_LIMIT_WINDOW,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        초기화합니다.

        Args:
            users: 사용자 저장소
            mailer: 메일 발송 포트
            sender: 발신자 주소
            payout_amount: 1회 지급액
            rate_limit: 사용자당 최소 알림 간격
            clock: 현재 시각 함수 (테스트용 주입)
        """
        self.users = users
        self.mailer = mailer
        self.sender = sender
        self.payout_amount = payout_amount
        self.rate_limit = rate_limit
        self.clock = clock or utcnow
        self.template = AlertEmailTemplate(payout_amount)

    def ensure_configured(self) -> None:
        """
        메일 발송 설정을 확인합니다.

        Raises:
            ConfigurationError: 메일 게이트웨이 API 키 누락
        """
        if not self.mailer.configured:
            log.error("메일 게이트웨이 API 키가 설정되지 않았습니다")
            raise ConfigurationError("SMTP API key missing! Set SMTP2GO_API_KEY")

    async def dispatch(self, zip_code: str, alert: Alert, pay: bool) -> List[DispatchOutcome]:
        """
        한 우편번호의 ACTIVE 사용자 전원에게 경보를 발송합니다.

        Args:
            zip_code: 우편번호
            alert: 경보
            pay: 지급 여부

        Returns:
            사용자별 결과 목록 (대상이 없으면 빈 목록)

        Raises:
            ConfigurationError: 메일 설정 누락 (어떤 변경도 하기 전에 발생)
        """
        self.ensure_configured()

        users = await self.users.find_by_zip(zip_code, status="ACTIVE")
        if not users:
            log.info(f"대상 사용자 없음 zip:{zip_code}")
            return []

        log.info(f"사용자 조회됨 zip:{zip_code} count:{len(users)} alert_id:{alert.id} pay:{pay}")

        # 한 사용자의 실패가 다른 사용자 처리를 취소하지 않도록 전부 수집
        results = await asyncio.gather(
            *(self._notify_user(user, alert, pay) for user in users),
            return_exceptions=True
        )

        outcomes: List[DispatchOutcome] = []
        for user, result in zip(users, results):
            if isinstance(result, BaseException):
                log.error(f"사용자 처리 실패 user_id:{user.id} error:{result}")
                result = DispatchOutcome(user_id=user.id, email=user.email, status="failed", error=str(result))
            outcomes.append(result)
            metrics.notifications.labels(result=result.status).inc()

        sent = sum(1 for o in outcomes if o.status == "sent")
        failed = sum(1 for o in outcomes if o.status == "failed")
        log.info(f"우편번호 처리 완료 zip:{zip_code} users:{len(users)} sent:{sent} failed:{failed}")
        return outcomes

    async def _notify_user(self, user: User, alert: Alert, pay: bool) -> DispatchOutcome:
        """
        사용자 1명에 대해 속도 제한 → 지급 → 타임스탬프 → 메일 순으로 처리합니다.

        Args:
            user: 대상 사용자 (조회 시점 스냅샷)
            alert: 경보
            pay: 지급 여부

        Returns:
            사용자별 결과
        """
        now = self.clock()

        if not can_receive_alert(user.last_alert_at, now, self.rate_limit):
            log.info(f"속도 제한으로 건너뜀 user_id:{user.id} last_alert_at:{user.last_alert_at}")
            return DispatchOutcome(user_id=user.id, email=user.email, status="skipped")

        paid = False
        try:
            if pay:
                await self.users.credit_payout(user.id, self.payout_amount, now)
                paid = True
                metrics.payouts.inc()

            await self.users.record_alert(user.id, alert.id, now)

            message = self.template.render(alert, paid=paid)
            await self.mailer.send(
                to=[format_recipient(user)],
                sender=self.sender,
                subject=message.subject,
                html_body=message.html_body,
                text_body=message.text_body,
            )
        except Exception as e:
            # 지급 후 메일 실패는 롤백하지 않고 기록만 남김
            log.error(f"사용자 알림 실패 user_id:{user.id} paid:{paid} error:{e}")
            return DispatchOutcome(user_id=user.id, email=user.email, status="failed", paid=paid, error=str(e))

        log.info(f"알림 발송됨 user_id:{user.id} alert_id:{alert.id} paid:{paid}")
        return DispatchOutcome(user_id=user.id, email=user.email, status="sent", paid=paid)

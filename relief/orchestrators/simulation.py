"""
Synthetic disaster simulation for Insta-Relief.

Builds a fake alert for one postal code and hands it straight to the
dispatcher, bypassing the ingestion dedup markers.
"""

from datetime import datetime
from typing import Callable, Optional
from relief.core.errors import InvalidRequestError
from relief.core.models import Alert, SimulationResult
from relief.core.policy import should_payout
from relief.core.zipmap import ZipLookup
from relief.observability.logging_setup import get_logger
from relief.orchestrators.dispatcher import NotificationDispatcher, utcnow

log = get_logger("relief.simulation")

class DisasterSimulator:
    """모의 재난 경보 발생기"""

    def __init__(self,
                 dispatcher: NotificationDispatcher,
                 zip_lookup: ZipLookup,
                 *,
                 clock: Optional[Callable[[], datetime]] = None):
        self.dispatcher = dispatcher
        self.zip_lookup = zip_lookup
        self.clock = clock or utcnow

    def build_alert(self,
                    zip_code: str,
                    severity: str,
                    event: str,
                    *,
                    id_prefix: str = "demo",
                    area_desc: Optional[str] = None,
                    headline: Optional[str] = None,
                    description: Optional[str] = None) -> Alert:
        """
        모의 경보를 생성합니다. 누락된 문구는 기본 문구로 채웁니다.
        """
        stamp = int(self.clock().timestamp() * 1000)
        return Alert(
            id=f"{id_prefix}-{stamp}",
            severity=severity,
            event=event,
            area_desc=area_desc or self.zip_lookup.county_for(zip_code) or f"Area for ZIP {zip_code}",
            headline=headline or f"{event} Warning - Emergency Alert System Activated",
            description=description or (
                f"This is a SIMULATED {event} alert for demonstration purposes. "
                f"A {severity.lower()} weather event has been detected in your area."
            ),
        )

    async def simulate(self,
                       zip_code: str,
                       severity: str = "Extreme",
                       event: str = "Hurricane",
                       **overrides) -> SimulationResult:
        """
        모의 경보를 한 우편번호에 발송합니다.

        Args:
            zip_code: 대상 우편번호 (필수)
            severity: 심각도
            event: 이벤트 라벨
            **overrides: id_prefix, area_desc, headline, description

        Returns:
            SimulationResult

        Raises:
            InvalidRequestError: 우편번호 누락
            ConfigurationError: 메일 설정 누락
        """
        if not zip_code or not str(zip_code).strip():
            raise InvalidRequestError("ZIP code is required")
        zip_code = str(zip_code).strip()

        alert = self.build_alert(zip_code, severity, event, **overrides)
        pay = should_payout(severity)
        log.info(f"모의 경보 발송 event:{event} severity:{severity} zip:{zip_code} pay:{pay}")

        outcomes = await self.dispatcher.dispatch(zip_code, alert, pay)
        return SimulationResult(alert=alert, zip=zip_code, payout_sent=pay, outcomes=outcomes)

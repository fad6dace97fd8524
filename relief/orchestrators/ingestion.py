"""
Alert ingestion loop for Insta-Relief.

This module fetches the active weather alerts, skips the ones already
marked as processed, and drives the dispatcher for every new alert.
"""

import asyncio
import time
from datetime import datetime
from typing import Callable, Optional
from relief.core.errors import ConfigurationError
from relief.core.models import IngestResult, ProcessedAlertMarker
from relief.core.normalize import to_alert
from relief.core.policy import should_payout
from relief.core.zipmap import ZipLookup
from relief.observability import metrics
from relief.observability.logging_setup import get_logger
from relief.orchestrators.dispatcher import NotificationDispatcher, utcnow
from relief.ports.feed import AlertFeedPort
from relief.ports.store import MarkerStorePort

log = get_logger("relief.ingestion")

class AlertIngestor:
    """경보 수집 → 중복 제거 → 발송 오케스트레이터"""

    def __init__(self,
                 feed: AlertFeedPort,
                 markers: MarkerStorePort,
                 dispatcher: NotificationDispatcher,
                 zip_lookup: ZipLookup,
                 *,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        초기화합니다.

        Args:
            feed: 경보 피드 포트
            markers: 처리 완료 마커 저장소
            dispatcher: 알림 발송기
            zip_lookup: 영역 → 우편번호 매퍼
            clock: 현재 시각 함수 (테스트용 주입)
        """
        self.feed = feed
        self.markers = markers
        self.dispatcher = dispatcher
        self.zip_lookup = zip_lookup
        self.clock = clock or utcnow

    async def ingest(self) -> IngestResult:
        """
        활성 경보를 한 번 수집하고 새 경보를 처리합니다.

        마커는 발송 전에 생성됩니다. 발송 도중 실패하거나 프로세스가
        중단되어도 같은 경보는 다시 처리되지 않습니다 (최대 1회 처리).

        Returns:
            IngestResult

        Raises:
            FeedError: 피드 호출 실패
            ConfigurationError: 메일 설정 누락
        """
        t0 = time.perf_counter()
        log.info("NWS 활성 경보 수집 시작")

        features = await self.feed.fetch_active()
        metrics.alerts_fetched.inc(len(features))

        if not features:
            log.info("활성 경보 없음")
            return IngestResult(processed_count=0, fetched_count=0, message="No active alerts")

        # 마커를 남기기 전에 메일 설정부터 확인
        self.dispatcher.ensure_configured()

        processed = 0
        for raw in features:
            try:
                alert = to_alert(raw)
            except ValueError as e:
                log.warning(f"식별자 없는 경보 건너뜀 error:{e}")
                continue

            marker = ProcessedAlertMarker(
                alert_id=alert.id,
                severity=alert.severity,
                area_desc=alert.area_desc,
                processed_at=self.clock(),
            )
            if not await self.markers.add_if_absent(marker):
                metrics.alerts_duplicate.inc()
                log.debug(f"이미 처리된 경보 건너뜀 alert_id:{alert.id}")
                continue

            zips = sorted(self.zip_lookup.map_area_to_zips(alert.area_desc))
            pay = should_payout(alert.severity)
            log.info(f"경보 우편번호 매핑 alert_id:{alert.id} zips:{len(zips)} severity:{alert.severity} pay:{pay}")

            for zip_code in zips:
                try:
                    await self.dispatcher.dispatch(zip_code, alert, pay)
                except ConfigurationError:
                    raise
                except Exception as e:
                    log.error(f"우편번호 발송 실패 alert_id:{alert.id} zip:{zip_code} error:{e}")
                    continue

            processed += 1
            metrics.alerts_processed.labels(severity=alert.severity.lower()).inc()

        metrics.ingestion_seconds.observe(time.perf_counter() - t0)
        log.info(f"수집 완료 fetched:{len(features)} processed:{processed}")
        return IngestResult(
            processed_count=processed,
            fetched_count=len(features),
            message=f"Processed {processed} new alerts",
        )

class IngestionScheduler:
    """주기적으로 ingest()를 실행하는 폴링 루프"""

    def __init__(self, ingestor: AlertIngestor, interval_sec: float):
        self.ingestor = ingestor
        self.interval = interval_sec

    async def run_once(self) -> Optional[IngestResult]:
        """한 번 실행합니다. 실패는 기록하고 None을 반환합니다."""
        try:
            return await self.ingestor.ingest()
        except Exception as e:
            log.error(f"주기 수집 실패 error:{e}")
            return None

    async def start(self) -> None:
        """취소될 때까지 interval 간격으로 수집합니다."""
        log.info(f"주기 수집 시작 interval_sec:{self.interval}")
        while True:
            await self.run_once()
            await asyncio.sleep(self.interval)

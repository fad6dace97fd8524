# relief/main.py
import os, asyncio, signal
from typing import Optional
import uvicorn
from relief.settings import Settings
from relief.api.app import create_app
from relief.bootstrap import ReliefServices, build_services
from relief.observability.logging_setup import setup_logging_dev, get_logger
from relief.orchestrators.ingestion import IngestionScheduler

def _b(name, default=False): return os.getenv(name, str(default)).lower() in ("1","true","yes","on")

def build_settings() -> Settings:
    s = Settings()

    # NWS 피드
    s.feed.url = os.getenv("NOAA_ALERTS_URL", s.feed.url)
    s.feed.user_agent = os.getenv("NOAA_USER_AGENT", s.feed.user_agent)
    s.feed.poll_interval_sec = int(os.getenv("FEED_POLL_INTERVAL_SEC", s.feed.poll_interval_sec))

    # 메일
    s.mail.api_key = os.getenv("SMTP2GO_API_KEY", s.mail.api_key)
    s.mail.sender = os.getenv("MAIL_SENDER", s.mail.sender)
    s.mail.relief_sender = os.getenv("RELIEF_MAIL_SENDER", s.mail.relief_sender)

    # 저장소 / 매핑
    s.storage.db_path = os.getenv("DB_PATH", s.storage.db_path)
    s.zipmap.table_path = os.getenv("ZIP_TABLE_PATH", s.zipmap.table_path)

    # 지급 정책
    s.dispatch.payout_amount = float(os.getenv("PAYOUT_AMOUNT", s.dispatch.payout_amount))
    s.dispatch.rate_limit_minutes = int(os.getenv("RATE_LIMIT_MINUTES", s.dispatch.rate_limit_minutes))

    # HTTP / 관측성
    s.http.port = int(os.getenv("HTTP_PORT", s.http.port))
    s.observability.metrics_enabled = _b("METRICS_ENABLED", s.observability.metrics_enabled)
    s.observability.log_level = os.getenv("LOG_LEVEL", s.observability.log_level)

    return s

async def start_http(settings: Settings, services: ReliefServices) -> asyncio.Task:
    app = create_app(settings, services)
    return asyncio.create_task(uvicorn.Server(
        uvicorn.Config(app, host=settings.http.host, port=settings.http.port,
                       log_level=settings.observability.log_level.lower())
    ).serve())

async def main():
    s = build_settings()
    setup_logging_dev(s.observability.log_level)
    log = get_logger()
    log.info("설정 로드 완료")

    if not s.mail.api_key:
        log.warning("SMTP2GO_API_KEY 미설정: 수집/모의 발송은 설정 오류로 실패합니다")

    services = build_services(s)
    await services.init()
    log.info(f"저장소 초기화 완료 db_path:{s.storage.db_path}")

    http_task = await start_http(s, services)
    log.info(f"HTTP 서버 시작됨 port:{s.http.port}")

    poll_task: Optional[asyncio.Task] = None
    if s.feed.poll_interval_sec > 0:
        scheduler = IngestionScheduler(services.ingestor, s.feed.poll_interval_sec)
        poll_task = asyncio.create_task(scheduler.start())

    stop = asyncio.Future()
    try:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            try: loop.add_signal_handler(sig, lambda: (not stop.done()) and stop.set_result(True))
            except NotImplementedError: pass
    except RuntimeError: pass

    await stop
    log.info("종료 신호 수신")
    if poll_task: poll_task.cancel()
    http_task.cancel()

def run():
    asyncio.run(main())

if __name__ == "__main__":
    run()

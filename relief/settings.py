# relief/settings.py
from __future__ import annotations
from pydantic import BaseModel, Field

class FeedConfig(BaseModel):
    url: str = "https://api.weather.gov/alerts/active"
    user_agent: str = "insta-relief (ops@insta-relief.example)"
    timeout_sec: int = 15
    poll_interval_sec: int = 0                # 0이면 주기 수집 비활성화

class MailConfig(BaseModel):
    api_url: str = "https://api.smtp2go.com/v3/email/send"
    api_key: str = ""
    sender: str = "Disaster Alert <alerts@insta-relief.example>"
    relief_sender: str = "Insta-Relief Emergency <alerts@insta-relief.example>"
    timeout_sec: int = 10

class StorageConfig(BaseModel):
    db_path: str = "/data/relief.db"

class DispatchConfig(BaseModel):
    payout_amount: float = 100.0
    rate_limit_minutes: int = 30

class ZipMapConfig(BaseModel):
    table_path: str | None = None             # None이면 패키지 내장 테이블 사용

class HttpConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8099

class Observability(BaseModel):
    metrics_enabled: bool = True
    service_name: str = "Insta-Relief"
    build_version: str = "0.2.0"
    build_date: str = "2025-01-01"
    log_level: str = "INFO"

class Settings(BaseModel):
    feed: FeedConfig = Field(default_factory=FeedConfig)
    mail: MailConfig = Field(default_factory=MailConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    dispatch: DispatchConfig = Field(default_factory=DispatchConfig)
    zipmap: ZipMapConfig = Field(default_factory=ZipMapConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    observability: Observability = Field(default_factory=Observability)

"""
Core domain models for Insta-Relief.

This module defines the core domain models using Pydantic v2
for type safety and validation.
"""

from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

# 사용자 상태 (ACTIVE -> PAID 단방향)
UserStatus = Literal["ACTIVE", "PAID"]

# 사용자별 발송 결과
OutcomeStatus = Literal["sent", "skipped", "failed"]

class Alert(BaseModel):
    """기상 경보 모델 (피드에서 수신 후 불변)"""
    model_config = ConfigDict(frozen=True)

    id: str
    severity: str = "Unknown"
    event: str = ""
    headline: Optional[str] = None
    description: Optional[str] = None
    area_desc: Optional[str] = None

class ProcessedAlertMarker(BaseModel):
    """처리 완료 경보 마커 (경보 ID당 1회 생성)"""
    alert_id: str
    severity: Optional[str] = None
    area_desc: Optional[str] = None
    processed_at: datetime

class User(BaseModel):
    """알림 수신 사용자 모델"""
    id: str
    email: str
    name: Optional[str] = None
    zip: str
    status: UserStatus = "ACTIVE"
    balance: float = Field(default=0.0, ge=0)
    last_alert_at: Optional[datetime] = None
    last_alert_id: Optional[str] = None
    last_payout_at: Optional[datetime] = None
    last_balance_update: Optional[datetime] = None
    last_balance_reason: Optional[str] = None
    wallet_address: Optional[str] = None
    policy_id: Optional[str] = None

    @property
    def display_name(self) -> str:
        """이름이 없으면 이메일 로컬 파트를 사용합니다."""
        return self.name or self.email.split("@")[0]

class EmailMessage(BaseModel):
    """발송할 이메일 본문"""
    subject: str
    html_body: str
    text_body: str

class DispatchOutcome(BaseModel):
    """사용자 단위 발송 결과"""
    user_id: str
    email: str
    status: OutcomeStatus
    paid: bool = False
    error: Optional[str] = None

class IngestResult(BaseModel):
    """수집 1회 결과"""
    processed_count: int
    fetched_count: int = 0
    message: str = ""

class SimulationResult(BaseModel):
    """모의 경보 처리 결과"""
    alert: Alert
    zip: str
    payout_sent: bool
    outcomes: List[DispatchOutcome] = Field(default_factory=list)

    @property
    def users_notified(self) -> int:
        return sum(1 for o in self.outcomes if o.status == "sent")

class Catastrophe(BaseModel):
    """관리자가 발동한 재난 구호 이벤트"""
    id: Optional[int] = None
    type: str
    location: str
    zip_codes: List[str] = Field(default_factory=list)
    amount: float
    description: str = ""
    created_at: datetime
    created_by: str = "admin"
    total_affected: int = 0
    successful_payouts: int = 0
    failed_payouts: int = 0
    emails_sent: int = 0

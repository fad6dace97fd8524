"""
Administrative tools for Insta-Relief.

These are the structured operations an operator (or an external chat agent)
runs against the datastore: platform overview, user lookups, admin-triggered
catastrophe payouts, analytics and direct balance edits.
"""

import uuid
from datetime import datetime
from typing import Callable, Dict, List, Optional
from relief.core.errors import InvalidRequestError, UserNotFoundError
from relief.core.message import compose_relief_email
from relief.core.models import Catastrophe, User
from relief.observability import metrics
from relief.observability.logging_setup import get_logger
from relief.orchestrators.dispatcher import utcnow
from relief.ports.mail import MailSenderPort

log = get_logger("relief.admin")

CATASTROPHE_TYPES = [
    {"type": "Flood", "description": "Flooding event"},
    {"type": "Hurricane", "description": "Hurricane storm"},
    {"type": "Earthquake", "description": "Seismic activity"},
    {"type": "Wildfire", "description": "Forest fire"},
    {"type": "Tornado", "description": "Tornado event"},
    {"type": "Winter Storm", "description": "Severe winter weather"},
    {"type": "Drought", "description": "Extended drought"},
]

SUGGESTED_AMOUNTS = [50, 100, 150, 200, 250, 500]

def _user_summary(user: User) -> Dict:
    return {
        "id": user.id,
        "name": user.display_name,
        "email": user.email,
        "policyId": user.policy_id,
        "status": user.status,
        "balance": user.balance,
        "walletAddress": user.wallet_address,
        "zip": user.zip,
    }

class AdminTools:
    """관리자 도구 모음"""

    def __init__(self,
                 users,
                 catastrophes,
                 mailer: MailSenderPort,
                 *,
                 relief_sender: str,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        초기화합니다.

        Args:
            users: 사용자 저장소 (SQLiteUserStore)
            catastrophes: 재난 이벤트 이력 저장소
            mailer: 메일 발송 포트
            relief_sender: 구호금 안내 메일 발신자
            clock: 현재 시각 함수
        """
        self.users = users
        self.catastrophes = catastrophes
        self.mailer = mailer
        self.relief_sender = relief_sender
        self.clock = clock or utcnow

    async def platform_config(self) -> Dict:
        """재난 유형, 활성 우편번호, 최근 사용 유형 등 플랫폼 설정을 반환합니다."""
        users = await self.users.list_all()
        metrics.users_total.set(len(users))

        zip_stats: Dict[str, Dict[str, int]] = {}
        for u in users:
            stats = zip_stats.setdefault(u.zip, {"total": 0, "withWallet": 0})
            stats["total"] += 1
            if u.wallet_address:
                stats["withWallet"] += 1

        used = await self.catastrophes.used_types(20)
        return {
            "catastropheTypes": CATASTROPHE_TYPES,
            "activeZips": sorted(zip_stats),
            "zipStats": zip_stats,
            "recentlyUsedTypes": sorted(used),
            "totalUsers": len(users),
            "suggestedAmounts": SUGGESTED_AMOUNTS,
        }

    async def users_by_zip(self, zip_codes: List[str]) -> Dict:
        """우편번호별 사용자 목록 (상태 무관)"""
        if not zip_codes:
            raise InvalidRequestError("zipCodes is required")
        found: List[Dict] = []
        for zip_code in zip_codes:
            found.extend(_user_summary(u) for u in await self.users.find_by_zip(zip_code))
        return {"users": found, "count": len(found), "zipCodes": list(zip_codes)}

    async def trigger_catastrophe(self,
                                  type: str,
                                  location: str,
                                  zip_codes: List[str],
                                  amount: float,
                                  description: Optional[str] = None,
                                  created_by: str = "admin") -> Dict:
        """
        재난을 발동해 대상 우편번호의 ACTIVE 사용자 잔액에 amount를 가산합니다.

        사용자별 실패는 errors에 모으고 나머지는 계속 처리합니다.

        Raises:
            InvalidRequestError: 필수 입력 누락 또는 amount <= 0
        """
        if not type or not location or not zip_codes or amount is None:
            raise InvalidRequestError("Missing required fields: type, location, zipCodes, amount")
        if amount <= 0:
            raise InvalidRequestError("amount must be positive")

        now = self.clock()
        reason = f"{type} disaster relief - Admin triggered"
        updates: List[Dict] = []
        errors: List[Dict] = []

        for zip_code in zip_codes:
            for user in await self.users.find_by_zip(zip_code, status="ACTIVE"):
                try:
                    new_balance = await self.users.add_balance(user.id, amount, reason, now)
                except Exception as e:
                    log.error(f"잔액 가산 실패 user_id:{user.id} error:{e}")
                    errors.append({"email": user.email, "error": str(e)})
                    continue
                updates.append({
                    "userId": user.id,
                    "email": user.email,
                    "name": user.display_name,
                    "oldBalance": new_balance - amount,
                    "newBalance": new_balance,
                    "added": amount,
                    "zip": user.zip,
                    "hasWallet": bool(user.wallet_address),
                })

        final_description = description or (
            f"{type} disaster affecting ZIP codes: {', '.join(zip_codes)}. "
            f"Emergency relief payout of ${amount} per affected user."
        )
        catastrophe = Catastrophe(
            type=type,
            location=location,
            zip_codes=list(zip_codes),
            amount=amount,
            description=final_description,
            created_at=now,
            created_by=created_by,
            total_affected=len(updates) + len(errors),
            successful_payouts=len(updates),
            failed_payouts=len(errors),
        )
        catastrophe_id = await self.catastrophes.add(catastrophe)
        log.info(f"재난 발동 완료 id:{catastrophe_id} type:{type} updated:{len(updates)} failed:{len(errors)}")

        with_wallet = sum(1 for u in updates if u["hasWallet"])
        return {
            "action": "AUTO_CATASTROPHE_TRIGGERED",
            "catastropheId": catastrophe_id,
            "balanceUpdateData": {
                "success": True,
                "updated": len(updates),
                "failed": len(errors),
                "totalAdded": len(updates) * amount,
                "updates": updates,
                "errors": errors or None,
                "message": f"Updated {len(updates)} users' balances. Added ${amount} per user.",
            },
            "analysis": {
                "totalUsers": len(updates),
                "usersWithWallet": with_wallet,
                "usersWithoutWallet": len(updates) - with_wallet,
                "estimatedCost": with_wallet * amount,
                "affectedZipCodes": list(zip_codes),
            },
            "description": final_description,
        }

    async def user_analytics(self, zip_code: Optional[str] = None) -> Dict:
        """사용자 수, 상태/우편번호별 분포, 잔액 통계"""
        users = await (self.users.find_by_zip(zip_code) if zip_code else self.users.list_all())
        balances = [u.balance for u in users]

        by_status: Dict[str, int] = {}
        by_zip: Dict[str, int] = {}
        for u in users:
            by_status[u.status] = by_status.get(u.status, 0) + 1
            by_zip[u.zip] = by_zip.get(u.zip, 0) + 1

        with_wallet = sum(1 for u in users if u.wallet_address)
        return {
            "total": len(users),
            "byStatus": by_status,
            "byZip": by_zip,
            "balances": {
                "total": sum(balances),
                "average": sum(balances) / len(balances) if balances else 0,
                "min": min(balances) if balances else 0,
                "max": max(balances) if balances else 0,
            },
            "withWallet": with_wallet,
            "withoutWallet": len(users) - with_wallet,
        }

    async def recent_catastrophes(self, limit: int = 10) -> Dict:
        """최근 재난 이벤트 이력과 합계"""
        if limit <= 0:
            raise InvalidRequestError("limit must be positive")
        events = await self.catastrophes.recent(limit)
        return {
            "events": [e.model_dump(mode="json") for e in events],
            "count": len(events),
            "summary": {
                "totalEvents": len(events),
                "totalPayouts": sum(e.successful_payouts for e in events),
                "totalFailed": sum(e.failed_payouts for e in events),
                "totalEmailsSent": sum(e.emails_sent for e in events),
            },
        }

    async def update_balance(self, user_id: str, balance: float) -> User:
        """
        잔액을 직접 설정합니다.

        Raises:
            InvalidRequestError: 음수 잔액
            UserNotFoundError: 사용자 없음
        """
        if balance is None or balance < 0:
            raise InvalidRequestError("balance must be a non-negative number")
        return await self.users.set_balance(user_id, balance, self.clock())

    async def register_user(self,
                            email: str,
                            zip_code: str,
                            name: Optional[str] = None,
                            user_id: Optional[str] = None,
                            balance: float = 0.0,
                            wallet_address: Optional[str] = None,
                            policy_id: Optional[str] = None) -> User:
        """신규 사용자를 ACTIVE 상태로 등록합니다."""
        if not email or "@" not in email:
            raise InvalidRequestError("a valid email is required")
        if not zip_code:
            raise InvalidRequestError("zip is required")
        if balance < 0:
            raise InvalidRequestError("balance must be a non-negative number")

        user = User(
            id=user_id or uuid.uuid4().hex,
            email=email,
            name=name,
            zip=zip_code,
            balance=balance,
            wallet_address=wallet_address,
            policy_id=policy_id,
        )
        await self.users.upsert(user)
        log.info(f"사용자 등록됨 user_id:{user.id} zip:{zip_code}")
        return user

    async def get_user(self, user_id: str) -> User:
        user = await self.users.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def send_relief_email(self,
                                user_email: str,
                                user_name: str,
                                catastrophe_type: str,
                                amount: float,
                                location: Optional[str] = None) -> Dict:
        """
        구호금 지급 완료 안내 메일을 발송합니다.

        Raises:
            InvalidRequestError: 필수 입력 누락
            ConfigurationError: 메일 설정 누락
            MailSendError: 발송 실패
        """
        if not user_email or not user_name or not catastrophe_type or not amount:
            raise InvalidRequestError("Missing required fields: userEmail, userName, catastropheType, amount")

        message = compose_relief_email(user_name, catastrophe_type, amount, location)
        await self.mailer.send(
            to=[f"{user_name} <{user_email}>"],
            sender=self.relief_sender,
            subject=message.subject,
            html_body=message.html_body,
            text_body=message.text_body,
        )
        log.info(f"구호금 안내 메일 발송됨 to:{user_email}")
        return {"message": f"Email sent to {user_email}"}

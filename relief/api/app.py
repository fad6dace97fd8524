"""
HTTP endpoints for Insta-Relief.

This module exposes ingestion, simulation, inspection and admin operations,
plus health, readiness, metrics and info endpoints. Handlers only translate
requests and results; failures are reported as ``{success: false, error}``.
"""

import json
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, Optional
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from relief.bootstrap import ReliefServices, build_services
from relief.core.errors import InvalidRequestError, UserNotFoundError
from relief.core.models import User
from relief.core.policy import can_receive_alert
from relief.observability.logging_setup import get_logger
from relief.settings import Settings

log = get_logger("relief.api")

DEFAULT_ZIP = "70401"

def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()

def _ok(**data) -> JSONResponse:
    return JSONResponse({"success": True, **data, "timestamp": _timestamp()})

def _fail(error: str, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        {"success": False, "error": error, "timestamp": _timestamp()},
        status_code=status_code
    )

async def _params(request: Request) -> Dict:
    """JSON 본문과 쿼리 파라미터를 합칩니다 (쿼리 우선)."""
    data: Dict = {}
    if request.method in ("POST", "PUT"):
        raw = await request.body()
        if raw:
            try:
                body = json.loads(raw)
            except ValueError:
                raise InvalidRequestError("Request body must be valid JSON")
            if not isinstance(body, dict):
                raise InvalidRequestError("Request body must be a JSON object")
            data.update(body)
    data.update(request.query_params)
    return data

def _first(data: Dict, *keys: str, default=None):
    for k in keys:
        if data.get(k) not in (None, ""):
            return data[k]
    return default

def _number(value, field: str) -> Optional[float]:
    if value in (None, ""):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidRequestError(f"{field} must be a number")

def _user_json(user: User) -> Dict:
    return {"success": True, **user.model_dump(mode="json"), "displayName": user.display_name}

async def _guard(name: str, handler: Callable[[], Awaitable[JSONResponse]]) -> JSONResponse:
    """엔드포인트 공통 오류 변환"""
    try:
        return await handler()
    except InvalidRequestError as e:
        return _fail(str(e), 400)
    except UserNotFoundError as e:
        return _fail(str(e), 404)
    except Exception as e:
        log.error(f"{name} 처리 실패 error:{e}")
        return _fail(str(e))

def create_app(settings: Settings, services: Optional[ReliefServices] = None) -> FastAPI:
    """FastAPI 애플리케이션을 생성합니다."""
    if services is None:
        services = build_services(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await services.init()
        yield

    app = FastAPI(
        title=settings.observability.service_name,
        version=settings.observability.build_version,
        description="Insta-Relief Alert Notification Service",
        lifespan=lifespan,
    )
    app.state.services = services

    start_time = time.time()

    # ---- 운영 엔드포인트 ----

    @app.get("/health")
    async def health():
        """헬스 체크 엔드포인트"""
        return JSONResponse({
            "status": "ok",
            "service": settings.observability.service_name,
            "timestamp": time.time()
        })

    @app.get("/ready")
    async def ready():
        """레디니스 체크 엔드포인트 (DB 읽기 가능 여부)"""
        try:
            await services.users.get_count()
        except Exception as e:
            log.error(f"레디니스 체크 실패 error:{e}")
            raise HTTPException(status_code=503, detail="Storage unavailable")
        return JSONResponse({
            "status": "ready",
            "service": settings.observability.service_name,
            "mail_configured": services.dispatcher.mailer.configured,
            "timestamp": time.time()
        })

    @app.get("/metrics")
    async def metrics():
        """Prometheus 메트릭 엔드포인트"""
        if not settings.observability.metrics_enabled:
            raise HTTPException(status_code=503, detail="Metrics disabled")
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/info")
    async def info():
        """서비스 정보 엔드포인트"""
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "build_date": settings.observability.build_date,
            "uptime_seconds": int(time.time() - start_time),
            "metrics_enabled": settings.observability.metrics_enabled,
            "log_level": settings.observability.log_level,
            "poll_interval_sec": settings.feed.poll_interval_sec,
        })

    # ---- 수집/모의/조회 ----

    @app.api_route("/run-ingestion", methods=["GET", "POST"])
    async def run_ingestion():
        """NWS 활성 경보를 즉시 수집합니다."""
        async def handler():
            result = await services.ingestor.ingest()
            return _ok(
                message=result.message,
                processedCount=result.processed_count,
                fetchedCount=result.fetched_count,
            )
        return await _guard("run-ingestion", handler)

    @app.api_route("/simulate", methods=["GET", "POST"])
    async def simulate(request: Request):
        """한 우편번호에 모의 경보를 발송합니다 (중복 제거 우회)."""
        async def handler():
            data = await _params(request)
            zip_code = str(_first(data, "postalCode", "zip", default=DEFAULT_ZIP))
            severity = str(_first(data, "severity", default="Extreme"))
            event = str(_first(data, "eventLabel", "event", default="Hurricane"))

            result = await services.simulator.simulate(zip_code, severity, event)
            return _ok(
                message=f"Simulated {event} alert processed for ZIP {zip_code}",
                payoutSent=result.payout_sent,
                severity=severity,
                affectedZip=zip_code,
                usersNotified=result.users_notified,
            )
        return await _guard("simulate", handler)

    @app.post("/disaster")
    async def disaster(request: Request):
        """필수 우편번호와 선택 문구로 모의 재난을 발송합니다."""
        async def handler():
            data = await _params(request)
            zip_code = _first(data, "postalCode", "zip")
            if not zip_code:
                raise InvalidRequestError("ZIP code is required")
            severity = str(_first(data, "severity", default="Extreme"))
            event = str(_first(data, "eventLabel", "event", default="Simulated Disaster"))

            result = await services.simulator.simulate(
                str(zip_code), severity, event,
                id_prefix="sim",
                area_desc=_first(data, "areaDesc"),
                headline=_first(data, "headline", default=f"Test Alert for ZIP {zip_code}"),
                description=_first(data, "description", default="Simulated alert."),
            )
            return _ok(
                message=f"Simulated alert processed for ZIP {zip_code} and payout sent: {str(result.payout_sent).lower()}",
                payoutSent=result.payout_sent,
            )
        return await _guard("disaster", handler)

    @app.get("/list-notifiable-users")
    async def list_notifiable_users(request: Request):
        """우편번호의 ACTIVE 사용자와 알림 가능 여부를 조회합니다."""
        async def handler():
            data = await _params(request)
            zip_code = str(_first(data, "postalCode", "zip", default=DEFAULT_ZIP))
            now = services.dispatcher.clock()
            users = await services.users.find_by_zip(zip_code, status="ACTIVE")
            listed = [{
                "id": u.id,
                "email": u.email,
                "name": u.name,
                "balance": u.balance,
                "lastAlert": u.last_alert_at.isoformat() if u.last_alert_at else "Never",
                "canReceiveAlert": can_receive_alert(u.last_alert_at, now, services.dispatcher.rate_limit),
            } for u in users]
            return _ok(zip=zip_code, userCount=len(listed), users=listed)
        return await _guard("list-notifiable-users", handler)

    @app.post("/send-relief-email")
    async def send_relief_email(request: Request):
        """구호금 지급 안내 메일을 발송합니다."""
        async def handler():
            data = await _params(request)
            result = await services.admin.send_relief_email(
                user_email=data.get("userEmail"),
                user_name=data.get("userName"),
                catastrophe_type=data.get("catastropheType"),
                amount=_number(data.get("amount"), "amount"),
                location=data.get("location"),
            )
            return _ok(**result)
        return await _guard("send-relief-email", handler)

    # ---- 관리자 도구 ----

    @app.get("/admin/config")
    async def admin_config():
        async def handler():
            return _ok(**await services.admin.platform_config())
        return await _guard("admin/config", handler)

    @app.post("/admin/users")
    async def admin_register_user(request: Request):
        """사용자를 등록합니다."""
        async def handler():
            data = await _params(request)
            user = await services.admin.register_user(
                email=data.get("email"),
                zip_code=_first(data, "zip", "postalCode"),
                name=data.get("name"),
                user_id=data.get("id"),
                balance=_number(data.get("balance"), "balance") or 0.0,
                wallet_address=data.get("walletAddress"),
                policy_id=data.get("policyId"),
            )
            return JSONResponse(_user_json(user))
        return await _guard("admin/users", handler)

    @app.post("/admin/users/by-zip")
    async def admin_users_by_zip(request: Request):
        async def handler():
            data = await _params(request)
            zip_codes = data.get("zipCodes")
            if isinstance(zip_codes, str):
                zip_codes = [z.strip() for z in zip_codes.split(",") if z.strip()]
            return _ok(**await services.admin.users_by_zip(zip_codes or []))
        return await _guard("admin/users/by-zip", handler)

    @app.get("/admin/users/{user_id}")
    async def admin_get_user(user_id: str):
        async def handler():
            return JSONResponse(_user_json(await services.admin.get_user(user_id)))
        return await _guard("admin/users/get", handler)

    @app.put("/admin/users/{user_id}/balance")
    async def admin_update_balance(user_id: str, request: Request):
        """잔액을 직접 수정합니다."""
        async def handler():
            data = await _params(request)
            user = await services.admin.update_balance(user_id, _number(data.get("balance"), "balance"))
            return JSONResponse(_user_json(user))
        return await _guard("admin/balance", handler)

    @app.post("/admin/catastrophes")
    async def admin_trigger_catastrophe(request: Request):
        """재난을 발동해 대상 사용자 잔액을 가산합니다."""
        async def handler():
            data = await _params(request)
            zip_codes = data.get("zipCodes")
            if isinstance(zip_codes, str):
                zip_codes = [z.strip() for z in zip_codes.split(",") if z.strip()]
            result = await services.admin.trigger_catastrophe(
                type=data.get("type"),
                location=data.get("location"),
                zip_codes=zip_codes or [],
                amount=_number(data.get("amount"), "amount"),
                description=data.get("description"),
                created_by=data.get("createdBy") or "admin",
            )
            return _ok(**result)
        return await _guard("admin/catastrophes", handler)

    @app.get("/admin/catastrophes")
    async def admin_recent_catastrophes(limit: int = 10):
        async def handler():
            return _ok(**await services.admin.recent_catastrophes(limit))
        return await _guard("admin/catastrophes/list", handler)

    @app.get("/admin/analytics")
    async def admin_analytics(zip: Optional[str] = None):
        async def handler():
            return _ok(**await services.admin.user_analytics(zip))
        return await _guard("admin/analytics", handler)

    @app.get("/")
    async def root():
        """루트 엔드포인트"""
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "endpoints": {
                "health": "/health",
                "ready": "/ready",
                "metrics": "/metrics",
                "info": "/info",
                "run_ingestion": "/run-ingestion",
                "simulate": "/simulate",
                "disaster": "/disaster",
                "list_notifiable_users": "/list-notifiable-users",
                "send_relief_email": "/send-relief-email",
                "admin": "/admin/*",
            }
        })

    return app

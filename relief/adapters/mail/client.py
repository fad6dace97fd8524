"""
SMTP2GO mail gateway client for Insta-Relief.

This module sends HTML/text emails through the SMTP2GO HTTP API.
"""

import aiohttp
import asyncio
import json
from typing import List
from relief.core.errors import ConfigurationError, MailSendError
from relief.observability.logging_setup import get_logger

log = get_logger("relief.mail")

class Smtp2goMailer:
    """SMTP2GO HTTP API 메일 발송 클라이언트"""

    def __init__(self,
                 api_key: str,
                 api_url: str = "https://api.smtp2go.com/v3/email/send",
                 timeout: int = 10):
        """
        초기화합니다.

        Args:
            api_key: SMTP2GO API 키
            api_url: 발송 엔드포인트
            timeout: 요청 타임아웃 (초)
        """
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout

        log.info(f"SMTP2GO 메일 클라이언트 초기화됨 api_key:{'설정됨' if api_key else '누락'}")

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def send(self, *, to: List[str], sender: str, subject: str,
                   html_body: str, text_body: str) -> dict:
        """
        메일을 발송합니다.

        Args:
            to: 수신자 목록 ("이름 <이메일>" 형식 허용)
            sender: 발신자
            subject: 제목
            html_body: HTML 본문
            text_body: 텍스트 본문

        Returns:
            게이트웨이 응답 데이터

        Raises:
            ConfigurationError: API 키 누락
            MailSendError: non-2xx 응답 또는 네트워크 오류
        """
        if not self.api_key:
            raise ConfigurationError("SMTP API key missing! Set SMTP2GO_API_KEY")

        payload = {
            "to": to,
            "sender": sender,
            "subject": subject,
            "html_body": html_body,
            "text_body": text_body,
        }
        headers = {
            "Content-Type": "application/json",
            "X-Smtp2go-Api-Key": self.api_key,
        }

        try:
            async with aiohttp.ClientSession(
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as session:
                async with session.post(self.api_url, json=payload) as response:
                    try:
                        data = await response.json(content_type=None)
                    except (json.JSONDecodeError, aiohttp.ContentTypeError):
                        data = {}
                    if not 200 <= response.status < 300:
                        detail = json.dumps(data.get("data", data) if isinstance(data, dict) else data)
                        raise MailSendError(
                            f"SMTP2GO error ({response.status}): {detail}",
                            status=response.status,
                            detail=detail
                        )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise MailSendError(f"SMTP2GO request failed: {e}") from e

        log.info(f"메일 발송 성공 to:{to} subject:{subject}")
        return data if isinstance(data, dict) else {}

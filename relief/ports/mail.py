"""
Mail sender port interface.

This module defines the protocol for outbound email delivery.
"""

from typing import List, Protocol

class MailSenderPort(Protocol):
    """메일 발송 포트 인터페이스"""
    
    @property
    def configured(self) -> bool:
        """API 키 등 발송에 필요한 설정이 있는지 여부"""
        ...
    
    async def send(self, *, to: List[str], sender: str, subject: str,
                   html_body: str, text_body: str) -> dict:
        """
        메일을 발송합니다.
        
        Raises:
            ConfigurationError: 설정 누락
            MailSendError: 게이트웨이가 non-2xx를 반환한 경우
        """
        ...

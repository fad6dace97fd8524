"""
Error taxonomy for Insta-Relief.

Per-user errors are recovered inside the dispatcher; configuration and
upstream feed errors always reach the caller of the top-level operation.
"""

from typing import Optional


class ReliefError(Exception):
    """모든 서비스 예외의 기반 클래스"""


class ConfigurationError(ReliefError):
    """필수 설정(메일 게이트웨이 키 등) 누락"""


class FeedError(ReliefError):
    """기상 경보 피드 호출 실패 (non-2xx 또는 잘못된 응답)"""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class MailSendError(ReliefError):
    """메일 게이트웨이 발송 실패"""

    def __init__(self, message: str, status: Optional[int] = None, detail: str = ""):
        super().__init__(message)
        self.status = status
        self.detail = detail


class InvalidRequestError(ReliefError):
    """요청 입력 검증 실패 (부수효과 발생 전 거부)"""


class UserNotFoundError(ReliefError):
    """존재하지 않는 사용자"""

    def __init__(self, user_id: str):
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id

"""
Email message templates for Insta-Relief.

This module provides templates for converting alert and payout
information into notification emails.
"""

from html import escape
from typing import Optional
from relief.core.models import Alert, EmailMessage, User

def _fmt_amount(amount: float) -> str:
    # 100.0 -> "100", 12.5 -> "12.50"
    return f"{amount:.0f}" if float(amount).is_integer() else f"{amount:.2f}"

class AlertEmailTemplate:
    """경보 알림 이메일 템플릿"""

    def __init__(self, payout_amount: float = 100.0):
        """
        초기화합니다.

        Args:
            payout_amount: 지급 안내 문구에 표시할 금액
        """
        self.payout_amount = payout_amount

    def render(self, alert: Alert, *, paid: bool) -> EmailMessage:
        """
        경보 알림 메일을 생성합니다.

        Args:
            alert: 경보
            paid: 지급 여부 (제목/본문 문구가 달라짐)

        Returns:
            EmailMessage
        """
        event = alert.event or "Weather Event"
        headline = alert.headline or event
        description = alert.description or ""
        area = alert.area_desc or "your area"

        subject = f"Weather Alert: {event} ({alert.severity})"
        html = (
            f'<h2 style="color:red;">{escape(headline)}</h2>'
            f"<p>{escape(description)}</p>"
            f"<p><b>Severity:</b> {escape(alert.severity)}</p>"
            f"<p><b>Area:</b> {escape(area)}</p>"
        )
        text = f"{event} alert ({alert.severity}) in {area}. {description}".strip()

        if paid:
            amount = _fmt_amount(self.payout_amount)
            subject = f"Emergency Fund Released: {event}"
            html += f"<p><strong>${amount} has been released to your emergency fund.</strong></p>"
            text += f" ${amount} has been released to your emergency fund."

        return EmailMessage(subject=subject, html_body=html, text_body=text)

def compose_alert_email(alert: Alert, *, paid: bool, payout_amount: float = 100.0) -> EmailMessage:
    """편의 함수: 경보 알림 메일 생성"""
    return AlertEmailTemplate(payout_amount).render(alert, paid=paid)

def compose_relief_email(user_name: str,
                         catastrophe_type: str,
                         amount: float,
                         location: Optional[str] = None) -> EmailMessage:
    """구호금 지급 완료 안내 메일을 생성합니다."""
    where = location or "your area"
    amt = _fmt_amount(amount)
    subject = f"Emergency Relief Payment Received - {catastrophe_type}"
    html = (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        '<h2 style="color:#4CAF50;">Emergency Relief Payment Received</h2>'
        f"<p>Dear {escape(user_name)},</p>"
        "<p>Your emergency relief payment has been successfully processed.</p>"
        '<div style="background-color: #f5f5f5; padding: 15px; border-radius: 5px; margin: 20px 0;">'
        f'<p style="margin: 5px 0;"><b>Disaster Type:</b> {escape(catastrophe_type)}</p>'
        f'<p style="margin: 5px 0;"><b>Location:</b> {escape(where)}</p>'
        f'<p style="margin: 5px 0;"><b>Amount Received:</b> <b>${amt}</b></p>'
        "</div>"
        '<p style="color: #666; font-size: 12px; margin-top: 30px;">Stay safe,<br><b>Insta-Relief Team</b></p>'
        "</div>"
    )
    text = f"Emergency relief payment of ${amt} received for {catastrophe_type} disaster in {where}."
    return EmailMessage(subject=subject, html_body=html, text_body=text)

def format_recipient(user: User) -> str:
    """'이름 <이메일>' 형식의 수신자 문자열"""
    return f"{user.display_name} <{user.email}>"

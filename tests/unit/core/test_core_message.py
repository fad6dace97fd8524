"""
message 모듈 테스트
"""

from relief.core.message import AlertEmailTemplate, compose_alert_email, compose_relief_email, format_recipient
from relief.core.models import Alert, User


def _alert(**kwargs):
    data = dict(id="a-1", severity="Extreme", event="Hurricane", headline="Hurricane Warning",
                description="Seek shelter.", area_desc="Tangipahoa")
    data.update(kwargs)
    return Alert(**data)


class TestAlertEmailTemplate:
    """경보 메일 템플릿 테스트"""

    def test_unpaid_message(self):
        msg = AlertEmailTemplate().render(_alert(severity="Minor"), paid=False)

        assert msg.subject == "Weather Alert: Hurricane (Minor)"
        assert "Seek shelter." in msg.html_body
        assert "released" not in msg.text_body
        assert msg.text_body.startswith("Hurricane alert (Minor) in Tangipahoa.")

    def test_paid_message(self):
        msg = AlertEmailTemplate(100.0).render(_alert(), paid=True)

        assert msg.subject == "Emergency Fund Released: Hurricane"
        assert "$100 has been released to your emergency fund." in msg.html_body
        assert "$100 has been released to your emergency fund." in msg.text_body

    def test_fractional_amount(self):
        msg = compose_alert_email(_alert(), paid=True, payout_amount=12.5)
        assert "$12.50" in msg.text_body

    def test_html_is_escaped(self):
        msg = AlertEmailTemplate().render(_alert(headline="<script>x</script>"), paid=False)
        assert "<script>" not in msg.html_body
        assert "&lt;script&gt;" in msg.html_body

    def test_missing_text_fields(self):
        msg = AlertEmailTemplate().render(Alert(id="x"), paid=False)
        assert msg.subject == "Weather Alert: Weather Event (Unknown)"
        assert "your area" in msg.text_body


class TestReliefEmail:
    """구호금 안내 메일 테스트"""

    def test_compose(self):
        msg = compose_relief_email("Jane", "Flood", 250, "Hammond, LA")

        assert msg.subject == "Emergency Relief Payment Received - Flood"
        assert "Dear Jane" in msg.html_body
        assert "$250" in msg.html_body
        assert "Hammond, LA" in msg.text_body

    def test_default_location(self):
        assert "your area" in compose_relief_email("Jane", "Flood", 50).text_body


def test_format_recipient():
    user = User(id="u1", email="jane.doe@example.com", zip="70401")
    assert format_recipient(user) == "jane.doe <jane.doe@example.com>"
    assert format_recipient(user.model_copy(update={"name": "Jane"})) == "Jane <jane.doe@example.com>"

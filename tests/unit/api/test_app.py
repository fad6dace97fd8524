"""
HTTP API 단위 테스트

FastAPI TestClient로 엔드포인트의 응답 형식과 오류 변환을 테스트합니다.
"""

import pytest
from fastapi.testclient import TestClient
from relief.api.app import create_app
from relief.core.errors import FeedError


@pytest.fixture
def client(sample_settings, services):
    """lifespan에서 스키마를 초기화하는 테스트 클라이언트"""
    app = create_app(sample_settings, services)
    with TestClient(app) as c:
        yield c


def _register(client, user_id, zip_code="70401", **extra):
    body = {"id": user_id, "email": f"{user_id}@example.com", "name": user_id.capitalize(), "zip": zip_code}
    body.update(extra)
    response = client.post("/admin/users", json=body)
    assert response.status_code == 200
    return response.json()


class TestOperationalEndpoints:
    """운영 엔드포인트 테스트"""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["service"] == "test-service"

    def test_ready(self, client):
        response = client.get("/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"
        assert response.json()["mail_configured"] is True

    def test_metrics(self, client):
        response = client.get("/metrics")

        assert response.status_code == 200
        assert "# HELP" in response.text
        assert "notifications_total" in response.text

    def test_metrics_disabled(self, sample_settings, services):
        sample_settings.observability.metrics_enabled = False
        with TestClient(create_app(sample_settings, services)) as c:
            assert c.get("/metrics").status_code == 503

    def test_info_and_root(self, client):
        info = client.get("/info").json()
        root = client.get("/").json()

        assert info["version"] == "1.0.0"
        assert info["uptime_seconds"] >= 0
        assert root["endpoints"]["simulate"] == "/simulate"


class TestIngestionEndpoint:
    """/run-ingestion 테스트"""

    def test_processes_new_alerts(self, client, feed, mailer, make_feature):
        _register(client, "alice")
        feed.features = [make_feature("alert-1"), make_feature("alert-2", severity="Minor", area_desc="Caddo")]

        first = client.post("/run-ingestion").json()
        second = client.get("/run-ingestion").json()

        assert first["success"] is True
        assert first["processedCount"] == 2
        assert first["message"] == "Processed 2 new alerts"
        assert second["processedCount"] == 0
        assert len(mailer.sent) == 1

    def test_no_alerts(self, client):
        data = client.post("/run-ingestion").json()

        assert data["success"] is True
        assert data["message"] == "No active alerts"

    def test_feed_error_reported(self, client, feed):
        feed.error = FeedError("NOAA API returned 500: Internal Server Error", status=500)

        response = client.post("/run-ingestion")

        assert response.status_code == 200
        assert response.json()["success"] is False
        assert "NOAA API returned 500" in response.json()["error"]

    def test_missing_mail_key_reported(self, client, feed, mailer, make_feature):
        mailer._configured = False
        feed.features = [make_feature("alert-1")]

        data = client.post("/run-ingestion").json()

        assert data["success"] is False
        assert "SMTP2GO_API_KEY" in data["error"]


class TestSimulationEndpoints:
    """/simulate, /disaster 테스트"""

    def test_simulate_defaults(self, client, mailer):
        _register(client, "alice")

        data = client.get("/simulate").json()

        assert data["success"] is True
        assert data["payoutSent"] is True
        assert data["affectedZip"] == "70401"
        assert data["severity"] == "Extreme"
        assert data["usersNotified"] == 1
        assert mailer.sent[0]["subject"] == "Emergency Fund Released: Hurricane"

    def test_simulate_with_body(self, client):
        _register(client, "nola", zip_code="70112")

        data = client.post("/simulate", json={"postalCode": "70112", "severity": "Minor", "eventLabel": "Flood"}).json()

        assert data["payoutSent"] is False
        assert data["message"] == "Simulated Flood alert processed for ZIP 70112"
        assert client.get("/admin/users/nola").json()["balance"] == 0.0

    def test_simulate_query_overrides_body(self, client):
        data = client.post("/simulate?postalCode=70112", json={"postalCode": "70401"}).json()
        assert data["affectedZip"] == "70112"

    def test_disaster_requires_zip(self, client):
        response = client.post("/disaster", json={"severity": "Extreme"})

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_disaster(self, client):
        _register(client, "alice")

        data = client.post("/disaster", json={"postalCode": "70401", "severity": "Severe"}).json()

        assert data["success"] is True
        assert data["payoutSent"] is True
        assert data["message"] == "Simulated alert processed for ZIP 70401 and payout sent: true"
        assert client.get("/admin/users/alice").json()["status"] == "PAID"

    def test_invalid_json_body(self, client):
        response = client.post("/disaster", content=b"{not json", headers={"Content-Type": "application/json"})

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_list_notifiable_users(self, client):
        _register(client, "alice")
        _register(client, "bob")
        client.post("/disaster", json={"postalCode": "70401", "severity": "Minor"})
        _register(client, "carol")

        data = client.get("/list-notifiable-users", params={"zip": "70401"}).json()
        users = {u["id"]: u for u in data["users"]}

        assert data["userCount"] == 3
        assert users["alice"]["canReceiveAlert"] is False
        assert users["carol"]["canReceiveAlert"] is True
        assert users["carol"]["lastAlert"] == "Never"


class TestReliefEmailEndpoint:
    """/send-relief-email 테스트"""

    def test_send(self, client, mailer):
        data = client.post("/send-relief-email", json={
            "userEmail": "jane@example.com", "userName": "Jane",
            "catastropheType": "Flood", "amount": 100, "location": "Hammond, LA"}).json()

        assert data["success"] is True
        assert data["message"] == "Email sent to jane@example.com"
        assert len(mailer.sent) == 1

    def test_missing_fields(self, client, mailer):
        response = client.post("/send-relief-email", json={"userEmail": "jane@example.com"})

        assert response.status_code == 400
        assert mailer.sent == []


class TestAdminEndpoints:
    """/admin/* 테스트"""

    def test_config(self, client):
        _register(client, "alice", walletAddress="0xabc")

        data = client.get("/admin/config").json()

        assert data["success"] is True
        assert data["totalUsers"] == 1
        assert data["zipStats"]["70401"]["withWallet"] == 1

    def test_users_by_zip(self, client):
        _register(client, "alice")
        _register(client, "nola", zip_code="70112")

        data = client.post("/admin/users/by-zip", json={"zipCodes": ["70112"]}).json()

        assert data["count"] == 1
        assert data["users"][0]["id"] == "nola"

    def test_users_by_zip_requires_codes(self, client):
        assert client.post("/admin/users/by-zip", json={}).status_code == 400

    def test_register_invalid(self, client):
        response = client.post("/admin/users", json={"email": "nope", "zip": "70401"})
        assert response.status_code == 400

    def test_unknown_user(self, client):
        response = client.get("/admin/users/ghost")

        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_update_balance(self, client):
        _register(client, "alice")

        data = client.put("/admin/users/alice/balance", json={"balance": 75.5}).json()

        assert data["balance"] == 75.5

    @pytest.mark.parametrize("body", [{"balance": -1}, {"balance": "abc"}, {}])
    def test_update_balance_invalid(self, client, body):
        _register(client, "alice")
        assert client.put("/admin/users/alice/balance", json=body).status_code == 400

    def test_update_balance_unknown_user(self, client):
        assert client.put("/admin/users/ghost/balance", json={"balance": 5}).status_code == 404

    def test_catastrophe_lifecycle(self, client):
        _register(client, "alice")
        _register(client, "bob")

        created = client.post("/admin/catastrophes", json={
            "type": "Flood", "location": "Hammond, LA", "zipCodes": "70401", "amount": 25}).json()
        listed = client.get("/admin/catastrophes", params={"limit": 5}).json()
        analytics = client.get("/admin/analytics", params={"zip": "70401"}).json()

        assert created["success"] is True
        assert created["balanceUpdateData"]["updated"] == 2
        assert listed["count"] == 1
        assert listed["events"][0]["zip_codes"] == ["70401"]
        assert analytics["balances"]["total"] == 50.0

    def test_catastrophe_invalid(self, client):
        response = client.post("/admin/catastrophes", json={"type": "Flood", "location": "X", "zipCodes": ["70401"]})
        assert response.status_code == 400

    def test_recent_catastrophes_invalid_limit(self, client):
        assert client.get("/admin/catastrophes", params={"limit": 0}).status_code == 400

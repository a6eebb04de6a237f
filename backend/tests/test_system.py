# Overview: Pytest coverage for health, version and cross-cutting API behavior.

from backoffice.services import department_service


class TestHealth:
    def test_degraded_without_departments(self, client, db_session):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["status"] == "degraded"
        assert body["checks"]["database"]["status"] == "healthy"

    def test_healthy_after_seed(self, client, db_session):
        department_service.seed_default_departments()

        resp = client.get("/api/health")
        assert resp.get_json()["status"] == "healthy"


def test_version(client):
    body = client.get("/api/version").get_json()
    assert body["api_version"] == "1.0.0"


class TestCors:
    def test_allowed_origin_echoed(self, client, db_session):
        resp = client.get("/api/customers", headers={"Origin": "http://localhost:3000"})
        assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:3000"

    def test_unknown_origin_ignored(self, client, db_session):
        resp = client.get("/api/customers", headers={"Origin": "http://evil.test"})
        assert "Access-Control-Allow-Origin" not in resp.headers


class TestErrorHandling:
    def test_unexpected_error_is_500(self, app, client, db_session, monkeypatch):
        from backoffice.services import customer_service

        def boom(**kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(customer_service, "list_customers", boom)
        resp = client.get("/api/customers")

        assert resp.status_code == 500
        assert resp.get_json() == {"message": "Internal server error"}

"""Tests for health check routes, service, and metrics endpoint."""

from unittest.mock import patch

from sqlalchemy.exc import OperationalError
from starlette.responses import PlainTextResponse
from starlette.routing import Route

from api.middleware.metrics import route_template
from api.services.health_service import HealthService
from tests.db_utils import make_post


class TestHealthService:
    def test_check_database(self, test_session):
        assert HealthService(test_session).check_database() is True

    def test_check_database_failure(self, test_session):
        error = OperationalError("SELECT 1", {}, Exception("database is locked"))
        with patch.object(test_session, "execute", side_effect=error):
            assert HealthService(test_session).check_database() is False

    def test_status_counts(self, test_session, admin_user, other_user, facebook_page):
        make_post(test_session, admin_user)
        status = HealthService(test_session).get_status()
        assert status["status"] == "ok"
        assert status["users"] == 2
        assert status["posts"] == 1
        assert status["accounts"] == 1
        assert status["conversations"] == 0
        assert status["timestamp"].endswith("Z")


class TestHealthRoutes:
    def test_health_is_public(self, test_client, admin_user):
        response = test_client.get("/api/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["users"] == 1
        assert set(body) == {"status", "users", "posts", "accounts", "conversations", "timestamp"}

    def test_ready(self, test_client):
        response = test_client.get("/api/health/ready")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "database": True}

    def test_ready_reports_503(self, test_client):
        with patch.object(HealthService, "check_database", return_value=False):
            response = test_client.get("/api/health/ready")
        assert response.status_code == 503
        assert response.json()["error"]["code"] == "SERVICE_UNAVAILABLE"

    def test_metrics_endpoint(self, test_client):
        test_client.get("/api/health")
        response = test_client.get("/metrics")
        assert response.status_code == 200
        assert "postboard_http_requests_total" in response.text
        assert 'route="/api/health"' in response.text

    def test_request_id_header(self, test_client):
        response = test_client.get("/api/health", headers={"X-Request-ID": "abc123"})
        assert response.headers["x-request-id"] == "abc123"


class PathlessRoute:
    """Router entry with no ``path`` of its own, like an included sub-router."""

    def matches(self, scope):
        raise AssertionError("pathless routes are not matched")


def endpoint(request):
    return PlainTextResponse("ok")


class TestRouteTemplate:
    def scope(self, path):
        return {"type": "http", "method": "GET", "path": path, "root_path": ""}

    def test_reports_pattern_not_raw_path(self):
        routes = [Route("/api/posts/{post_id}", endpoint)]
        assert route_template(routes, self.scope("/api/posts/abc")) == "/api/posts/{post_id}"

    def test_skips_entries_without_a_path(self):
        routes = [PathlessRoute(), Route("/api/health", endpoint)]
        assert route_template(routes, self.scope("/api/health")) == "/api/health"

    def test_unmatched(self):
        assert route_template([PathlessRoute()], self.scope("/nowhere")) == "unmatched"

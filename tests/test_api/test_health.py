"""
Tests for Health Endpoints
"""

import pytest
from fastapi import status
from fastapi.testclient import TestClient


class TestHealth:

    @pytest.mark.api
    def test_root(self, client: TestClient):
        response = client.get("/")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "healthy"

    @pytest.mark.api
    def test_health_reports_notification_session(self, client: TestClient):
        data = client.get("/health").json()

        assert data["checks"]["notifications"]["initialized"] is True
        assert data["checks"]["notifications"]["permissions_granted"] is True
        assert data["config"]["on_time_window_minutes"] == 10

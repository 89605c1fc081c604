"""
Tests for Adherence API
========================

Tests the signed-in user's adherence statistics endpoint.
"""

import pytest
from datetime import date
from fastapi import status
from fastapi.testclient import TestClient


class TestAdherenceStats:
    """Tests for GET /adherence/stats"""

    @pytest.mark.api
    def test_requires_sign_in(self, client: TestClient):
        response = client.get("/api/v1/adherence/stats")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.api
    def test_empty(self, client: TestClient, auth_headers):
        response = client.get("/api/v1/adherence/stats", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total"] == 0
        assert data["adherence_rate"] == 0
        assert data["day"] == date.today().isoformat()

    @pytest.mark.api
    def test_for_day(self, client: TestClient, auth_headers, test_dose_log):
        response = client.get("/api/v1/adherence/stats", params={"day": "2024-03-01"}, headers=auth_headers)

        data = response.json()
        assert data == {
            "total": 3,
            "taken": 1,
            "on_time": 0,
            "late": 1,
            "early": 0,
            "missed": 2,
            "adherence_rate": 33,
            "day": "2024-03-01"
        }

    @pytest.mark.api
    def test_other_day_excludes_log(self, client: TestClient, auth_headers, test_dose_log):
        response = client.get("/api/v1/adherence/stats", params={"day": "2024-03-02"}, headers=auth_headers)

        assert response.json()["taken"] == 0
        assert response.json()["missed"] == 3

    @pytest.mark.api
    def test_all_history(self, client: TestClient, auth_headers, test_dose_log):
        response = client.get("/api/v1/adherence/stats", params={"all_history": True}, headers=auth_headers)

        data = response.json()
        assert data["day"] is None
        assert data["taken"] == 1

    @pytest.mark.api
    def test_invalid_day(self, client: TestClient, auth_headers):
        response = client.get("/api/v1/adherence/stats", params={"day": "yesterday"}, headers=auth_headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

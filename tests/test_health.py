"""
tests/test_health.py -- Integration tests for GET /api/health.

Covers:
  - 200 response with status, version, and database fields
  - No authentication required
"""

from __future__ import annotations

from unittest.mock import patch

from sqlalchemy.exc import OperationalError


def test_health_returns_200(server):
    resp = server.client.get("/api/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert "version" in data
    assert data["database"] == "ok"


def test_health_no_auth_required(server):
    resp = server.client.get("/api/health", headers={})
    assert resp.status_code == 200


def test_health_reports_database_error(server):
    """A store that cannot answer is reported, not raised."""
    with patch.object(server.user_store, "ping", side_effect=OperationalError("SELECT 1", {}, Exception("down"))):
        resp = server.client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["database"] == "error"

"""
API Tests
HTTP surface of skill tree sessions.

Run with: python -m pytest tests/test_api.py -v
"""

import pytest
import sys
import os

from fastapi.testclient import TestClient

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from api.main import app
from api.routers.skills import skill_tree_service
from skilltree.config import LayoutConfig

from tests.test_taxonomy import make_taxonomy


@pytest.fixture
def client():
    """Test client with a time-independent layout"""
    skill_tree_service.layout_config = LayoutConfig(cooldown_time_ms=None)
    skill_tree_service.frame_interval = 0
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def session_id(client):
    """Session over the two-domain taxonomy"""
    response = client.post("/api/skills/sessions", json={
        "width": 800,
        "height": 600,
        "taxonomy": make_taxonomy(),
    })
    assert response.status_code == 200
    return response.json()["session_id"]


class TestHealth:
    """Tests for service endpoints"""

    def test_root(self, client):
        """Root reports the service"""
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_health(self, client):
        response = client.get("/health")
        assert response.json() == {"status": "healthy"}


class TestSessions:
    """Tests for session creation and state"""

    def test_create_default(self, client):
        """Default session uses the built-in taxonomy and opens its first domain"""
        response = client.post("/api/skills/sessions", json={})
        data = response.json()
        assert response.status_code == 200
        assert data["unlocked_ids"] == ["1_First_Programs"]
        assert [n["id"] for n in data["nodes"]] == ["root", "1_First_Programs"]
        assert data["layout"]["state"] == "running"

    def test_create_with_progress(self, client):
        """Saved progress is restored"""
        response = client.post("/api/skills/sessions", json={
            "taxonomy": make_taxonomy(),
            "unlocked_ids": ["D1", "D1_module_0"],
        })
        data = response.json()
        assert data["unlocked_ids"] == ["D1", "D1_module_0"]
        assert len(data["links"]) == 2
        assert set(data["layout"]["positions"]) == {"root", "D1", "D1_module_0"}

    def test_invalid_dimensions(self, client):
        """Non-positive canvas sizes fail validation"""
        response = client.post("/api/skills/sessions", json={"width": 0})
        assert response.status_code == 422

    def test_get_session(self, client, session_id):
        response = client.get(f"/api/skills/sessions/{session_id}")
        assert response.status_code == 200
        assert response.json()["session_id"] == session_id

    def test_unknown_session(self, client):
        """Unknown sessions are 404 everywhere"""
        assert client.get("/api/skills/sessions/nope").status_code == 404
        assert client.post("/api/skills/sessions/nope/tick", json={}).status_code == 404
        assert client.post("/api/skills/sessions/nope/activate", json={"node_id": "D1"}).status_code == 404
        assert client.get("/api/skills/sessions/nope/overlaps").status_code == 404

    def test_close_session(self, client, session_id):
        assert client.delete(f"/api/skills/sessions/{session_id}").status_code == 200
        assert client.get(f"/api/skills/sessions/{session_id}").status_code == 404


class TestInteractions:
    """Tests for hover, activation, resize and ticking"""

    def test_activate(self, client, session_id):
        """Unlockable nodes unlock and restart the layout"""
        response = client.post(f"/api/skills/sessions/{session_id}/activate", json={"node_id": "D1_module_0"})
        data = response.json()
        assert data["changed"] is True
        assert data["layout_restarted"] is True
        assert "D1_module_0" in data["unlocked_ids"]

    def test_activate_locked(self, client, session_id):
        """Locked nodes are a no-op"""
        response = client.post(f"/api/skills/sessions/{session_id}/activate", json={"node_id": "D2_module_0"})
        data = response.json()
        assert data["changed"] is False
        assert data["layout_restarted"] is False

    def test_activate_unknown_node(self, client, session_id):
        response = client.post(f"/api/skills/sessions/{session_id}/activate", json={"node_id": "ghost"})
        assert response.status_code == 404

    def test_hover(self, client, session_id):
        """Hover returns the tooltip of a visible node"""
        response = client.post(f"/api/skills/sessions/{session_id}/hover", json={"node_id": "D1"})
        data = response.json()
        assert data["hovered_id"] == "D1"
        assert data["tooltip"]["name"] == "Domain 1"

        response = client.post(f"/api/skills/sessions/{session_id}/hover", json={"node_id": None})
        assert response.json()["tooltip"] is None

    def test_resize(self, client, session_id):
        """Resize restarts the layout from tick zero"""
        client.post(f"/api/skills/sessions/{session_id}/tick", json={"ticks": 5})
        response = client.post(f"/api/skills/sessions/{session_id}/resize", json={"width": 400, "height": 300})
        data = response.json()
        assert data["width"] == 400
        assert data["layout"]["tick"] == 0

    def test_tick(self, client, session_id):
        response = client.post(f"/api/skills/sessions/{session_id}/tick", json={"ticks": 3})
        assert response.json()["tick"] == 3

    def test_settle_and_overlaps(self, client, session_id):
        """Settling runs to cooldown and the diagnostic reports on the final layout"""
        response = client.post(f"/api/skills/sessions/{session_id}/settle")
        assert response.json()["settled"] is True

        report = client.get(f"/api/skills/sessions/{session_id}/overlaps").json()
        assert report["settled"] is True
        assert report["count"] == len(report["overlaps"])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

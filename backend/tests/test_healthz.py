"""
Test health and root endpoints.
"""


def test_health_check(test_client):
    """Test health check reports the loaded palette."""
    response = test_client.get("/healthz")

    assert response.status_code == 200
    data = response.json()

    assert data["ok"] is True
    assert data["service"] == "dyematch"
    assert data["dyes_loaded"] == 11
    assert "version" in data


def test_root(test_client):
    """Test root endpoint lists the API."""
    data = test_client.get("/").json()
    assert data["endpoints"]["match"] == "/v1/match"

"""Basic health check tests."""

from fastapi.testclient import TestClient


def test_import_verdant():
    """Test that verdant package can be imported."""
    import verdant
    assert verdant.__version__ == "1.0.0"


def test_import_care():
    """Test that the care pipeline can be imported and runs end to end in memory."""
    from datetime import datetime

    from verdant.care import build_care_schedule, parse_care_plan

    tasks, source = build_care_schedule(parse_care_plan(None), datetime(2024, 1, 15, 9, 0))
    assert len(tasks) == 3
    assert source.value == "fallback"


def test_health_endpoint():
    from verdant.web.app import app

    response = TestClient(app).get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"

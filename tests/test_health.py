"""Smoke tests for application wiring."""

from rugestimate.config import Settings, get_settings


def test_settings_env_override(monkeypatch) -> None:
    """RUGESTIMATE_-prefixed environment variables override defaults."""
    monkeypatch.setenv("RUGESTIMATE_MAX_SESSIONS", "5")
    monkeypatch.setenv("RUGESTIMATE_SESSION_TTL_SECONDS", "30")
    settings = Settings()
    assert settings.max_sessions == 5
    assert settings.session_ttl_seconds == 30.0


def test_get_settings_is_cached() -> None:
    assert get_settings() is get_settings()


async def test_health_endpoint(app_client) -> None:
    """GET /health returns status ok."""
    response = await app_client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}

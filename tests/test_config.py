"""Tests for client configuration."""

from rcon_plus.config import ClientConfiguration


def test_defaults():
    """Test the default configuration values."""
    config = ClientConfiguration.DEFAULT

    assert config.host == "127.0.0.1"
    assert config.port == 25575
    assert config.password == ""
    assert config.timeout_seconds == 3
    assert config.retry_connect is True
    assert config.reconnect_delay_seconds == 5
    assert config.max_recon_attempts == 5
    assert config.server_is_multithreaded is False


def test_from_env(monkeypatch):
    """Test that environment variables override the defaults."""
    monkeypatch.setenv("RCON_HOST", "mc.example.org")
    monkeypatch.setenv("RCON_PORT", "25580")
    monkeypatch.setenv("RCON_PASSWORD", "secret")
    monkeypatch.setenv("RCON_TIMEOUT", "0")
    monkeypatch.setenv("RCON_RETRY", "false")
    monkeypatch.setenv("RCON_RECONNECT_DELAY", "2.5")
    monkeypatch.setenv("RCON_MAX_RECONNECT_ATTEMPTS", "3")
    monkeypatch.setenv("RCON_MULTITHREADED", "yes")

    config = ClientConfiguration.from_env()

    assert config == ClientConfiguration(
        host="mc.example.org",
        port=25580,
        password="secret",
        timeout_seconds=0,
        retry_connect=False,
        reconnect_delay_seconds=2.5,
        max_recon_attempts=3,
        server_is_multithreaded=True,
    )


def test_from_env_without_variables(monkeypatch):
    """Test that an empty environment yields the defaults."""
    for name in (
        "RCON_HOST",
        "RCON_PORT",
        "RCON_PASSWORD",
        "RCON_TIMEOUT",
        "RCON_RETRY",
        "RCON_RECONNECT_DELAY",
        "RCON_MAX_RECONNECT_ATTEMPTS",
        "RCON_MULTITHREADED",
    ):
        monkeypatch.delenv(name, raising=False)

    assert ClientConfiguration.from_env() == ClientConfiguration()


def test_validate():
    """Test configuration validation messages."""
    assert ClientConfiguration().validate() == (True, "Configuration is valid")

    is_valid, message = ClientConfiguration(host="").validate()
    assert not is_valid
    assert "RCON_HOST" in message

    assert not ClientConfiguration(port=70000).validate()[0]
    assert not ClientConfiguration(reconnect_delay_seconds=-1).validate()[0]
    assert not ClientConfiguration(max_recon_attempts=-1).validate()[0]

"""
Tests for configuration management.
"""

import pytest
from pathlib import Path
from shared.config import Settings, ConfigError


def test_settings_loads_valid_env(tmp_path, monkeypatch):
    """Test that settings load correctly from an env file."""
    env_vars = {
        "ENVIRONMENT": "test",
        "LOG_LEVEL": "DEBUG",
        "OUTPUT_DIR": "renders",
        "SMALLEST_API_KEY": "sk_test_1234567890",
        "TTS_SAMPLE_RATE": "16000",
        "FFMPEG_BIN": "/usr/local/bin/ffmpeg",
    }
    for key in env_vars:
        monkeypatch.delenv(key, raising=False)

    env_file = tmp_path / ".env"
    env_file.write_text("\n".join(f"{k}={v}" for k, v in env_vars.items()))

    settings = Settings(_env_file=str(env_file))

    assert settings.environment == "test"
    assert settings.log_level == "DEBUG"
    assert settings.output_dir == Path("renders")
    assert settings.smallest_api_key == "sk_test_1234567890"
    assert settings.tts_sample_rate == 16000
    assert settings.ffmpeg_bin == "/usr/local/bin/ffmpeg"
    assert settings.speech_enabled is True


def test_settings_defaults(monkeypatch):
    """Test defaults when nothing is configured."""
    for key in ("SMALLEST_API_KEY", "TTS_BASE_URL", "TTS_SAMPLE_RATE", "TTS_SPEED"):
        monkeypatch.delenv(key, raising=False)

    settings = Settings(_env_file=None)

    assert settings.smallest_api_key is None
    assert settings.speech_enabled is False
    assert settings.tts_base_url == "https://waves-api.smallest.ai/api/v1"
    assert settings.tts_sample_rate == 24000
    assert settings.tts_speed == 1.0


def test_settings_validates_tts_base_url(monkeypatch):
    """Test that an invalid speech API URL raises ConfigError."""
    monkeypatch.setenv("TTS_BASE_URL", "invalid-url")

    with pytest.raises(ConfigError, match="TTS_BASE_URL must be a valid HTTP/HTTPS URL"):
        Settings(_env_file=None)


def test_settings_strips_trailing_slash(monkeypatch):
    """Test that the speech API URL is normalized."""
    monkeypatch.setenv("TTS_BASE_URL", "https://tts.example.com/api/v1/")

    settings = Settings(_env_file=None)

    assert settings.tts_base_url == "https://tts.example.com/api/v1"


def test_settings_validates_sample_rate(monkeypatch):
    """Test that a non-positive sample rate raises ConfigError."""
    monkeypatch.setenv("TTS_SAMPLE_RATE", "0")

    with pytest.raises(ConfigError, match="TTS_SAMPLE_RATE must be positive"):
        Settings(_env_file=None)


def test_empty_api_key_disables_speech(monkeypatch):
    """Test that an empty API key counts as not configured."""
    monkeypatch.setenv("SMALLEST_API_KEY", "   ")

    settings = Settings(_env_file=None)

    assert settings.smallest_api_key is None
    assert settings.speech_enabled is False

"""
Tests for settings defaults and validation.
"""

import os

import pytest

from portfolio_backend.config import Settings


@pytest.mark.skipif("ENVIRONMENT" in os.environ, reason="ENVIRONMENT is set by the caller")
def test_environment_defaults_to_production():
    """Error details stay hidden unless development mode is asked for."""
    settings = Settings()

    assert settings.environment == "production"
    assert settings.is_development is False


def test_development_mode_is_opt_in():
    assert Settings(environment="Development").is_development is True


def test_invalid_timeout_is_rejected():
    with pytest.raises(ValueError):
        Settings(chat_request_timeout=0)

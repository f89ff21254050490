"""Tests for application configuration."""

import pytest
from hypothesis import given, strategies as st
from pydantic import ValidationError
from unittest.mock import patch

from fb_callbacks.config import Settings, get_settings


class TestSettings:
    """Test Settings model validation."""

    def test_settings_default_values(self):
        """Test that default values are set correctly when not overridden."""
        with patch.dict("os.environ", {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.facebook_app_id is None
        assert settings.facebook_app_secret is None
        assert settings.deauth_path_prefix == "fb_login_deauth_callback"
        assert settings.webhook_path_prefix == "fb_webhooks"
        assert settings.max_body_bytes == 32 * 1024
        assert settings.auth_failure_status == 500
        assert settings.env == "local"

    def test_settings_with_all_fields(self, test_settings, app_id):
        assert test_settings.facebook_app_id == app_id
        assert test_settings.facebook_app_secret == "key"
        assert test_settings.facebook_verify_token == "meatyhamhock"

    @pytest.mark.parametrize("status", [400, 401, 403, 500])
    def test_auth_failure_status_choices(self, status: int):
        settings = Settings(_env_file=None, auth_failure_status=status)
        assert settings.auth_failure_status == status

    @pytest.mark.parametrize("status", [200, 404, 502])
    def test_auth_failure_status_rejected(self, status: int):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, auth_failure_status=status)

    def test_path_prefix_slashes_stripped(self):
        settings = Settings(_env_file=None, webhook_path_prefix="/hooks/")
        assert settings.webhook_path_prefix == "hooks"

    def test_empty_path_prefix_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, deauth_path_prefix="/")

    def test_equal_path_prefixes_rejected(self):
        """Test prefixes that only differ by slashes still collide."""
        with pytest.raises(ValidationError, match="must differ"):
            Settings(_env_file=None, deauth_path_prefix="hooks", webhook_path_prefix="/hooks/")

    @given(env=st.sampled_from(["local", "railway", "prod"]))
    def test_settings_env_properties(self, env: str):
        """Property: Settings should accept every known environment."""
        assert Settings(_env_file=None, env=env).env == env

    def test_settings_env_validation(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, env="invalid")


class TestGetSettings:
    """Test get_settings() function."""

    def test_get_settings_caching(self):
        """Test that get_settings() returns cached instance."""
        get_settings.cache_clear()

        settings1 = get_settings()
        settings2 = get_settings()

        assert settings1 is settings2
        get_settings.cache_clear()

    @patch.dict(
        "os.environ",
        {
            "FACEBOOK_APP_ID": "202000000000000",
            "FACEBOOK_APP_SECRET": "env-secret",
            "auth_failure_status": "401",
        },
    )
    def test_get_settings_from_env(self):
        """Test that get_settings() loads (case-insensitive) environment variables."""
        get_settings.cache_clear()

        settings = get_settings()

        assert settings.facebook_app_id == 202000000000000
        assert settings.facebook_app_secret == "env-secret"
        assert settings.auth_failure_status == 401
        get_settings.cache_clear()

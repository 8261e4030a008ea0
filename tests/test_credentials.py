"""Tests for the static credential provider."""

import pytest

from s3_probe.core.exceptions import ConfigError
from s3_probe.objectstorage.credentials import Credentials, StaticCredentialProvider


class TestStaticCredentialProvider:
    """Test static credential handling."""

    def test_get_returns_credentials(self):
        """Test configured credentials are returned unchanged."""
        provider = StaticCredentialProvider("key123", "secret456", "token789")
        credentials = provider.get()

        assert credentials == Credentials("key123", "secret456", "token789")

    def test_empty_session_token_is_none(self):
        """Test an empty session token is treated as absent."""
        credentials = StaticCredentialProvider("key123", "secret456", "").get()
        assert credentials.session_token is None

    @pytest.mark.parametrize(
        "access_key_id, secret_access_key, missing",
        [
            (None, "secret", "access_key_id"),
            ("key", None, "secret_access_key"),
            ("  ", "secret", "access_key_id"),
            (None, "", "access_key_id, secret_access_key"),
        ],
    )
    def test_missing_fields_raise_config_error(
        self, access_key_id, secret_access_key, missing
    ):
        """Test absent credentials are a configuration error."""
        provider = StaticCredentialProvider(access_key_id, secret_access_key)

        with pytest.raises(ConfigError, match=f"Missing credentials: {missing}"):
            provider.get()

    def test_repr_hides_secrets(self):
        """Test secrets never appear in representations."""
        provider = StaticCredentialProvider("key123", "secret456", "token789")

        assert "secret456" not in repr(provider)
        assert "secret456" not in repr(provider.get())
        assert "token789" not in repr(provider.get())
        assert "key123" in repr(provider.get())

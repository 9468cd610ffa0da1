# tests/test_credentials.py
import json

import pytest

from app.integrations.credentials import (
    RefreshTokenCredential,
    ServiceAccountCredential,
    build_credential_provider,
)

OAUTH = {
    "gdrive_client_id": "client-id",
    "gdrive_client_secret": "secret",
    "gdrive_refresh_token": "refresh",
}
SERVICE_ACCOUNT_INFO = {"type": "service_account", "client_email": "bot@example.iam.gserviceaccount.com"}


class TestBuildCredentialProvider:

    def test_no_credentials(self, make_settings):
        assert build_credential_provider(make_settings()) is None

    def test_auto_uses_refresh_token(self, make_settings):
        provider = build_credential_provider(make_settings(**OAUTH))

        assert isinstance(provider, RefreshTokenCredential)
        assert provider.refresh_token == "refresh"

    def test_auto_prefers_service_account(self, make_settings):
        settings = make_settings(gdrive_service_account_json=json.dumps(SERVICE_ACCOUNT_INFO), **OAUTH)

        provider = build_credential_provider(settings)

        assert isinstance(provider, ServiceAccountCredential)
        assert provider.credentials_info == SERVICE_ACCOUNT_INFO

    def test_oauth_mode_ignores_service_account(self, make_settings):
        settings = make_settings(
            gdrive_auth_mode="oauth",
            gdrive_service_account_file="credentials.json",
            **OAUTH,
        )

        assert isinstance(build_credential_provider(settings), RefreshTokenCredential)

    def test_service_account_mode_without_key(self, make_settings):
        settings = make_settings(gdrive_auth_mode="service_account", **OAUTH)

        assert build_credential_provider(settings) is None

    def test_partial_oauth_is_not_enough(self, make_settings):
        settings = make_settings(gdrive_client_id="client-id", gdrive_refresh_token="refresh")

        assert build_credential_provider(settings) is None


class TestProviders:

    def test_refresh_token_credentials(self):
        creds = RefreshTokenCredential("client-id", "secret", "refresh").get_credentials()

        assert creds.refresh_token == "refresh"
        assert creds.client_id == "client-id"
        assert creds.token is None

    def test_refresh_token_requires_all_parts(self):
        with pytest.raises(ValueError):
            RefreshTokenCredential("client-id", "", "refresh")

    def test_service_account_requires_source(self):
        with pytest.raises(ValueError):
            ServiceAccountCredential()

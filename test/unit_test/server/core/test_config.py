"""Unit tests for settings and grouped configuration views."""

from bizboard.server.core.config import Settings


def make_settings(**env) -> Settings:
    return Settings(_env_file=None, **env)


class TestSettingsDefaults:
    def test_defaults(self, monkeypatch):
        for name in ("DATABASE_URL", "STORAGE_ROOT", "LOGFIRE_ENABLED"):
            monkeypatch.delenv(name, raising=False)

        settings = make_settings()

        assert settings.database_url.startswith("postgresql+asyncpg://")
        assert settings.default_vat_rate == 0.18
        assert settings.storage.root == "storage"
        assert settings.storage.avatar_max_bytes == 2 * 1024 * 1024
        assert settings.finance.payments_page_size == 20
        assert settings.realtime.disabled is False
        assert settings.cors.origins == ["*"]


class TestGroupedViews:
    def test_aliases_populate_groups(self):
        settings = make_settings(
            STORAGE_ROOT="/data/files",
            SESSION_TTL_HOURS=2,
            PAYMENTS_PAGE_SIZE=5,
            COMMITMENT_MIN_INSTALLMENTS=6,
            REALTIME_DISABLED=True,
            REALTIME_QUEUE_SIZE=10,
        )

        assert settings.storage.root == "/data/files"
        assert settings.auth.session_ttl_hours == 2
        assert settings.finance.payments_page_size == 5
        assert settings.finance.commitment_min_installments == 6
        assert settings.realtime.disabled is True
        assert settings.realtime.queue_size == 10

    def test_environment_variables(self, monkeypatch):
        monkeypatch.setenv("AUTH_COOKIE_NAME", "sid")
        monkeypatch.setenv("DEFAULT_VAT_RATE", "0.17")

        settings = make_settings()

        assert settings.auth.cookie_name == "sid"
        assert settings.finance.default_vat_rate == 0.17

"""Tests for Config, command-line overrides and logging setup"""

import logging

import pytest
from conftest import TEST_DOMAIN, TEST_TOKEN

from shopify_mcp.config import Config, load_config, setup_logging
from shopify_mcp.exceptions import ConfigError
from shopify_mcp.models import ClientCredentials, StaticToken


class TestConfig:
    """Test Config defaults, validation and derived values"""

    def test_defaults(self, clean_env):
        config = Config(MYSHOPIFY_DOMAIN=TEST_DOMAIN, SHOPIFY_ACCESS_TOKEN=TEST_TOKEN)

        assert config.api_version == "2026-01"
        assert config.timeout_ms == 30000
        assert config.timeout_seconds == 30.0
        assert config.retry_attempts == 3
        assert config.ssl_verify is True
        assert config.tool_package == "full"
        assert config.log_level == "INFO"
        assert config.debug_mode is False

    def test_urls(self, config):
        assert config.graphql_url == (
            f"https://{TEST_DOMAIN}/admin/api/2026-01/graphql.json"
        )
        assert config.token_url == f"https://{TEST_DOMAIN}/admin/oauth/access_token"

    @pytest.mark.parametrize(
        "raw_domain",
        [
            "test-store.myshopify.com",
            "https://test-store.myshopify.com",
            "https://test-store.myshopify.com/",
            "  http://test-store.myshopify.com/ ",
        ],
    )
    def test_domain_normalized(self, clean_env, raw_domain):
        config = Config(MYSHOPIFY_DOMAIN=raw_domain, SHOPIFY_ACCESS_TOKEN=TEST_TOKEN)
        assert config.shop_domain == TEST_DOMAIN

    def test_reads_environment(self, clean_env, monkeypatch):
        monkeypatch.setenv("MYSHOPIFY_DOMAIN", TEST_DOMAIN)
        monkeypatch.setenv("SHOPIFY_ACCESS_TOKEN", TEST_TOKEN)
        monkeypatch.setenv("RETRY_ATTEMPTS", "5")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        config = Config()

        assert config.retry_attempts == 5
        assert config.log_level == "DEBUG"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"TIMEOUT": 0},
            {"RETRY_ATTEMPTS": 11},
            {"RETRY_ATTEMPTS": -1},
            {"SHOPIFY_API_VERSION": "latest"},
            {"LOG_LEVEL": "LOUD"},
        ],
    )
    def test_invalid_values_rejected(self, clean_env, overrides):
        with pytest.raises(ValueError):
            Config(MYSHOPIFY_DOMAIN=TEST_DOMAIN, SHOPIFY_ACCESS_TOKEN=TEST_TOKEN, **overrides)

    def test_config_is_immutable(self, config):
        with pytest.raises(ValueError):
            config.retry_attempts = 7


class TestCredential:
    """Test credential selection"""

    def test_static_token(self, config):
        credential = config.credential()
        assert isinstance(credential, StaticToken)
        assert credential.access_token.get_secret_value() == TEST_TOKEN

    def test_client_credentials(self, client_credentials_config):
        credential = client_credentials_config.credential()
        assert isinstance(credential, ClientCredentials)
        assert credential.client_id == "client-id"
        assert credential.shop_domain == TEST_DOMAIN

    def test_static_token_takes_precedence(self, clean_env):
        config = Config(
            MYSHOPIFY_DOMAIN=TEST_DOMAIN,
            SHOPIFY_ACCESS_TOKEN=TEST_TOKEN,
            SHOPIFY_CLIENT_ID="client-id",
            SHOPIFY_CLIENT_SECRET="client-secret-value",
        )
        assert isinstance(config.credential(), StaticToken)

    def test_missing_credentials(self, clean_env):
        config = Config(MYSHOPIFY_DOMAIN=TEST_DOMAIN)

        with pytest.raises(ConfigError) as exc_info:
            config.credential()

        assert "No Shopify credentials" in exc_info.value.message
        assert exc_info.value.suggestions

    def test_client_id_without_secret(self, clean_env):
        config = Config(MYSHOPIFY_DOMAIN=TEST_DOMAIN, SHOPIFY_CLIENT_ID="client-id")

        with pytest.raises(ConfigError) as exc_info:
            config.credential()

        assert exc_info.value.errors == ["Missing setting: SHOPIFY_CLIENT_SECRET"]


class TestMaskedSummary:
    """Test that secrets never appear in loggable settings"""

    def test_token_masked(self, config):
        summary = config.masked_summary()

        assert summary["access_token"] == "shpa" + "*" * (len(TEST_TOKEN) - 8) + "cdef"
        assert TEST_TOKEN not in str(summary)
        assert TEST_TOKEN not in repr(config)

    def test_client_secret_masked(self, client_credentials_config):
        summary = client_credentials_config.masked_summary()

        assert "client-secret-value" not in str(summary)
        assert summary["client_id"] == "client-id"
        assert summary["access_token"] is None


class TestLoadConfig:
    """Test command-line flags layered over environment and defaults"""

    def test_flags(self, clean_env):
        config = load_config(
            [
                "--domain",
                "https://flags.myshopify.com/",
                "--accessToken",
                TEST_TOKEN,
                "--apiVersion",
                "2025-10",
                "--timeout",
                "5000",
                "--retryAttempts",
                "1",
                "--toolPackage",
                "basic",
                "--logLevel",
                "warning",
                "--no-sslVerify",
                "--debug",
            ]
        )

        assert config.shop_domain == "flags.myshopify.com"
        assert config.api_version == "2025-10"
        assert config.timeout_ms == 5000
        assert config.retry_attempts == 1
        assert config.tool_package == "basic"
        assert config.log_level == "WARNING"
        assert config.ssl_verify is False
        assert config.debug_mode is True

    def test_flag_overrides_environment(self, clean_env, monkeypatch):
        monkeypatch.setenv("MYSHOPIFY_DOMAIN", TEST_DOMAIN)
        monkeypatch.setenv("SHOPIFY_ACCESS_TOKEN", TEST_TOKEN)
        monkeypatch.setenv("TIMEOUT", "1000")
        monkeypatch.setenv("MCP_TOOL_PACKAGE", "basic")

        config = load_config(["--timeout", "5000"])

        assert config.timeout_ms == 5000
        assert config.tool_package == "basic"

    def test_token_alias_flag(self, clean_env):
        config = load_config(["--domain", TEST_DOMAIN, "--token", TEST_TOKEN])
        assert config.access_token.get_secret_value() == TEST_TOKEN

    def test_missing_credentials_fail_fast(self, clean_env):
        with pytest.raises(ConfigError, match="No Shopify credentials"):
            load_config(["--domain", TEST_DOMAIN])

    def test_missing_domain(self, clean_env):
        with pytest.raises(ConfigError) as exc_info:
            load_config(["--accessToken", TEST_TOKEN])

        assert exc_info.value.message == "Configuration validation failed"
        assert any("MYSHOPIFY_DOMAIN" in error for error in exc_info.value.errors)

    def test_invalid_number(self, clean_env):
        with pytest.raises(ConfigError) as exc_info:
            load_config(
                ["--domain", TEST_DOMAIN, "--accessToken", TEST_TOKEN, "--retryAttempts", "11"]
            )

        assert exc_info.value.errors


class TestSetupLogging:
    """Test logging configuration"""

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_sets_level_and_quiets_httpx(self):
        logger = setup_logging("debug")

        assert logger.name == "shopify-mcp"
        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING

"""Tests for ClientConfig and environment loading."""

from __future__ import annotations

import pytest

from scix_client.shared.config import DEFAULT_BASE_URL, ClientConfig, validate_base_url
from scix_client.shared.exceptions import ConfigurationError

_ENV = ("SCIX_API_TOKEN", "ADS_API_TOKEN", "SCIX_API_URL", "SCIX_RATE_LIMIT", "SCIX_TIMEOUT")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV:
        monkeypatch.delenv(name, raising=False)


class TestClientConfig:
    def test_defaults(self):
        config = ClientConfig()
        assert config.token is None
        assert not config.has_token
        assert config.base_url == DEFAULT_BASE_URL
        assert config.rate_limit == 5.0
        assert config.timeout == 30.0

    def test_blank_token_is_none(self):
        assert ClientConfig(token="   ").token is None

    def test_trailing_slash_stripped(self):
        assert ClientConfig(base_url="https://api.test/v1/").base_url == "https://api.test/v1"

    @pytest.mark.parametrize("kwargs", [{"rate_limit": 0}, {"rate_limit": -1}, {"timeout": 0}])
    def test_non_positive_rejected(self, kwargs):
        with pytest.raises(ConfigurationError):
            ClientConfig(**kwargs)

    def test_frozen(self):
        config = ClientConfig()
        with pytest.raises(AttributeError):
            config.token = "x"


class TestValidateBaseUrl:
    @pytest.mark.parametrize("url", ["ftp://api.test/v1", "/v1/search", "not a url", ""])
    def test_rejected(self, url):
        with pytest.raises(ConfigurationError):
            validate_base_url(url)

    def test_accepted(self):
        assert validate_base_url("http://localhost:8080/v1") == "http://localhost:8080/v1"


class TestFromEnv:
    def test_scix_token_preferred(self, monkeypatch):
        monkeypatch.setenv("SCIX_API_TOKEN", "scix")
        monkeypatch.setenv("ADS_API_TOKEN", "ads")
        assert ClientConfig.from_env().token == "scix"

    def test_ads_token_fallback(self, monkeypatch):
        monkeypatch.setenv("SCIX_API_TOKEN", "")
        monkeypatch.setenv("ADS_API_TOKEN", "ads")
        assert ClientConfig.from_env().token == "ads"

    def test_explicit_arguments_win(self, monkeypatch):
        monkeypatch.setenv("SCIX_API_TOKEN", "env")
        monkeypatch.setenv("SCIX_API_URL", "https://env.test/v1")
        config = ClientConfig.from_env(token="arg", base_url="https://arg.test/v1")
        assert config.token == "arg"
        assert config.base_url == "https://arg.test/v1"

    def test_numeric_settings(self, monkeypatch):
        monkeypatch.setenv("SCIX_RATE_LIMIT", "2.5")
        monkeypatch.setenv("SCIX_TIMEOUT", "10")
        config = ClientConfig.from_env()
        assert config.rate_limit == 2.5
        assert config.timeout == 10.0

    def test_bad_rate_limit(self, monkeypatch):
        monkeypatch.setenv("SCIX_RATE_LIMIT", "fast")
        with pytest.raises(ConfigurationError, match="SCIX_RATE_LIMIT"):
            ClientConfig.from_env()

    def test_bad_url(self, monkeypatch):
        monkeypatch.setenv("SCIX_API_URL", "gopher://old.test")
        with pytest.raises(ConfigurationError):
            ClientConfig.from_env()

    def test_no_token(self):
        assert ClientConfig.from_env().token is None

"""Tests for reconcilik.config."""

from __future__ import annotations

import pytest

from reconcilik.config import DEFAULT_API_URL, DEFAULT_TIMEOUT, ClientConfig


class TestClientConfig:
    def test_defaults(self):
        cfg = ClientConfig(api_key="k")
        assert cfg.org_id == ""
        assert cfg.base_url == DEFAULT_API_URL
        assert cfg.timeout == DEFAULT_TIMEOUT
        assert cfg.tenant_scoped is False

    def test_tenant_scoped(self):
        cfg = ClientConfig(api_key="k", org_id=" org-1 ")
        assert cfg.org_id == "org-1"
        assert cfg.tenant_scoped is True

    def test_api_key_hidden_from_repr(self):
        cfg = ClientConfig(api_key="super-secret")
        assert "super-secret" not in repr(cfg)
        assert cfg.api_key.get_secret_value() == "super-secret"

    def test_blank_api_key_rejected(self):
        with pytest.raises(ValueError):
            ClientConfig(api_key="   ")

    def test_non_positive_timeout_rejected(self):
        with pytest.raises(ValueError):
            ClientConfig(api_key="k", timeout=0)

    def test_frozen(self):
        cfg = ClientConfig(api_key="k")
        with pytest.raises(ValueError):
            cfg.org_id = "other"

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://example.test", "https://example.test"),
            ("https://example.test/", "https://example.test"),
            ("https://example.test/api", "https://example.test"),
            ("https://example.test/api/", "https://example.test"),
            ("", DEFAULT_API_URL),
        ],
    )
    def test_base_url_normalized(self, url, expected):
        assert ClientConfig(api_key="k", base_url=url).base_url == expected


class TestFromEnv:
    def test_loads_all_values(self):
        cfg = ClientConfig.from_env(
            {
                "RECONCILIK_API_KEY": "abc",
                "RECONCILIK_ORG_ID": "org-9",
                "RECONCILIK_API_URL": "https://console.example.test/api",
                "RECONCILIK_TIMEOUT": "12.5",
            }
        )
        assert cfg.api_key.get_secret_value() == "abc"
        assert cfg.org_id == "org-9"
        assert cfg.base_url == "https://console.example.test"
        assert cfg.timeout == 12.5

    def test_defaults_when_optional_missing(self):
        cfg = ClientConfig.from_env({"RECONCILIK_API_KEY": "abc"})
        assert cfg.org_id == ""
        assert cfg.base_url == DEFAULT_API_URL
        assert cfg.timeout == DEFAULT_TIMEOUT

    def test_missing_api_key(self):
        with pytest.raises(ValueError, match="RECONCILIK_API_KEY"):
            ClientConfig.from_env({})

    def test_invalid_timeout(self):
        with pytest.raises(ValueError, match="RECONCILIK_TIMEOUT"):
            ClientConfig.from_env({"RECONCILIK_API_KEY": "abc", "RECONCILIK_TIMEOUT": "soon"})

    def test_negative_timeout(self):
        with pytest.raises(ValueError, match="positive"):
            ClientConfig.from_env({"RECONCILIK_API_KEY": "abc", "RECONCILIK_TIMEOUT": "-1"})

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("RECONCILIK_API_KEY", "from-env")
        for name in ("RECONCILIK_ORG_ID", "RECONCILIK_API_URL", "RECONCILIK_TIMEOUT"):
            monkeypatch.delenv(name, raising=False)
        cfg = ClientConfig.from_env()
        assert cfg.api_key.get_secret_value() == "from-env"

"""
tests/unit/test_config.py

Unit tests for config.py. Each test writes its own TOML file to tmp_path.
"""

from __future__ import annotations

import pytest

from config import AppConfig, DomainConfig, load_config
from exceptions import ConfigLoadError, InvalidDomainFormat, MissingCredential
from services.ip_service import DEFAULT_IP_URL


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keeps DDNS_* variables from the host out of the loaded config."""
    for name in ("DDNS_SLEEP_SECS", "DDNS_DEFAULT_CLOUDFLARE_TOKEN", "DDNS_DEFAULT_DNSPOD_TOKEN"):
        monkeypatch.delenv(name, raising=False)


def _write(tmp_path, body):
    path = tmp_path / "config.toml"
    path.write_text(body, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# load_config
# ---------------------------------------------------------------------------


def test_minimal_config_uses_defaults(tmp_path):
    path = _write(
        tmp_path,
        """
default_cloudflare_token = "cf-token"

[[domains]]
domain = "home.example.com"
""",
    )

    config = load_config(path)

    assert config.sleep_secs == 120
    assert config.force_get_record_interval == 5
    assert config.default_provider == "cloudflare"
    assert config.default_ip_url == DEFAULT_IP_URL
    assert config.domains == [DomainConfig(domain="home.example.com")]


def test_full_config_is_parsed(tmp_path):
    path = _write(
        tmp_path,
        """
sleep_secs = 60
force_get_record_interval = 2
default_provider = "dnspod"
default_dnspod_token = "1,abc"
default_hook_command = "echo hi"

[[domains]]
domain = "www.example.com"

[[domains]]
domain = "@.example.org"
provider = "cloudflare"
cloudflare_token = "cf-token"
ip_url = "https://ipv6.example.net"
""",
    )

    config = load_config(path)

    assert config.sleep_secs == 60
    assert config.force_get_record_interval == 2
    first, second = config.domains
    assert config.provider_for(first) == "dnspod"
    assert config.token_for(first) == "1,abc"
    assert config.hook_command_for(first) == "echo hi"
    assert config.provider_for(second) == "cloudflare"
    assert config.token_for(second) == "cf-token"
    assert config.ip_url_for(second) == "https://ipv6.example.net"


def test_environment_fills_missing_keys(tmp_path, monkeypatch):
    monkeypatch.setenv("DDNS_DEFAULT_CLOUDFLARE_TOKEN", "env-token")
    path = _write(tmp_path, '[[domains]]\ndomain = "home.example.com"\n')

    config = load_config(path)

    assert config.default_cloudflare_token == "env-token"


def test_missing_file_raises(tmp_path):
    with pytest.raises(ConfigLoadError, match="does not exist"):
        load_config(tmp_path / "nope.toml")


def test_invalid_toml_raises(tmp_path):
    path = _write(tmp_path, "domains = [[[")
    with pytest.raises(ConfigLoadError):
        load_config(path)


def test_unknown_provider_raises(tmp_path):
    path = _write(
        tmp_path,
        'default_provider = "route53"\n[[domains]]\ndomain = "home.example.com"\n',
    )
    with pytest.raises(ConfigLoadError):
        load_config(path)


def test_empty_domain_list_raises(tmp_path):
    path = _write(tmp_path, 'default_cloudflare_token = "cf-token"\n')
    with pytest.raises(ConfigLoadError, match="No domains"):
        load_config(path)


def test_missing_token_names_domain_index(tmp_path):
    path = _write(
        tmp_path,
        """
default_cloudflare_token = "cf-token"

[[domains]]
domain = "home.example.com"

[[domains]]
domain = "www.example.com"
provider = "dnspod"
""",
    )
    with pytest.raises(MissingCredential, match="Domain 2 uses dnspod"):
        load_config(path)


def test_single_label_dnspod_domain_raises(tmp_path):
    path = _write(
        tmp_path,
        """
default_provider = "dnspod"
default_dnspod_token = "1,abc"

[[domains]]
domain = "localhost"
""",
    )
    with pytest.raises(InvalidDomainFormat):
        load_config(path)


# ---------------------------------------------------------------------------
# Per-domain resolution
# ---------------------------------------------------------------------------


def test_domain_token_overrides_default():
    config = AppConfig(default_cloudflare_token="default")
    domain = DomainConfig(domain="home.example.com", cloudflare_token="own")

    assert config.token_for(domain) == "own"


def test_token_for_raises_without_any_token():
    config = AppConfig()
    with pytest.raises(MissingCredential):
        config.token_for(DomainConfig(domain="home.example.com"))

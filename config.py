"""
config.py

Responsibility: Loads and validates the daemon configuration from a TOML file
(plus DDNS_-prefixed environment variables for keys the file omits), and
resolves per-domain settings against the global defaults.
Does NOT: build providers, fetch IPs, or hold runtime state.
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from exceptions import ConfigLoadError, MissingCredential
from providers.domain import split_domain
from services.ip_service import DEFAULT_IP_URL

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.toml")

ProviderName = Literal["cloudflare", "dnspod"]


class DomainConfig(BaseModel):
    """
    One managed record. Every optional field falls back to the matching
    default_* key of AppConfig.
    """

    # Full domain, e.g. "home.example.com" or "@.example.com" for the apex
    domain: str

    provider: Optional[ProviderName] = None
    cloudflare_token: Optional[str] = None
    dnspod_token: Optional[str] = None
    ip_url: Optional[str] = None
    hook_command: Optional[str] = None


class AppConfig(BaseSettings):
    """
    Top-level configuration. Values come from the TOML file first, then
    from DDNS_* environment variables.
    """

    model_config = SettingsConfigDict(env_prefix="DDNS_", extra="ignore")

    # Seconds to sleep between check cycles
    sleep_secs: int = Field(default=120, ge=1)

    # Query the provider every N cycles even when the IP did not change
    force_get_record_interval: int = Field(default=5, ge=1)

    default_provider: ProviderName = "cloudflare"
    default_dnspod_token: Optional[str] = None
    default_cloudflare_token: Optional[str] = None
    default_ip_url: str = DEFAULT_IP_URL
    default_hook_command: Optional[str] = None

    domains: list[DomainConfig] = []

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings, env_settings)

    # ---------------------------------------------------------------------------
    # Per-domain resolution
    # ---------------------------------------------------------------------------

    def provider_for(self, domain: DomainConfig) -> ProviderName:
        return domain.provider or self.default_provider

    def token_for(self, domain: DomainConfig) -> str:
        """
        Returns the API token for a domain's provider.

        Raises:
            MissingCredential: If neither the domain nor the defaults carry one.
        """
        provider = self.provider_for(domain)
        if provider == "dnspod":
            token = domain.dnspod_token or self.default_dnspod_token
        else:
            token = domain.cloudflare_token or self.default_cloudflare_token
        if not token:
            raise MissingCredential(
                f"No {provider} token available for domain {domain.domain}"
            )
        return token

    def ip_url_for(self, domain: DomainConfig) -> str:
        return domain.ip_url or self.default_ip_url

    def hook_command_for(self, domain: DomainConfig) -> str | None:
        return domain.hook_command or self.default_hook_command


def validate_config(config: AppConfig) -> None:
    """
    Checks that every domain can be reconciled.

    Raises:
        ConfigLoadError: If no domains are configured.
        MissingCredential: If a domain has no usable token.
        InvalidDomainFormat: If a DNSPod domain cannot be split.
    """
    if not config.domains:
        raise ConfigLoadError("No domains configured")

    for index, domain in enumerate(config.domains, start=1):
        provider = config.provider_for(domain)
        try:
            config.token_for(domain)
        except MissingCredential as exc:
            raise MissingCredential(
                f"Domain {index} uses {provider} but has no {provider}_token "
                f"and no default_{provider}_token is configured"
            ) from exc

        # Only DNSPod addresses records by (sub_domain, domain)
        if provider == "dnspod":
            split_domain(domain.domain)


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> AppConfig:
    """
    Reads, parses and validates the configuration file.

    Args:
        path: Path to the TOML configuration file.

    Returns:
        A validated AppConfig.

    Raises:
        ConfigLoadError: If the file is missing, malformed or invalid.
    """
    if not path.is_file():
        raise ConfigLoadError(f"Config file {path} does not exist")

    try:
        file_values = TomlConfigSettingsSource(AppConfig, toml_file=path)()
        config = AppConfig(**file_values)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigLoadError(f"Failed to read config file {path}: {exc}") from exc
    except ValidationError as exc:
        raise ConfigLoadError(f"Failed to parse config file {path}: {exc}") from exc

    validate_config(config)
    logger.debug("Loaded config from %s: %d domain(s).", path, len(config.domains))
    return config

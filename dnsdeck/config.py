"""Configuration and credential bundle loading."""

import logging
import os
from dataclasses import dataclass
from typing import Callable, Mapping, Optional

import yaml

from . import __version__
from .errors import DnsError, ErrorCode
from .models import Provider, ProviderCredential

logger = logging.getLogger(__name__)

ENV_PREFIX = "DNSDECK"


@dataclass
class AppConfig:
    """Runtime settings shared by every provider client."""

    timeout: float = 30.0  # Per HTTP call, seconds
    user_agent: str = f"dnsdeck/{__version__}"

    # Thread pool size for cross-provider fan-out
    max_workers: int = 8

    # YAML credential bundle (optional, env vars can supply credentials too)
    credentials_path: str = ""

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create config from environment variables."""
        return cls(
            timeout=_env_number("DNSDECK_TIMEOUT", "30", float),
            user_agent=os.environ.get("DNSDECK_USER_AGENT", f"dnsdeck/{__version__}"),
            max_workers=_env_number("DNSDECK_MAX_WORKERS", "8", int),
            credentials_path=os.environ.get("DNSDECK_CREDENTIALS", ""),
        )


def _env_number(name: str, default: str, convert: Callable[[str], float]):
    value = os.environ.get(name, default)
    try:
        return convert(value)
    except ValueError:
        raise DnsError(ErrorCode.INVALID_INPUT, f"{name} must be a number, got {value!r}")


def env_var_name(provider: Provider, field_name: str) -> str:
    """DNSDECK_<PROVIDER>_<FIELD>, e.g. DNSDECK_CLOUDFLARE_API_KEY"""
    return f"{ENV_PREFIX}_{provider.value.upper()}_{field_name.upper()}"


def _parse_provider(key: str) -> Optional[Provider]:
    try:
        return Provider(str(key).strip().lower())
    except ValueError:
        return None


def load_credential_file(path: str) -> dict[Provider, ProviderCredential]:
    """
    Read a YAML credential bundle.

    The file holds one mapping per provider:

        cloudflare:
          email: ops@example.com
          api_key: "..."
          last_verified_at: "2024-05-01T10:00:00Z"

    Unknown provider keys are skipped with a warning.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise DnsError(ErrorCode.INVALID_INPUT, f"Credential file not found: {path}")
    except yaml.YAMLError as e:
        raise DnsError(ErrorCode.INVALID_INPUT, f"Invalid credential file {path}: {e}")

    if not isinstance(data, dict):
        raise DnsError(
            ErrorCode.INVALID_INPUT,
            f"Credential file {path} must contain a mapping of providers",
        )

    credentials: dict[Provider, ProviderCredential] = {}
    for key, section in data.items():
        provider = _parse_provider(key)
        if provider is None:
            logger.warning(f"Ignoring unknown provider in {path}: {key}")
            continue
        if not isinstance(section, dict):
            raise DnsError(
                ErrorCode.INVALID_INPUT,
                f"Credentials for {provider.value} must be a mapping",
            )

        secrets = {
            name: str(section[name])
            for name in provider.credential_fields
            if section.get(name) is not None
        }
        last_verified = section.get("last_verified_at")
        credentials[provider] = ProviderCredential(
            provider=provider,
            secrets=secrets,
            last_verified_at=str(last_verified) if last_verified else None,
        )

    logger.debug(f"Loaded credentials for {len(credentials)} provider(s) from {path}")
    return credentials


def credentials_from_env(
    environ: Optional[Mapping[str, str]] = None,
) -> dict[Provider, dict[str, str]]:
    """Collect DNSDECK_<PROVIDER>_<FIELD> secrets, grouped by provider"""
    environ = os.environ if environ is None else environ
    found: dict[Provider, dict[str, str]] = {}

    for provider in Provider:
        for name in provider.credential_fields:
            value = environ.get(env_var_name(provider, name), "")
            if value:
                found.setdefault(provider, {})[name] = value

    return found


def load_credentials(
    path: str = "",
    environ: Optional[Mapping[str, str]] = None,
) -> dict[Provider, ProviderCredential]:
    """Merge the credential file with environment variables, env winning"""
    credentials = load_credential_file(path) if path else {}

    for provider, secrets in credentials_from_env(environ).items():
        existing = credentials.get(provider)
        if existing is None:
            credentials[provider] = ProviderCredential(provider=provider, secrets=secrets)
        else:
            existing.secrets.update(secrets)

    return credentials

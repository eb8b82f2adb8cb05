"""
DNS Provider Registry

Factory for creating provider clients from credential bundles.
"""

import logging
from typing import Optional, Type

from ..config import AppConfig
from ..errors import DnsError, ErrorCode
from ..models import Provider, ProviderCredential
from .base import ProviderClient

logger = logging.getLogger(__name__)

# Provider registry
_providers: dict[Provider, Type[ProviderClient]] = {}


def register_provider(provider: Provider, client_class: Type[ProviderClient]) -> None:
    """Register a provider client class"""
    _providers[provider] = client_class
    logger.debug(f"Registered DNS provider: {provider.value}")


def list_providers() -> list[Provider]:
    """Registered providers in declaration order"""
    return [p for p in Provider if p in _providers]


def get_client(
    credential: ProviderCredential,
    config: Optional[AppConfig] = None,
) -> ProviderClient:
    """
    Get a provider client for a credential bundle.

    Args:
        credential: Provider and its decrypted secrets
        config: Shared runtime settings (timeouts, user agent)

    Returns:
        A fresh client; the caller should close it when done
    """
    client_class = _providers.get(credential.provider)
    if client_class is None:
        logger.error(f"Unknown DNS provider: {credential.provider}")
        logger.info(f"Available providers: {[p.value for p in _providers]}")
        raise DnsError(ErrorCode.INVALID_INPUT, f"Unsupported provider: {credential.provider}")

    return client_class(credential, config)


def _register_builtin_providers() -> None:
    """Register all built-in providers"""
    from .aliyun import AliyunClient
    from .baidu import BaiduClient
    from .cloudflare import CloudflareClient
    from .dnscom import DnscomClient
    from .dnspod import DnspodClient
    from .huawei import HuaweiClient
    from .rainyun import RainyunClient
    from .tencentcloud import TencentCloudClient

    for client_class in (
        CloudflareClient,
        DnspodClient,
        AliyunClient,
        HuaweiClient,
        BaiduClient,
        DnscomClient,
        RainyunClient,
        TencentCloudClient,
    ):
        register_provider(client_class.provider, client_class)


_register_builtin_providers()

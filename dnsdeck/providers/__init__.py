"""Provider clients: one uniform zone/record contract per DNS provider."""

from .base import ProviderClient
from .registry import get_client, list_providers, register_provider

__all__ = ["ProviderClient", "get_client", "list_providers", "register_provider"]

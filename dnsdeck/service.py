"""
DNS Service

Orchestrates provider clients for callers: credential checks, cross-provider
domain listing and validated record writes. A fresh client is built per
operation and closed when it is done.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from typing import Optional

from .config import AppConfig
from .errors import DnsError, ErrorCode, domain_status_for
from .models import (
    DnsRecord,
    DomainItem,
    DomainStatus,
    IntegrationTestResult,
    Provider,
    ProviderCredential,
    RecordCreateRequest,
    RecordUpdateRequest,
)
from .providers import ProviderClient, get_client, list_providers
from .providers.base import RFC3339_FORMAT
from .validation import validate_record, validate_update

logger = logging.getLogger(__name__)


def not_configured_item(provider: Provider) -> DomainItem:
    return DomainItem(
        provider=provider,
        name=provider.display_name,
        provider_id="",
        status=DomainStatus.NOT_CONFIGURED,
    )


def error_item(provider: Provider, error: DnsError) -> DomainItem:
    """Placeholder standing in for the zones of a provider that failed"""
    return DomainItem(
        provider=provider,
        name=f"{provider.display_name} (error: {error.message})",
        provider_id="",
        status=domain_status_for(error),
    )


class DnsService:
    """Entry point for everything that talks to DNS providers"""

    def __init__(
        self,
        credentials: Optional[dict[Provider, ProviderCredential]] = None,
        config: Optional[AppConfig] = None,
    ):
        self.credentials = credentials or {}
        self.config = config or AppConfig()
        self.logger = logging.getLogger(__name__)

    def _credential(self, provider: Provider) -> ProviderCredential:
        credential = self.credentials.get(provider)
        if credential is None:
            raise DnsError(
                ErrorCode.NOT_CONFIGURED, f"{provider.display_name} is not configured"
            )
        return credential

    def _client(self, credential: ProviderCredential) -> ProviderClient:
        return get_client(credential, self.config)

    # ==========================================================================
    # Credentials
    # ==========================================================================

    def test_credentials(
        self, provider: Provider, secrets: dict[str, str]
    ) -> IntegrationTestResult:
        """Try a secret bundle against the provider; never raises for provider failures"""
        try:
            self._check(ProviderCredential(provider=provider, secrets=secrets))
        except DnsError as e:
            self.logger.warning(f"{provider.display_name} credential test failed: {e}")
            return IntegrationTestResult(ok=False, message=e.message)

        return IntegrationTestResult(
            ok=True, message=f"Successfully connected to {provider.display_name}"
        )

    def verify(self, provider: Provider, secrets: dict[str, str]) -> ProviderCredential:
        """
        Test a secret bundle and return it stamped with the verification time.

        Raises DnsError when the provider rejects the credentials; storing the
        returned bundle is up to the caller.
        """
        credential = ProviderCredential(provider=provider, secrets=dict(secrets))
        self._check(credential)
        credential.last_verified_at = datetime.now(timezone.utc).strftime(RFC3339_FORMAT)
        self.logger.info(f"✓ Verified {provider.display_name} credentials")
        return credential

    def _check(self, credential: ProviderCredential) -> None:
        with self._client(credential) as client:
            client.test()

    # ==========================================================================
    # Domains
    # ==========================================================================

    def list_domains(
        self,
        provider_filter: Optional[list[Provider]] = None,
        search: Optional[str] = None,
    ) -> list[DomainItem]:
        """
        List zones across providers in parallel.

        Providers without credentials yield a not_configured placeholder and
        providers that fail yield one error placeholder, so one bad account
        never hides the others. Results follow provider declaration order.
        """
        wanted = [
            p for p in list_providers() if provider_filter is None or p in provider_filter
        ]
        by_provider: dict[Provider, list[DomainItem]] = {}

        configured = []
        for provider in wanted:
            if provider in self.credentials:
                configured.append(provider)
            else:
                by_provider[provider] = [not_configured_item(provider)]

        if configured:
            workers = max(1, min(self.config.max_workers, len(configured)))
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures: dict[Future[list[DomainItem]], Provider] = {
                    executor.submit(self._provider_domains, provider): provider
                    for provider in configured
                }

                for future in as_completed(futures):
                    provider = futures[future]
                    try:
                        by_provider[provider] = future.result()
                    except DnsError as e:
                        self.logger.warning(
                            f"Failed to list {provider.display_name} domains: {e}"
                        )
                        by_provider[provider] = [error_item(provider, e)]
                    except Exception as e:
                        self.logger.exception(
                            f"Unexpected error listing {provider.display_name} domains"
                        )
                        error = DnsError(ErrorCode.FETCH_FAILED, f"Unexpected error: {e}")
                        by_provider[provider] = [error_item(provider, error)]

        items = [item for provider in wanted for item in by_provider.get(provider, [])]

        if search:
            needle = search.strip().lower()
            items = [item for item in items if needle in item.name.lower()]

        return items

    def _provider_domains(self, provider: Provider) -> list[DomainItem]:
        with self._client(self._credential(provider)) as client:
            domains = client.list_domains()
        self.logger.debug(f"{provider.display_name}: {len(domains)} domain(s)")
        return domains

    # ==========================================================================
    # Records
    # ==========================================================================

    def list_records(
        self, provider: Provider, zone_id: str, zone_name: str
    ) -> list[DnsRecord]:
        with self._client(self._credential(provider)) as client:
            return client.list_records(zone_id, zone_name)

    def create_record(
        self,
        provider: Provider,
        zone_id: str,
        zone_name: str,
        req: RecordCreateRequest,
    ) -> DnsRecord:
        validate_record(req)
        with self._client(self._credential(provider)) as client:
            return client.create_record(zone_id, zone_name, req)

    def update_record(
        self,
        provider: Provider,
        zone_id: str,
        zone_name: str,
        req: RecordUpdateRequest,
    ) -> DnsRecord:
        validate_update(req)
        with self._client(self._credential(provider)) as client:
            return client.update_record(zone_id, zone_name, req)

    def delete_record(
        self, provider: Provider, zone_id: str, record_id: str, zone_name: str = ""
    ) -> None:
        if not (record_id or "").strip():
            raise DnsError(ErrorCode.MISSING_FIELD, "Record id is required")
        with self._client(self._credential(provider)) as client:
            client.delete_record(zone_id, record_id, zone_name)

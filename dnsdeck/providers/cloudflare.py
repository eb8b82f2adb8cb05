"""
Cloudflare DNS Provider Client

Uses Cloudflare API v4 with global API key authentication
(X-Auth-Email / X-Auth-Key).
"""

from typing import Any, Optional, Union

from ..codec import (
    DEFAULT_CAA_FLAGS,
    DEFAULT_CAA_TAG,
    decode_structured,
    json_object,
    json_objects,
    to_int,
)
from ..errors import DnsError, ErrorCode, from_provider_code
from ..models import (
    DnsRecord,
    DomainItem,
    Provider,
    RecordCreateRequest,
    RecordType,
    RecordUpdateRequest,
)
from ..names import full_name, relative_name, srv_service_proto
from .base import ProviderClient, to_rfc3339

# Cloudflare error codes for bad or insufficient credentials
CLOUDFLARE_AUTH_CODES = ("9103", "9106", "9109", "10000", "6003", "6111")


class CloudflareClient(ProviderClient):
    """
    Cloudflare DNS client.

    SRV and CAA records use Cloudflare's structured `data` objects instead
    of flat value strings; conflict lookups are filtered server-side.
    """

    provider = Provider.CLOUDFLARE
    api_base = "https://api.cloudflare.com/client/v4"

    # /zones caps per_page at 50
    ZONE_PAGE_SIZE = 50
    RECORD_PAGE_SIZE = 500

    def _envelope_error(self, payload: Any, error_code: str) -> Optional[DnsError]:
        if not isinstance(payload, dict) or payload.get("success", True):
            return None

        errors = payload.get("errors")
        if not isinstance(errors, list):
            errors = []
        first = errors[0] if errors and isinstance(errors[0], dict) else {}
        message = "; ".join(
            str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in errors
        )
        return from_provider_code(
            first.get("code"),
            message or "Unknown error",
            error_code,
            extra_auth_codes=CLOUDFLARE_AUTH_CODES,
        )

    def _paged(self, path: str, params: dict, per_page: int) -> list[dict]:
        """Fetch every page of a list endpoint"""
        results: list[dict] = []
        for page in range(1, self.MAX_PAGES + 1):
            data = self._api_request(
                "GET", path, params={**params, "page": page, "per_page": per_page}
            )
            results.extend(json_objects(data.get("result")))

            total_pages = to_int(json_object(data.get("result_info")).get("total_pages")) or 1
            if page >= total_pages:
                break
        return results

    def test(self) -> None:
        self._api_request("GET", "/zones", params={"per_page": 1})

    def list_domains(self) -> list[DomainItem]:
        zones = self._paged("/zones", {}, self.ZONE_PAGE_SIZE)

        return [
            DomainItem(
                provider=self.provider,
                name=str(zone.get("name") or ""),
                provider_id=str(zone.get("id", "")),
                records_count=self._records_count(str(zone.get("id", ""))),
                last_changed_at=to_rfc3339(zone.get("modified_on")),
            )
            for zone in zones
        ]

    def _records_count(self, zone_id: str) -> Optional[int]:
        """Record count of a zone, None when it cannot be fetched"""
        try:
            data = self._api_request(
                "GET", f"/zones/{zone_id}/dns_records", params={"per_page": 1}
            )
        except DnsError as e:
            self.logger.debug(f"Record count unavailable for zone {zone_id}: {e}")
            return None
        return to_int(json_object(data.get("result_info")).get("total_count"))

    def list_records(self, zone_id: str, zone_name: str) -> list[DnsRecord]:
        items = self._paged(f"/zones/{zone_id}/dns_records", {}, self.RECORD_PAGE_SIZE)
        return [self._to_record(item, zone_name) for item in items]

    def find_conflict_ids(
        self, zone_id: str, zone_name: str, record_type: str, host: str
    ) -> list[str]:
        data = self._api_request(
            "GET",
            f"/zones/{zone_id}/dns_records",
            params={
                "per_page": 100,
                "type": record_type.upper(),
                "name": full_name(zone_name, host),
            },
        )
        return [str(item.get("id")) for item in json_objects(data.get("result"))]

    def _create_record(
        self, zone_id: str, zone_name: str, req: RecordCreateRequest
    ) -> DnsRecord:
        data = self._api_request(
            "POST",
            f"/zones/{zone_id}/dns_records",
            json_data=self._payload(zone_name, req),
            error_code=ErrorCode.CREATE_FAILED,
        )
        return self._to_record(json_object(data.get("result")), zone_name)

    def update_record(
        self, zone_id: str, zone_name: str, req: RecordUpdateRequest
    ) -> DnsRecord:
        data = self._api_request(
            "PUT",
            f"/zones/{zone_id}/dns_records/{req.id}",
            json_data=self._payload(zone_name, req),
            error_code=ErrorCode.UPDATE_FAILED,
        )
        record = self._to_record(json_object(data.get("result")), zone_name)
        self.logger.info(f"✓ Updated {record.record_type} {record.name} in {zone_name}")
        return record

    def delete_record(self, zone_id: str, record_id: str, zone_name: str = "") -> None:
        self._api_request(
            "DELETE",
            f"/zones/{zone_id}/dns_records/{record_id}",
            error_code=ErrorCode.DELETE_FAILED,
        )
        self.logger.info(f"✓ Deleted record {record_id}")

    # ==========================================================================
    # Payload translation
    # ==========================================================================

    def _payload(
        self, zone_name: str, req: Union[RecordCreateRequest, RecordUpdateRequest]
    ) -> dict[str, Any]:
        record_type = req.record_type.upper()
        payload: dict[str, Any] = {
            "type": record_type,
            "name": full_name(zone_name, req.name),
            "ttl": req.ttl,
        }

        if record_type == RecordType.SRV.value:
            service, proto = srv_service_proto(req.name)
            payload["data"] = {
                "service": service,
                "proto": proto,
                "name": zone_name,
                "priority": req.srv_priority or 0,
                "weight": req.srv_weight or 0,
                "port": req.srv_port or 0,
                "target": req.content,
            }
        elif record_type == RecordType.CAA.value:
            payload["data"] = {
                "flags": req.caa_flags if req.caa_flags is not None else DEFAULT_CAA_FLAGS,
                "tag": req.caa_tag or DEFAULT_CAA_TAG,
                "value": req.content,
            }
        else:
            payload["content"] = req.content
            if record_type == RecordType.MX.value:
                payload["priority"] = req.mx_priority

        return payload

    def _to_record(self, item: dict, zone_name: str) -> DnsRecord:
        record_type = str(item.get("type", "")).upper()
        value = decode_structured(record_type, item.get("data"), item.get("content") or "")

        return DnsRecord(
            id=str(item.get("id", "")),
            provider=self.provider,
            domain=zone_name,
            record_type=record_type,
            name=relative_name(zone_name, str(item.get("name") or "")),
            content=value.content,
            ttl=to_int(item.get("ttl")) or 0,
            mx_priority=to_int(item.get("priority")),
            srv_priority=value.srv_priority,
            srv_weight=value.srv_weight,
            srv_port=value.srv_port,
            caa_flags=value.caa_flags,
            caa_tag=value.caa_tag,
        )

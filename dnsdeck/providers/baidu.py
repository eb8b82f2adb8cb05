"""
Baidu Cloud DNS Provider Client

REST API v1 signed with `bce-auth-v1` (see signing.BaiduSigner). Zone
and record listings are paged with marker/maxKeys.
"""

from typing import Any, Optional, Union

from ..codec import decode_value, encode_request_value, json_objects, to_int
from ..errors import DnsError, ErrorCode, from_provider_code
from ..models import (
    DnsRecord,
    DomainItem,
    Provider,
    RecordCreateRequest,
    RecordType,
    RecordUpdateRequest,
)
from ..names import relative_name
from .base import ProviderClient, to_rfc3339


class BaiduClient(ProviderClient):
    """Baidu Cloud (BCE) DNS client"""

    provider = Provider.BAIDU
    api_base = "https://dns.baidubce.com"

    PAGE_SIZE = 500

    def _envelope_error(self, payload: Any, error_code: str) -> Optional[DnsError]:
        if isinstance(payload, dict) and payload.get("code") and payload.get("message"):
            return from_provider_code(payload["code"], payload["message"], error_code)
        return None

    def _paged(self, path: str, key: str) -> list[dict]:
        """Follow nextMarker until the listing is no longer truncated"""
        items: list[dict] = []
        marker = None
        for _ in range(self.MAX_PAGES):
            data = self._api_request(
                "GET", path, params={"marker": marker, "maxKeys": self.PAGE_SIZE}
            )
            items.extend(json_objects(data.get(key)))

            marker = data.get("nextMarker")
            if not data.get("isTruncated") or not marker:
                break
        return items

    def test(self) -> None:
        self._api_request("GET", "/v1/zone", params={"maxKeys": 1})

    def list_domains(self) -> list[DomainItem]:
        zones = self._paged("/v1/zone", "zones")
        return [
            DomainItem(
                provider=self.provider,
                name=str(zone.get("name", "")).rstrip("."),
                provider_id=str(zone.get("id", "")),
                records_count=to_int(zone.get("record_count")),
                last_changed_at=to_rfc3339(zone.get("update_time")),
            )
            for zone in zones
        ]

    def list_records(self, zone_id: str, zone_name: str) -> list[DnsRecord]:
        records = self._paged(f"/v1/zone/{zone_id}/record", "records")
        return [self._to_record(item, zone_name) for item in records]

    def _create_record(
        self, zone_id: str, zone_name: str, req: RecordCreateRequest
    ) -> DnsRecord:
        data = self._api_request(
            "POST",
            f"/v1/zone/{zone_id}/record",
            json_data=self._payload(req),
            error_code=ErrorCode.CREATE_FAILED,
        )
        return self._to_record(data, zone_name, req)

    def update_record(
        self, zone_id: str, zone_name: str, req: RecordUpdateRequest
    ) -> DnsRecord:
        data = self._api_request(
            "PUT",
            f"/v1/zone/{zone_id}/record/{req.id}",
            json_data=self._payload(req),
            error_code=ErrorCode.UPDATE_FAILED,
        )
        record = self._to_record(data, zone_name, req)
        self.logger.info(f"✓ Updated {record.record_type} {record.name} in {zone_name}")
        return record

    def delete_record(self, zone_id: str, record_id: str, zone_name: str = "") -> None:
        self._api_request(
            "DELETE",
            f"/v1/zone/{zone_id}/record/{record_id}",
            error_code=ErrorCode.DELETE_FAILED,
        )
        self.logger.info(f"✓ Deleted record {record_id}")

    # ==========================================================================
    # Payload translation
    # ==========================================================================

    def _payload(self, req: Union[RecordCreateRequest, RecordUpdateRequest]) -> dict[str, Any]:
        record_type = req.record_type.upper()
        payload: dict[str, Any] = {
            "rr": req.name,
            "type": record_type,
            "value": encode_request_value(req),
            "ttl": req.ttl,
        }
        if record_type == RecordType.MX.value:
            payload["priority"] = req.mx_priority
        return payload

    def _to_record(
        self,
        item: dict,
        zone_name: str,
        req: Union[RecordCreateRequest, RecordUpdateRequest, None] = None,
    ) -> DnsRecord:
        """Record from a listing item, or from a write response plus its request"""
        if req is not None:
            record_type = item.get("type") or req.record_type
            raw_value = item.get("value") or encode_request_value(req)
            name = item.get("rr") or req.name
            ttl = to_int(item.get("ttl")) or req.ttl
            mx_priority = to_int(item.get("priority"))
            if mx_priority is None:
                mx_priority = req.mx_priority
            record_id = item.get("id") or getattr(req, "id", "")
        else:
            record_type = item.get("type", "")
            raw_value = item.get("value") or ""
            name = item.get("rr", "")
            ttl = to_int(item.get("ttl")) or 0
            mx_priority = to_int(item.get("priority"))
            record_id = item.get("id", "")

        value = decode_value(record_type, raw_value)
        return DnsRecord(
            id=str(record_id),
            provider=self.provider,
            domain=zone_name,
            record_type=record_type,
            name=relative_name(zone_name, name),
            content=value.content,
            ttl=ttl,
            mx_priority=mx_priority,
            srv_priority=value.srv_priority,
            srv_weight=value.srv_weight,
            srv_port=value.srv_port,
            caa_flags=value.caa_flags,
            caa_tag=value.caa_tag,
        )

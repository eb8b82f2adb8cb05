"""
Huawei Cloud DNS Provider Client

REST API v2 authenticated with an IAM token (X-Auth-Token). Names are
fully qualified with a trailing dot; each recordset carries a list of values
of which the first one is used.
"""

from typing import Any, Optional, Union

from ..codec import decode_value, encode_request_value, json_object, json_objects, to_int
from ..errors import DnsError, ErrorCode, from_provider_code
from ..models import (
    DnsRecord,
    DomainItem,
    Provider,
    RecordCreateRequest,
    RecordUpdateRequest,
)
from ..names import full_name, relative_name
from .base import ProviderClient, to_rfc3339


class HuaweiClient(ProviderClient):
    """Huawei Cloud DNS client (cn-north-4 endpoint)"""

    provider = Provider.HUAWEI
    api_base = "https://dns.cn-north-4.myhuaweicloud.com"

    PAGE_SIZE = 500

    def _envelope_error(self, payload: Any, error_code: str) -> Optional[DnsError]:
        # Both IAM ({error_code, error_msg}) and DNS ({code, message}) shapes occur
        if not isinstance(payload, dict):
            return None
        code = payload.get("code") or payload.get("error_code")
        message = payload.get("message") or payload.get("error_msg")
        if code and message:
            return from_provider_code(code, message, error_code)
        return None

    def _paged(self, path: str, key: str, params: dict) -> list[dict]:
        items: list[dict] = []
        for page in range(self.MAX_PAGES):
            data = self._api_request(
                "GET",
                path,
                params={**params, "limit": self.PAGE_SIZE, "offset": page * self.PAGE_SIZE},
            )
            batch = json_objects(data.get(key))
            items.extend(batch)

            total = to_int(json_object(data.get("metadata")).get("total_count"))
            if not batch or total is None or len(items) >= total:
                break
        return items

    def test(self) -> None:
        self._api_request("GET", "/v2/zones", params={"type": "public", "limit": 1})

    def list_domains(self) -> list[DomainItem]:
        zones = self._paged("/v2/zones", "zones", {"type": "public"})
        return [
            DomainItem(
                provider=self.provider,
                name=str(zone.get("name", "")).rstrip("."),
                provider_id=str(zone.get("id", "")),
                records_count=to_int(zone.get("record_num")),
                last_changed_at=to_rfc3339(zone.get("update_at")),
            )
            for zone in zones
        ]

    def list_records(self, zone_id: str, zone_name: str) -> list[DnsRecord]:
        recordsets = self._paged(f"/v2/zones/{zone_id}/recordsets", "recordsets", {})
        return [self._to_record(item, zone_name) for item in recordsets]

    def _create_record(
        self, zone_id: str, zone_name: str, req: RecordCreateRequest
    ) -> DnsRecord:
        data = self._api_request(
            "POST",
            f"/v2/zones/{zone_id}/recordsets",
            json_data=self._payload(zone_name, req),
            error_code=ErrorCode.CREATE_FAILED,
        )
        return self._to_record(data, zone_name, req)

    def update_record(
        self, zone_id: str, zone_name: str, req: RecordUpdateRequest
    ) -> DnsRecord:
        data = self._api_request(
            "PUT",
            f"/v2/zones/{zone_id}/recordsets/{req.id}",
            json_data=self._payload(zone_name, req),
            error_code=ErrorCode.UPDATE_FAILED,
        )
        record = self._to_record(data, zone_name, req)
        self.logger.info(f"✓ Updated {record.record_type} {record.name} in {zone_name}")
        return record

    def delete_record(self, zone_id: str, record_id: str, zone_name: str = "") -> None:
        self._api_request(
            "DELETE",
            f"/v2/zones/{zone_id}/recordsets/{record_id}",
            error_code=ErrorCode.DELETE_FAILED,
        )
        self.logger.info(f"✓ Deleted record {record_id}")

    # ==========================================================================
    # Payload translation
    # ==========================================================================

    def _payload(
        self, zone_name: str, req: Union[RecordCreateRequest, RecordUpdateRequest]
    ) -> dict[str, Any]:
        return {
            "name": full_name(zone_name, req.name, trailing_dot=True),
            "type": req.record_type.upper(),
            "ttl": req.ttl,
            "records": [encode_request_value(req)],
        }

    def _to_record(
        self,
        item: dict,
        zone_name: str,
        req: Union[RecordCreateRequest, RecordUpdateRequest, None] = None,
    ) -> DnsRecord:
        records = item.get("records")
        if isinstance(records, list) and records:
            raw_value = str(records[0])
        else:
            raw_value = encode_request_value(req) if req is not None else ""

        record_type = item.get("type") or (req.record_type if req else "")
        value = decode_value(record_type, raw_value)

        mx_priority = to_int(item.get("priority"))
        if mx_priority is None and req is not None:
            mx_priority = req.mx_priority

        return DnsRecord(
            id=str(item.get("id", "")),
            provider=self.provider,
            domain=zone_name,
            record_type=record_type,
            name=relative_name(zone_name, item.get("name") or (req.name if req else "")),
            content=value.content,
            ttl=to_int(item.get("ttl")) or (req.ttl if req else 0),
            mx_priority=mx_priority,
            srv_priority=value.srv_priority,
            srv_weight=value.srv_weight,
            srv_port=value.srv_port,
            caa_flags=value.caa_flags,
            caa_tag=value.caa_tag,
        )

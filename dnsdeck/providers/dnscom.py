"""
DNS.COM Provider Client

Open API at openapi.dns.com. Reads are signed GETs, writes are signed form
POSTs; records are addressed by domain name rather than zone id.
"""

from typing import Any, Optional, Union

from ..codec import decode_value, encode_request_value, json_object, json_objects, to_int
from ..errors import DnsError, ErrorCode
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

DEFAULT_VIEW_ID = "1"

# DNS.COM has no dedicated auth error codes; the message tells
AUTH_MESSAGE_HINTS = ("sign", "key", "auth", "timestamp")


class DnscomClient(ProviderClient):
    """DNS.COM client"""

    provider = Provider.DNSCOM
    api_base = "https://openapi.dns.com/api"

    PAGE_SIZE = 500

    def _envelope_error(self, payload: Any, error_code: str) -> Optional[DnsError]:
        if not isinstance(payload, dict) or "code" not in payload:
            return None
        if to_int(payload.get("code")) == 0:
            return None

        message = str(payload.get("message") or "DNS.COM API failed")
        lowered = message.lower()
        if any(hint in lowered for hint in AUTH_MESSAGE_HINTS):
            return DnsError(ErrorCode.AUTH_FAILED, message)
        return DnsError(error_code, message)

    def _paged(self, path: str, params: dict) -> list[dict]:
        items: list[dict] = []
        for page in range(1, self.MAX_PAGES + 1):
            payload = self._api_request(
                "GET", path, params={**params, "page": page, "paginate": self.PAGE_SIZE}
            )
            data = json_object(payload.get("data"))
            batch = json_objects(data.get("data"))
            items.extend(batch)

            page_count = to_int(data.get("pageCount")) or 1
            if not batch or page >= page_count:
                break
        return items

    def test(self) -> None:
        self._api_request("GET", "/domain/lists/", params={"page": 1, "paginate": 1})

    def list_domains(self) -> list[DomainItem]:
        domains = self._paged("/domain/lists/", {})
        return [
            DomainItem(
                provider=self.provider,
                name=d.get("domain", ""),
                provider_id=str(d.get("id", "")),
                records_count=to_int(d.get("record_count")),
                last_changed_at=to_rfc3339(d.get("updated_at")),
            )
            for d in domains
        ]

    def list_records(self, zone_id: str, zone_name: str) -> list[DnsRecord]:
        records = self._paged("/record/lists/", {"domain": zone_name})
        return [self._to_record(item, zone_name) for item in records]

    def _create_record(
        self, zone_id: str, zone_name: str, req: RecordCreateRequest
    ) -> DnsRecord:
        payload = self._api_request(
            "POST",
            "/record/create/",
            data=self._form(zone_name, req),
            error_code=ErrorCode.CREATE_FAILED,
        )
        return self._to_record(json_object(payload.get("data")), zone_name, req)

    def update_record(
        self, zone_id: str, zone_name: str, req: RecordUpdateRequest
    ) -> DnsRecord:
        form = self._form(zone_name, req)
        form["record_id"] = req.id
        payload = self._api_request(
            "POST", "/record/update/", data=form, error_code=ErrorCode.UPDATE_FAILED
        )
        record = self._to_record(json_object(payload.get("data")), zone_name, req)
        self.logger.info(f"✓ Updated {record.record_type} {record.name} in {zone_name}")
        return record

    def delete_record(self, zone_id: str, record_id: str, zone_name: str = "") -> None:
        if not zone_name:
            raise DnsError(ErrorCode.INVALID_INPUT, "DNS.COM needs the domain name to delete a record")
        self._api_request(
            "POST",
            "/record/delete/",
            data={"domain": zone_name, "record_id": record_id},
            error_code=ErrorCode.DELETE_FAILED,
        )
        self.logger.info(f"✓ Deleted record {record_id}")

    # ==========================================================================
    # Payload translation
    # ==========================================================================

    def _form(
        self, zone_name: str, req: Union[RecordCreateRequest, RecordUpdateRequest]
    ) -> dict[str, str]:
        record_type = req.record_type.upper()
        form = {
            "domain": zone_name,
            "record": req.name,
            "type": record_type,
            "value": encode_request_value(req),
            "ttl": str(req.ttl),
            "view_id": DEFAULT_VIEW_ID,
        }
        if record_type == RecordType.MX.value and req.mx_priority is not None:
            form["mx"] = str(req.mx_priority)
        return form

    def _to_record(
        self,
        item: dict,
        zone_name: str,
        req: Union[RecordCreateRequest, RecordUpdateRequest, None] = None,
    ) -> DnsRecord:
        if not isinstance(item, dict):
            item = {}

        record_type = item.get("type") or (req.record_type if req else "")
        raw_value = item.get("value")
        if raw_value is None:
            raw_value = encode_request_value(req) if req is not None else ""
        value = decode_value(record_type, raw_value)

        mx_priority = to_int(item.get("mx"))
        if mx_priority is None and req is not None:
            mx_priority = req.mx_priority
        record_id = item.get("id") or item.get("record_id") or getattr(req, "id", "")

        return DnsRecord(
            id=str(record_id or ""),
            provider=self.provider,
            domain=zone_name,
            record_type=record_type,
            name=relative_name(zone_name, item.get("record") or (req.name if req else "")),
            content=value.content,
            ttl=to_int(item.get("ttl")) or (req.ttl if req else 0),
            mx_priority=mx_priority,
            srv_priority=value.srv_priority,
            srv_weight=value.srv_weight,
            srv_port=value.srv_port,
            caa_flags=value.caa_flags,
            caa_tag=value.caa_tag,
        )

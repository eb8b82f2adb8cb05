"""
DNSPod DNS Provider Client

Legacy DNSPod API (dnsapi.cn): every call is a form POST authenticated with
a `login_token` field.
"""

from typing import Any, Optional, Union

from ..codec import decode_value, encode_request_value, json_object, json_objects, to_int
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

DEFAULT_LINE = "默认"

# Status codes for a rejected or expired login token
DNSPOD_AUTH_CODES = ("-1", "-7", "-8", "85")

# Status codes meaning "nothing to list" rather than a failure
DNSPOD_EMPTY_CODES = {"/Domain.List": "9", "/Record.List": "10"}


class DnspodClient(ProviderClient):
    """DNSPod client (dnsapi.cn)"""

    provider = Provider.DNSPOD
    api_base = "https://dnsapi.cn"

    PAGE_SIZE = 500

    def _call(
        self, action: str, data: dict[str, Any], error_code: str = ErrorCode.FETCH_FAILED
    ) -> dict:
        form = {k: str(v) for k, v in data.items() if v is not None}
        payload = self._api_request(
            "POST",
            action,
            data=form,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            error_code=error_code,
        )
        if not isinstance(payload, dict) or not isinstance(payload.get("status"), dict):
            raise DnsError(error_code, f"Unexpected DNSPod response: {payload}")

        status = payload["status"]
        code = str(status.get("code", ""))
        if code == "1" or code == DNSPOD_EMPTY_CODES.get(action):
            return payload
        raise from_provider_code(
            code, status.get("message"), error_code, extra_auth_codes=DNSPOD_AUTH_CODES
        )

    def test(self) -> None:
        self._call("/Domain.List", {"offset": 0, "length": 1})

    def list_domains(self) -> list[DomainItem]:
        domains: list[dict] = []
        for page in range(self.MAX_PAGES):
            data = self._call(
                "/Domain.List", {"offset": page * self.PAGE_SIZE, "length": self.PAGE_SIZE}
            )
            batch = json_objects(data.get("domains"))
            domains.extend(batch)

            total = to_int(json_object(data.get("info")).get("domain_total"))
            if not batch or total is None or len(domains) >= total:
                break

        return [
            DomainItem(
                provider=self.provider,
                name=d.get("name", ""),
                provider_id=str(d.get("id", "")),
                records_count=to_int(d.get("records")),
                last_changed_at=to_rfc3339(d.get("updated_on")),
            )
            for d in domains
        ]

    def list_records(self, zone_id: str, zone_name: str) -> list[DnsRecord]:
        records: list[dict] = []
        for page in range(self.MAX_PAGES):
            data = self._call(
                "/Record.List",
                {
                    "domain_id": zone_id,
                    "offset": page * self.PAGE_SIZE,
                    "length": self.PAGE_SIZE,
                },
            )
            batch = json_objects(data.get("records"))
            records.extend(batch)

            total = to_int(json_object(data.get("info")).get("records_num"))
            if not batch or total is None or len(records) >= total:
                break

        return [self._to_record(r, zone_name) for r in records]

    def _create_record(
        self, zone_id: str, zone_name: str, req: RecordCreateRequest
    ) -> DnsRecord:
        data = self._call(
            "/Record.Create",
            self._record_params(zone_id, req),
            error_code=ErrorCode.CREATE_FAILED,
        )
        return self._to_record(json_object(data.get("record")), zone_name, req)

    def update_record(
        self, zone_id: str, zone_name: str, req: RecordUpdateRequest
    ) -> DnsRecord:
        params = self._record_params(zone_id, req)
        params["record_id"] = req.id
        data = self._call("/Record.Modify", params, error_code=ErrorCode.UPDATE_FAILED)

        record = self._to_record(json_object(data.get("record")), zone_name, req)
        self.logger.info(f"✓ Updated {record.record_type} {record.name} in {zone_name}")
        return record

    def delete_record(self, zone_id: str, record_id: str, zone_name: str = "") -> None:
        self._call(
            "/Record.Remove",
            {"domain_id": zone_id, "record_id": record_id},
            error_code=ErrorCode.DELETE_FAILED,
        )
        self.logger.info(f"✓ Deleted record {record_id}")

    # ==========================================================================
    # Payload translation
    # ==========================================================================

    def _record_params(
        self, zone_id: str, req: Union[RecordCreateRequest, RecordUpdateRequest]
    ) -> dict[str, Any]:
        record_type = req.record_type.upper()
        params: dict[str, Any] = {
            "domain_id": zone_id,
            "sub_domain": req.name,
            "record_type": record_type,
            "record_line": DEFAULT_LINE,
            "value": encode_request_value(req),
            "ttl": req.ttl,
        }
        if record_type == RecordType.MX.value and req.mx_priority is not None:
            params["mx"] = req.mx_priority
        return params

    def _to_record(
        self,
        item: dict,
        zone_name: str,
        req: Optional[Union[RecordCreateRequest, RecordUpdateRequest]] = None,
    ) -> DnsRecord:
        """
        Build a DnsRecord from a DNSPod record object.

        Create and modify only echo back the id and name, so missing fields
        are filled in from the request that was sent.
        """
        record_type = item.get("type") or (req.record_type if req else "A")
        raw_value = item.get("value")
        if raw_value is None and req is not None:
            raw_value = encode_request_value(req)
        value = decode_value(record_type, raw_value or "")

        ttl = to_int(item.get("ttl"))
        if ttl is None and req is not None:
            ttl = req.ttl
        mx = to_int(item.get("mx"))
        if mx is None and req is not None:
            mx = req.mx_priority

        name = item.get("name") or (req.name if req else "")

        return DnsRecord(
            id=str(item.get("id", "")),
            provider=self.provider,
            domain=zone_name,
            record_type=record_type,
            name=relative_name(zone_name, name),
            content=value.content,
            ttl=ttl or 0,
            mx_priority=mx,
            srv_priority=value.srv_priority,
            srv_weight=value.srv_weight,
            srv_port=value.srv_port,
            caa_flags=value.caa_flags,
            caa_tag=value.caa_tag,
        )

"""
Tencent Cloud DNSPod Provider Client

API 3.0 (dnspod.tencentcloudapi.com, version 2021-03-23). Every call is a
JSON POST to "/" naming its action in X-TC-Action, signed with
TC3-HMAC-SHA256.
"""

import json
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
from ..names import APEX, relative_name
from ..signing import TENCENT_API_VERSION
from .base import ProviderClient, to_rfc3339

DEFAULT_LINE = "默认"

# Returned instead of an empty list by DescribeRecordList
NO_RECORDS_CODE = "ResourceNotFound.NoDataOfRecord"


def domain_selector(zone_id: str, zone_name: str) -> dict[str, Any]:
    """Domain (required) plus DomainId when the zone id is numeric"""
    name = (zone_name or "").strip()
    if not name and "." in (zone_id or ""):
        name = zone_id.strip()
    if not name:
        raise DnsError(ErrorCode.INVALID_INPUT, "Tencent Cloud needs the domain name")

    selector: dict[str, Any] = {"Domain": name}
    domain_id = to_int(zone_id)
    if domain_id:
        selector["DomainId"] = domain_id
    return selector


class TencentCloudClient(ProviderClient):
    """Tencent Cloud DNSPod (API 3.0) client"""

    provider = Provider.TENCENTCLOUD
    api_base = "https://dnspod.tencentcloudapi.com"

    DOMAIN_PAGE_SIZE = 200
    RECORD_PAGE_SIZE = 500

    def _call(
        self, action: str, params: dict[str, Any], error_code: str = ErrorCode.FETCH_FAILED
    ) -> dict:
        body = json.dumps(params, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
        payload = self._api_request(
            "POST",
            "/",
            body=body,
            headers={"X-TC-Action": action, "X-TC-Version": TENCENT_API_VERSION},
            error_code=error_code,
        )
        return json_object(payload.get("Response"))

    def _envelope_error(self, payload: Any, error_code: str) -> Optional[DnsError]:
        if not isinstance(payload, dict):
            return None
        error = json_object(payload.get("Response")).get("Error")
        if not isinstance(error, dict):
            return None
        code = error.get("Code") or "FailedOperation"
        message = error.get("Message") or "Tencent Cloud request failed"
        return from_provider_code(code, f"{code}: {message}", error_code)

    def test(self) -> None:
        self._call("DescribeDomainList", {"Offset": 0, "Limit": 1})

    def list_domains(self) -> list[DomainItem]:
        domains: list[dict] = []
        for page in range(self.MAX_PAGES):
            response = self._call(
                "DescribeDomainList",
                {"Offset": page * self.DOMAIN_PAGE_SIZE, "Limit": self.DOMAIN_PAGE_SIZE},
            )
            batch = json_objects(response.get("DomainList"))
            domains.extend(batch)

            total = to_int(json_object(response.get("DomainCountInfo")).get("AllTotal"))
            if not batch or total is None or len(domains) >= total:
                break

        return [
            DomainItem(
                provider=self.provider,
                name=str(d.get("Name", "")),
                provider_id=str(d.get("DomainId", "")),
                records_count=to_int(d.get("RecordCount")),
                last_changed_at=to_rfc3339(d.get("UpdatedOn")),
            )
            for d in domains
        ]

    def list_records(self, zone_id: str, zone_name: str) -> list[DnsRecord]:
        selector = domain_selector(zone_id, zone_name)
        items: list[dict] = []
        for page in range(self.MAX_PAGES):
            try:
                response = self._call(
                    "DescribeRecordList",
                    {
                        **selector,
                        "Offset": page * self.RECORD_PAGE_SIZE,
                        "Limit": self.RECORD_PAGE_SIZE,
                    },
                )
            except DnsError as e:
                if e.provider_code == NO_RECORDS_CODE:
                    break
                raise

            batch = json_objects(response.get("RecordList"))
            items.extend(batch)

            total = to_int(json_object(response.get("RecordCountInfo")).get("TotalCount"))
            if not batch or total is None or len(items) >= total:
                break

        return [
            self._to_record(item, zone_name) for item in items if item.get("RecordId") is not None
        ]

    def _create_record(
        self, zone_id: str, zone_name: str, req: RecordCreateRequest
    ) -> DnsRecord:
        response = self._call(
            "CreateRecord",
            self._record_params(zone_id, zone_name, req),
            error_code=ErrorCode.CREATE_FAILED,
        )
        return self._from_request(str(response.get("RecordId", "")), zone_name, req)

    def update_record(
        self, zone_id: str, zone_name: str, req: RecordUpdateRequest
    ) -> DnsRecord:
        params = self._record_params(zone_id, zone_name, req)
        params["RecordId"] = self._record_id(req.id)
        response = self._call("ModifyRecord", params, error_code=ErrorCode.UPDATE_FAILED)

        record = self._from_request(str(response.get("RecordId") or req.id), zone_name, req)
        self.logger.info(f"✓ Updated {record.record_type} {record.name} in {zone_name}")
        return record

    def delete_record(self, zone_id: str, record_id: str, zone_name: str = "") -> None:
        params = domain_selector(zone_id, zone_name)
        params["RecordId"] = self._record_id(record_id)
        self._call("DeleteRecord", params, error_code=ErrorCode.DELETE_FAILED)
        self.logger.info(f"✓ Deleted record {record_id}")

    # ==========================================================================
    # Payload translation
    # ==========================================================================

    @staticmethod
    def _record_id(value: str) -> int:
        record_id = to_int(value)
        if record_id is None:
            raise DnsError(ErrorCode.INVALID_INPUT, f"Invalid Tencent Cloud record id: {value!r}")
        return record_id

    def _record_params(
        self,
        zone_id: str,
        zone_name: str,
        req: Union[RecordCreateRequest, RecordUpdateRequest],
    ) -> dict[str, Any]:
        record_type = req.record_type.upper()
        params = domain_selector(zone_id, zone_name)
        params.update(
            {
                "SubDomain": req.name.strip() or APEX,
                "RecordType": record_type,
                "RecordLine": DEFAULT_LINE,
                "Value": encode_request_value(req),
                "TTL": req.ttl,
            }
        )
        if record_type == RecordType.MX.value:
            if req.mx_priority is None:
                raise DnsError(ErrorCode.MISSING_FIELD, "MX record requires mx_priority")
            params["MX"] = req.mx_priority
        return params

    def _from_request(
        self,
        record_id: str,
        zone_name: str,
        req: Union[RecordCreateRequest, RecordUpdateRequest],
    ) -> DnsRecord:
        value = decode_value(req.record_type, encode_request_value(req))
        return DnsRecord(
            id=record_id,
            provider=self.provider,
            domain=zone_name,
            record_type=req.record_type,
            name=relative_name(zone_name, req.name),
            content=value.content,
            ttl=req.ttl,
            mx_priority=req.mx_priority,
            srv_priority=value.srv_priority,
            srv_weight=value.srv_weight,
            srv_port=value.srv_port,
            caa_flags=value.caa_flags,
            caa_tag=value.caa_tag,
        )

    def _to_record(self, item: dict, zone_name: str) -> DnsRecord:
        record_type = str(item.get("Type") or "A")
        value = decode_value(record_type, str(item.get("Value") or ""))
        ttl = to_int(item.get("TTL"))

        return DnsRecord(
            id=str(item.get("RecordId")),
            provider=self.provider,
            domain=zone_name,
            record_type=record_type,
            name=relative_name(zone_name, str(item.get("Name") or APEX)),
            content=value.content,
            ttl=ttl if ttl is not None else 600,
            mx_priority=to_int(item.get("MX")),
            srv_priority=value.srv_priority,
            srv_weight=value.srv_weight,
            srv_port=value.srv_port,
            caa_flags=value.caa_flags,
            caa_tag=value.caa_tag,
        )

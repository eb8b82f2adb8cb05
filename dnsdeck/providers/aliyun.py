"""
Aliyun DNS Provider Client

RPC-style API (alidns 2015-01-09): every call is a signed GET whose query
string carries the action and its parameters.
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


class AliyunClient(ProviderClient):
    """Aliyun (Alibaba Cloud) DNS client"""

    provider = Provider.ALIYUN
    api_base = "https://alidns.aliyuncs.com"

    DOMAIN_PAGE_SIZE = 100
    RECORD_PAGE_SIZE = 500

    def _call(
        self, action: str, params: dict[str, Any], error_code: str = ErrorCode.FETCH_FAILED
    ) -> dict:
        query = {"Action": action}
        query.update({k: str(v) for k, v in params.items() if v is not None})
        return self._api_request("GET", "/", params=query, error_code=error_code)

    def _envelope_error(self, payload: Any, error_code: str) -> Optional[DnsError]:
        if isinstance(payload, dict) and payload.get("Code"):
            return from_provider_code(payload["Code"], payload.get("Message"), error_code)
        return None

    def _paged(self, action: str, params: dict, page_size: int, *keys: str) -> list[dict]:
        """Collect every page of a Describe* action; `keys` lead to the item list"""
        items: list[dict] = []
        for page in range(1, self.MAX_PAGES + 1):
            data = self._call(action, {**params, "PageNumber": page, "PageSize": page_size})

            batch: Any = data
            for key in keys:
                batch = json_object(batch).get(key)
            batch = json_objects(batch)
            items.extend(batch)

            total = to_int(data.get("TotalCount"))
            if not batch or total is None or len(items) >= total:
                break
        return items

    def test(self) -> None:
        self._call("DescribeDomains", {"PageNumber": 1, "PageSize": 1})

    def list_domains(self) -> list[DomainItem]:
        domains = self._paged(
            "DescribeDomains", {}, self.DOMAIN_PAGE_SIZE, "Domains", "Domain"
        )
        return [
            DomainItem(
                provider=self.provider,
                name=d.get("DomainName", ""),
                provider_id=str(d.get("DomainId", "")),
                records_count=to_int(d.get("RecordCount")),
                last_changed_at=to_rfc3339(d.get("UpdateTime")),
            )
            for d in domains
        ]

    def list_records(self, zone_id: str, zone_name: str) -> list[DnsRecord]:
        items = self._paged(
            "DescribeDomainRecords",
            {"DomainName": zone_name},
            self.RECORD_PAGE_SIZE,
            "DomainRecords",
            "Record",
        )
        return [self._to_record(item, zone_name) for item in items]

    def _create_record(
        self, zone_id: str, zone_name: str, req: RecordCreateRequest
    ) -> DnsRecord:
        params = self._record_params(req)
        params["DomainName"] = zone_name
        data = self._call("AddDomainRecord", params, error_code=ErrorCode.CREATE_FAILED)
        return self._from_request(str(data.get("RecordId", "")), zone_name, req)

    def update_record(
        self, zone_id: str, zone_name: str, req: RecordUpdateRequest
    ) -> DnsRecord:
        params = self._record_params(req)
        params["RecordId"] = req.id
        self._call("UpdateDomainRecord", params, error_code=ErrorCode.UPDATE_FAILED)

        self.logger.info(f"✓ Updated {req.record_type.upper()} {req.name} in {zone_name}")
        return self._from_request(req.id, zone_name, req)

    def delete_record(self, zone_id: str, record_id: str, zone_name: str = "") -> None:
        self._call(
            "DeleteDomainRecord", {"RecordId": record_id}, error_code=ErrorCode.DELETE_FAILED
        )
        self.logger.info(f"✓ Deleted record {record_id}")

    # ==========================================================================
    # Payload translation
    # ==========================================================================

    def _record_params(
        self, req: Union[RecordCreateRequest, RecordUpdateRequest]
    ) -> dict[str, Any]:
        record_type = req.record_type.upper()
        params: dict[str, Any] = {
            "RR": req.name,
            "Type": record_type,
            "Value": encode_request_value(req),
            "TTL": req.ttl,
        }
        if record_type == RecordType.MX.value and req.mx_priority is not None:
            params["Priority"] = req.mx_priority
        return params

    def _from_request(
        self,
        record_id: str,
        zone_name: str,
        req: Union[RecordCreateRequest, RecordUpdateRequest],
    ) -> DnsRecord:
        """Write calls only return the record id; echo the request back"""
        return DnsRecord(
            id=record_id,
            provider=self.provider,
            domain=zone_name,
            record_type=req.record_type,
            name=relative_name(zone_name, req.name),
            content=req.content,
            ttl=req.ttl,
            mx_priority=req.mx_priority,
            srv_priority=req.srv_priority,
            srv_weight=req.srv_weight,
            srv_port=req.srv_port,
            caa_flags=req.caa_flags,
            caa_tag=req.caa_tag,
        )

    def _to_record(self, item: dict, zone_name: str) -> DnsRecord:
        record_type = str(item.get("Type", ""))
        value = decode_value(record_type, item.get("Value") or "")

        return DnsRecord(
            id=str(item.get("RecordId", "")),
            provider=self.provider,
            domain=zone_name,
            record_type=record_type,
            name=relative_name(zone_name, item.get("RR", "")),
            content=value.content,
            ttl=to_int(item.get("TTL")) or 0,
            mx_priority=to_int(item.get("Priority")),
            srv_priority=value.srv_priority,
            srv_weight=value.srv_weight,
            srv_port=value.srv_port,
            caa_flags=value.caa_flags,
            caa_tag=value.caa_tag,
        )

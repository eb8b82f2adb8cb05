"""
Rainyun DNS Provider Client

The Rainyun API is loosely typed: field names and the location of the item
list vary between endpoints and versions, so responses are read through
ordered candidate-key lookups instead of fixed schemas.
"""

from typing import Any, Iterable, Optional, Union

from ..codec import decode_value, encode_request_value, to_int
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

DEFAULT_LINE = "DEFAULT"
PRODUCT_TYPE = "rcs"
DEFAULT_TTL = 600

DOMAIN_NAME_KEYS = ("domain", "name", "domain_name")
DOMAIN_ID_KEYS = ("id", "domain_id", "domainId")
RECORD_COUNT_KEYS = ("record_count", "records_count", "recordCount")
LAST_CHANGED_KEYS = ("updated_at", "update_time", "updatedAt")
RECORD_ID_KEYS = ("record_id", "id")
RECORD_TYPE_KEYS = ("type", "record_type", "recordType")
HOST_KEYS = ("host", "name", "rr")
VALUE_KEYS = ("value", "content")
MX_KEYS = ("level", "mx", "priority", "mx_priority")
SRV_PRIORITY_KEYS = ("srv_priority", "priority")
SRV_WEIGHT_KEYS = ("srv_weight", "weight")
SRV_PORT_KEYS = ("srv_port", "port")
CAA_FLAGS_KEYS = ("caa_flags", "flags")
CAA_TAG_KEYS = ("caa_tag", "tag")
TOTAL_KEYS = ("TotalRecords", "total", "count")

# Paths to the item list, tried in order
ARRAY_PATHS = (
    ("data",),
    ("data", "data"),
    ("data", "list"),
    ("data", "Records"),
    ("list",),
    ("records",),
    ("items",),
)


def extract_array(payload: Any) -> list[dict]:
    """Find the item list in a response of unknown shape"""
    if isinstance(payload, list):
        return [item for item in payload if isinstance(item, dict)]

    for path in ARRAY_PATHS:
        node = payload
        for key in path:
            node = node.get(key) if isinstance(node, dict) else None
        if isinstance(node, list):
            return [item for item in node if isinstance(item, dict)]
    return []


def extract_string(item: dict, keys: Iterable[str]) -> Optional[str]:
    """First candidate key holding a string or a number, as a string"""
    for key in keys:
        value = item.get(key)
        if isinstance(value, bool):
            continue
        if isinstance(value, str):
            return value
        if isinstance(value, int):
            return str(value)
    return None


def extract_int(item: dict, keys: Iterable[str]) -> Optional[int]:
    """First candidate key that converts to an int"""
    for key in keys:
        value = to_int(item.get(key))
        if value is not None:
            return value
    return None


def parse_id(value: str) -> int:
    try:
        return int(str(value).strip())
    except ValueError:
        raise DnsError(ErrorCode.INVALID_INPUT, f"Invalid Rainyun id: {value!r}")


class RainyunClient(ProviderClient):
    """Rainyun DNS client"""

    provider = Provider.RAINYUN
    api_base = "https://api.v2.rainyun.com"

    PAGE_SIZE = 500
    ACCEPTS_JSON_ARRAY = True

    def _envelope_error(self, payload: Any, error_code: str) -> Optional[DnsError]:
        if not isinstance(payload, dict):
            return None
        code = to_int(payload.get("code"))
        if code is None or code in (0, 200):
            return None
        message = payload.get("message") or payload.get("msg")
        return from_provider_code(code, message, error_code)

    def test(self) -> None:
        self._api_request("GET", "/product/domain/", params={"options": "{}"})

    def list_domains(self) -> list[DomainItem]:
        payload = self._api_request("GET", "/product/domain/", params={"options": "{}"})

        domains = []
        for item in extract_array(payload):
            name = extract_string(item, DOMAIN_NAME_KEYS)
            domain_id = extract_string(item, DOMAIN_ID_KEYS)
            if name is None or domain_id is None:
                self.logger.debug(f"Skipping Rainyun domain without name or id: {item}")
                continue
            domains.append(
                DomainItem(
                    provider=self.provider,
                    name=name,
                    provider_id=domain_id,
                    records_count=extract_int(item, RECORD_COUNT_KEYS),
                    last_changed_at=to_rfc3339(extract_string(item, LAST_CHANGED_KEYS)),
                )
            )
        return domains

    def list_records(self, zone_id: str, zone_name: str) -> list[DnsRecord]:
        items: list[dict] = []
        for page in range(1, self.MAX_PAGES + 1):
            payload = self._api_request(
                "GET",
                f"/product/domain/{zone_id}/dns/",
                params={"limit": self.PAGE_SIZE, "page_no": page},
            )
            batch = extract_array(payload)
            items.extend(batch)

            data = payload.get("data") if isinstance(payload, dict) else None
            total = extract_int(data, TOTAL_KEYS) if isinstance(data, dict) else None
            if len(batch) < self.PAGE_SIZE or (total is not None and len(items) >= total):
                break

        records = []
        for item in items:
            record = self._parse_record(item, zone_name)
            if record is None:
                self.logger.debug(f"Skipping incomplete Rainyun record: {item}")
                continue
            records.append(record)
        return records

    def _create_record(
        self, zone_id: str, zone_name: str, req: RecordCreateRequest
    ) -> DnsRecord:
        payload = self._api_request(
            "POST",
            f"/product/domain/{zone_id}/dns",
            json_data=self._payload(zone_id, req, record_id=0),
            error_code=ErrorCode.CREATE_FAILED,
        )
        return self._from_response(payload, zone_name, req, None)

    def update_record(
        self, zone_id: str, zone_name: str, req: RecordUpdateRequest
    ) -> DnsRecord:
        record_id = parse_id(req.id)
        payload = self._api_request(
            "PATCH",
            f"/product/domain/{zone_id}/dns",
            json_data=self._payload(zone_id, req, record_id=record_id),
            error_code=ErrorCode.UPDATE_FAILED,
        )
        record = self._from_response(payload, zone_name, req, str(record_id))
        self.logger.info(f"✓ Updated {record.record_type} {record.name} in {zone_name}")
        return record

    def delete_record(self, zone_id: str, record_id: str, zone_name: str = "") -> None:
        numeric_id = parse_id(record_id)
        self._api_request(
            "DELETE",
            f"/product/domain/{zone_id}/dns/",
            json_data={"record_id": numeric_id},
            error_code=ErrorCode.DELETE_FAILED,
        )
        self.logger.info(f"✓ Deleted record {record_id}")

    # ==========================================================================
    # Payload translation
    # ==========================================================================

    def _payload(
        self,
        zone_id: str,
        req: Union[RecordCreateRequest, RecordUpdateRequest],
        record_id: int,
    ) -> dict[str, Any]:
        record_type = req.record_type.upper()
        level = req.mx_priority if record_type == RecordType.MX.value else None
        return {
            "host": req.name,
            "level": level or 0,
            "line": DEFAULT_LINE,
            "rain_product_id": parse_id(zone_id),
            "rain_product_type": PRODUCT_TYPE,
            "record_id": record_id,
            "ttl": req.ttl,
            "type": record_type,
            "value": encode_request_value(req),
        }

    def _parse_record(self, item: dict, zone_name: str) -> Optional[DnsRecord]:
        """
        Read one record; None when id, type, host or value is missing.

        Structured SRV/CAA keys win over fields decoded from the flat value.
        """
        record_id = extract_string(item, RECORD_ID_KEYS)
        record_type = extract_string(item, RECORD_TYPE_KEYS)
        host = extract_string(item, HOST_KEYS)
        raw_value = extract_string(item, VALUE_KEYS)
        if record_id is None or record_type is None or host is None or raw_value is None:
            return None

        record_type = record_type.upper()
        value = decode_value(record_type, raw_value)

        def structured(keys: Iterable[str], fallback: Optional[int]) -> Optional[int]:
            found = extract_int(item, keys)
            return found if found is not None else fallback

        ttl = extract_int(item, ("ttl",))
        return DnsRecord(
            id=record_id,
            provider=self.provider,
            domain=zone_name,
            record_type=record_type,
            name=relative_name(zone_name, host),
            content=value.content,
            ttl=ttl if ttl is not None else DEFAULT_TTL,
            mx_priority=extract_int(item, MX_KEYS),
            srv_priority=structured(SRV_PRIORITY_KEYS, value.srv_priority),
            srv_weight=structured(SRV_WEIGHT_KEYS, value.srv_weight),
            srv_port=structured(SRV_PORT_KEYS, value.srv_port),
            caa_flags=structured(CAA_FLAGS_KEYS, value.caa_flags),
            caa_tag=extract_string(item, CAA_TAG_KEYS) or value.caa_tag,
        )

    def _from_response(
        self,
        payload: Any,
        zone_name: str,
        req: Union[RecordCreateRequest, RecordUpdateRequest],
        record_id: Optional[str],
    ) -> DnsRecord:
        """Parse the echoed record if there is one, else echo the request"""
        data = payload.get("data") if isinstance(payload, dict) else None
        candidates = []
        if isinstance(data, dict):
            candidates.extend([data.get("record"), data])
        candidates.append(payload)

        for candidate in candidates:
            if isinstance(candidate, dict):
                record = self._parse_record(candidate, zone_name)
                if record is not None:
                    return record

        if record_id is None and isinstance(data, (int, str)) and to_int(data) is not None:
            record_id = str(data)

        return DnsRecord(
            id=record_id or "0",
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

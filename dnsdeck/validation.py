"""
Record request validation.

Runs before any network I/O so that malformed input never reaches a provider.
"""

import ipaddress
from typing import Any, Optional, Union

from .errors import DnsError, ErrorCode
from .models import RecordCreateRequest, RecordType, RecordUpdateRequest
from .names import is_srv_host

MIN_TTL = 60
MAX_TTL = 86400
MAX_U16 = 65535
MAX_CAA_FLAGS = 255

RECORD_TYPES = {t.value for t in RecordType}


def _check_range(value: Optional[int], field_name: str, upper: int) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= upper:
        raise DnsError(
            ErrorCode.INVALID_INPUT, f"{field_name} must be between 0 and {upper}"
        )


def _require(value: Any, field_name: str, record_type: str) -> None:
    if value is None:
        raise DnsError(
            ErrorCode.MISSING_FIELD, f"{field_name} is required for {record_type} records"
        )


def validate_record(req: Union[RecordCreateRequest, RecordUpdateRequest]) -> None:
    """Raise DnsError if the request cannot be sent to any provider"""
    record_type = (req.record_type or "").strip().upper()
    if record_type not in RECORD_TYPES:
        raise DnsError(ErrorCode.INVALID_TYPE, f"Unsupported record type: {req.record_type}")

    if not (req.name or "").strip():
        raise DnsError(ErrorCode.INVALID_NAME, "Record name must not be empty")

    content = (req.content or "").strip()
    if not content:
        raise DnsError(ErrorCode.INVALID_CONTENT, "Record content must not be empty")

    if isinstance(req.ttl, bool) or not isinstance(req.ttl, int) or not MIN_TTL <= req.ttl <= MAX_TTL:
        raise DnsError(
            ErrorCode.INVALID_TTL, f"TTL must be between {MIN_TTL} and {MAX_TTL}"
        )

    if record_type == RecordType.A.value:
        try:
            ipaddress.IPv4Address(content)
        except ValueError:
            raise DnsError(ErrorCode.INVALID_CONTENT, f"Invalid IPv4 address: {content}")

    elif record_type == RecordType.AAAA.value:
        try:
            ipaddress.IPv6Address(content)
        except ValueError:
            raise DnsError(ErrorCode.INVALID_CONTENT, f"Invalid IPv6 address: {content}")

    elif record_type in (RecordType.CNAME.value, RecordType.NS.value):
        if "." not in content:
            raise DnsError(
                ErrorCode.INVALID_CONTENT, f"{record_type} target must be a domain name"
            )

    elif record_type == RecordType.MX.value:
        _require(req.mx_priority, "mx_priority", record_type)
        _check_range(req.mx_priority, "mx_priority", MAX_U16)

    elif record_type == RecordType.SRV.value:
        for field_name in ("srv_priority", "srv_weight", "srv_port"):
            value = getattr(req, field_name)
            _require(value, field_name, record_type)
            _check_range(value, field_name, MAX_U16)
        if not is_srv_host(req.name):
            raise DnsError(
                ErrorCode.INVALID_NAME,
                f"SRV record name must look like _service._proto: {req.name}",
            )

    elif record_type == RecordType.CAA.value:
        if req.caa_tag is not None:
            tag = req.caa_tag.strip()
            if not tag or not tag.isascii() or not tag.isalnum():
                raise DnsError(ErrorCode.INVALID_CAA_TAG, f"Invalid CAA tag: {req.caa_tag!r}")
        _check_range(req.caa_flags, "caa_flags", MAX_CAA_FLAGS)


def validate_update(req: RecordUpdateRequest) -> None:
    if not (req.id or "").strip():
        raise DnsError(ErrorCode.MISSING_FIELD, "Record id is required for updates")
    validate_record(req)

"""
Record value codec.

Most providers store SRV and CAA data as one flat string. These helpers pack
the structured fields into that string and unpack them again; Cloudflare's
structured `data` objects are handled here as well.
"""

from dataclasses import dataclass
from typing import Any, Optional

from .models import RecordType

DEFAULT_CAA_TAG = "issue"
DEFAULT_CAA_FLAGS = 0


@dataclass
class RecordValue:
    """Content plus the structured fields decoded from a provider value"""

    content: str
    srv_priority: Optional[int] = None
    srv_weight: Optional[int] = None
    srv_port: Optional[int] = None
    caa_flags: Optional[int] = None
    caa_tag: Optional[str] = None


def to_int(value: Any) -> Optional[int]:
    """Lenient int conversion for optional numeric fields"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def json_object(value: Any) -> dict:
    """`value` if it is a decoded JSON object, else an empty dict"""
    return value if isinstance(value, dict) else {}


def json_objects(value: Any) -> list[dict]:
    """The JSON objects of a decoded list; anything else gives no items"""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def encode_srv(priority: Optional[int], weight: Optional[int], port: Optional[int], target: str) -> str:
    return f"{priority or 0} {weight or 0} {port or 0} {target}"


def encode_caa(flags: Optional[int], tag: Optional[str], value: str) -> str:
    if flags is None:
        flags = DEFAULT_CAA_FLAGS
    return f"{flags} {tag or DEFAULT_CAA_TAG} {value}"


def encode_value(
    record_type: str,
    content: str,
    srv_priority: Optional[int] = None,
    srv_weight: Optional[int] = None,
    srv_port: Optional[int] = None,
    caa_flags: Optional[int] = None,
    caa_tag: Optional[str] = None,
) -> str:
    """Flatten a record into the single value string most providers expect"""
    record_type = record_type.upper()
    if record_type == RecordType.SRV.value:
        return encode_srv(srv_priority, srv_weight, srv_port, content)
    if record_type == RecordType.CAA.value:
        return encode_caa(caa_flags, caa_tag, content)
    return content


def encode_request_value(req: Any) -> str:
    """encode_value() for a create or update request"""
    return encode_value(
        req.record_type,
        req.content,
        srv_priority=req.srv_priority,
        srv_weight=req.srv_weight,
        srv_port=req.srv_port,
        caa_flags=req.caa_flags,
        caa_tag=req.caa_tag,
    )


def decode_value(record_type: str, value: str) -> RecordValue:
    """
    Split a flat provider value back into content and structured fields.

    Too few tokens is not an error: the whole value becomes the content and
    every structured field stays None.
    """
    record_type = record_type.upper()
    value = value or ""
    parts = value.split()

    if record_type == RecordType.SRV.value and len(parts) >= 4:
        return RecordValue(
            content=" ".join(parts[3:]),
            srv_priority=to_int(parts[0]),
            srv_weight=to_int(parts[1]),
            srv_port=to_int(parts[2]),
        )

    if record_type == RecordType.CAA.value and len(parts) >= 3:
        return RecordValue(
            content=" ".join(parts[2:]),
            caa_flags=to_int(parts[0]),
            caa_tag=parts[1],
        )

    return RecordValue(content=value)


def decode_structured(record_type: str, data: Optional[dict[str, Any]], fallback: str) -> RecordValue:
    """Read SRV/CAA fields from a structured `data` object (Cloudflare)"""
    record_type = record_type.upper()
    if not isinstance(data, dict):
        return RecordValue(content=fallback)

    if record_type == RecordType.SRV.value:
        target = data.get("target")
        return RecordValue(
            content=target if isinstance(target, str) else fallback,
            srv_priority=to_int(data.get("priority")),
            srv_weight=to_int(data.get("weight")),
            srv_port=to_int(data.get("port")),
        )

    if record_type == RecordType.CAA.value:
        value = data.get("value")
        tag = data.get("tag")
        return RecordValue(
            content=value if isinstance(value, str) else fallback,
            caa_flags=to_int(data.get("flags")),
            caa_tag=tag if isinstance(tag, str) else None,
        )

    return RecordValue(content=fallback)

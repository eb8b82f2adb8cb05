"""
Host name normalization.

Users work with zone-relative host labels ("@", "www", "_sip._tcp"); some
providers want fully qualified names instead. Conversion goes both ways.
"""

APEX = "@"

DEFAULT_SRV_SERVICE = "_service"
DEFAULT_SRV_PROTO = "_tcp"


def _strip_dot(name: str) -> str:
    return name.strip().rstrip(".")


def full_name(zone: str, host: str, trailing_dot: bool = False) -> str:
    """
    Expand a relative host label into an absolute name inside `zone`.

    "@" or empty gives the zone itself; a host already ending in the zone is
    kept; anything else gets the zone appended.
    """
    zone = _strip_dot(zone)
    host = _strip_dot(host)

    if not host or host == APEX or host.lower() == zone.lower():
        name = zone
    elif host.lower().endswith(f".{zone.lower()}"):
        name = host
    else:
        name = f"{host}.{zone}"

    return f"{name}." if trailing_dot else name


def relative_name(zone: str, name: str) -> str:
    """Reduce a provider name to a label relative to `zone` ("@" for the apex)"""
    zone = _strip_dot(zone)
    name = _strip_dot(name)

    if not name or name == APEX or name.lower() == zone.lower():
        return APEX

    suffix = f".{zone.lower()}"
    if zone and name.lower().endswith(suffix):
        return name[: -len(suffix)]

    return name


def same_host(zone: str, a: str, b: str) -> bool:
    """Compare two host labels after normalization"""
    return relative_name(zone, a).lower() == relative_name(zone, b).lower()


def is_srv_host(host: str) -> bool:
    """True when the first two labels look like `_service._proto`"""
    parts = _strip_dot(host).split(".")
    return len(parts) >= 2 and parts[0].startswith("_") and parts[1].startswith("_")


def srv_service_proto(host: str) -> tuple[str, str]:
    """Split `_service._proto[.name]` into its service and protocol labels"""
    if is_srv_host(host):
        parts = _strip_dot(host).split(".")
        return parts[0], parts[1]
    return DEFAULT_SRV_SERVICE, DEFAULT_SRV_PROTO

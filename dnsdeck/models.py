"""
Data models shared by all DNS provider clients.

Every value here is transient: built per call from request parameters and
provider responses, never persisted by this package.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class Provider(str, Enum):
    """Supported DNS providers"""

    CLOUDFLARE = "cloudflare"
    DNSPOD = "dnspod"
    ALIYUN = "aliyun"
    HUAWEI = "huawei"
    BAIDU = "baidu"
    DNSCOM = "dnscom"
    RAINYUN = "rainyun"
    TENCENTCLOUD = "tencentcloud"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def credential_fields(self) -> tuple[str, ...]:
        """Secret fields a credential bundle must carry for this provider"""
        return _CREDENTIAL_FIELDS[self]


_DISPLAY_NAMES = {
    Provider.CLOUDFLARE: "Cloudflare",
    Provider.DNSPOD: "DNSPod",
    Provider.ALIYUN: "Aliyun DNS",
    Provider.HUAWEI: "Huawei Cloud DNS",
    Provider.BAIDU: "Baidu Cloud DNS",
    Provider.DNSCOM: "DNS.COM",
    Provider.RAINYUN: "Rainyun DNS",
    Provider.TENCENTCLOUD: "Tencent Cloud DNS",
}

_CREDENTIAL_FIELDS = {
    Provider.CLOUDFLARE: ("email", "api_key"),
    Provider.DNSPOD: ("token_id", "token"),
    Provider.ALIYUN: ("access_key_id", "access_key_secret"),
    Provider.HUAWEI: ("token",),
    Provider.BAIDU: ("access_key_id", "secret_access_key"),
    Provider.DNSCOM: ("api_key", "api_secret"),
    Provider.RAINYUN: ("api_key",),
    Provider.TENCENTCLOUD: ("secret_id", "secret_key"),
}


class RecordType(str, Enum):
    """Record types that can be created and edited"""

    A = "A"
    AAAA = "AAAA"
    CNAME = "CNAME"
    TXT = "TXT"
    MX = "MX"
    NS = "NS"
    SRV = "SRV"
    CAA = "CAA"


def normalize_record_type(value: Any) -> str:
    """Canonical spelling of a record type: trimmed and upper case"""
    return str(value or "").strip().upper()


class DomainStatus(str, Enum):
    OK = "ok"
    AUTH_FAILED = "auth_failed"
    UNREACHABLE = "unreachable"
    FETCH_FAILED = "fetch_failed"
    NOT_CONFIGURED = "not_configured"


class ConflictStrategy(str, Enum):
    """What create does when a record with the same type and name exists"""

    DO_NOT_CREATE = "do_not_create"
    OVERWRITE = "overwrite"


@dataclass
class DomainItem:
    """A zone as listed by a provider, or a placeholder for a failed provider"""

    provider: Provider
    name: str
    provider_id: str
    status: DomainStatus = DomainStatus.OK
    records_count: Optional[int] = None
    last_changed_at: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider": self.provider.value,
            "name": self.name,
            "provider_id": self.provider_id,
            "status": self.status.value,
            "records_count": self.records_count,
            "last_changed_at": self.last_changed_at,
        }


@dataclass
class DnsRecord:
    """
    A DNS record in provider-neutral form.

    `name` is relative to the zone ("@" for the apex). Structured fields are
    only kept for the record type they belong to; the rest are forced to None
    so that 0 always means a real zero.
    """

    id: str
    provider: Provider
    domain: str
    record_type: str
    name: str
    content: str
    ttl: int
    mx_priority: Optional[int] = None
    srv_priority: Optional[int] = None
    srv_weight: Optional[int] = None
    srv_port: Optional[int] = None
    caa_flags: Optional[int] = None
    caa_tag: Optional[str] = None

    def __post_init__(self) -> None:
        self.record_type = normalize_record_type(self.record_type)
        if self.record_type != RecordType.MX.value:
            self.mx_priority = None
        if self.record_type != RecordType.SRV.value:
            self.srv_priority = None
            self.srv_weight = None
            self.srv_port = None
        if self.record_type != RecordType.CAA.value:
            self.caa_flags = None
            self.caa_tag = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "provider": self.provider.value,
            "domain": self.domain,
            "record_type": self.record_type,
            "name": self.name,
            "content": self.content,
            "ttl": self.ttl,
            "mx_priority": self.mx_priority,
            "srv_priority": self.srv_priority,
            "srv_weight": self.srv_weight,
            "srv_port": self.srv_port,
            "caa_flags": self.caa_flags,
            "caa_tag": self.caa_tag,
        }


@dataclass
class RecordCreateRequest:
    record_type: str
    name: str
    content: str
    ttl: int = 600
    conflict_strategy: ConflictStrategy = ConflictStrategy.DO_NOT_CREATE
    mx_priority: Optional[int] = None
    srv_priority: Optional[int] = None
    srv_weight: Optional[int] = None
    srv_port: Optional[int] = None
    caa_flags: Optional[int] = None
    caa_tag: Optional[str] = None

    def __post_init__(self) -> None:
        self.record_type = normalize_record_type(self.record_type)

    def as_update(self, record_id: str) -> "RecordUpdateRequest":
        """Carry the new field values over onto an existing record id"""
        return RecordUpdateRequest(
            id=record_id,
            record_type=self.record_type,
            name=self.name,
            content=self.content,
            ttl=self.ttl,
            mx_priority=self.mx_priority,
            srv_priority=self.srv_priority,
            srv_weight=self.srv_weight,
            srv_port=self.srv_port,
            caa_flags=self.caa_flags,
            caa_tag=self.caa_tag,
        )


@dataclass
class RecordUpdateRequest:
    id: str
    record_type: str
    name: str
    content: str
    ttl: int = 600
    mx_priority: Optional[int] = None
    srv_priority: Optional[int] = None
    srv_weight: Optional[int] = None
    srv_port: Optional[int] = None
    caa_flags: Optional[int] = None
    caa_tag: Optional[str] = None

    def __post_init__(self) -> None:
        self.record_type = normalize_record_type(self.record_type)


@dataclass
class ProviderCredential:
    """Decrypted secret bundle handed over by the credential store"""

    provider: Provider
    secrets: dict[str, str] = field(default_factory=dict, repr=False)
    last_verified_at: Optional[str] = None

    def get(self, key: str) -> str:
        return self.secrets.get(key, "")

    def missing_fields(self) -> list[str]:
        return [
            name
            for name in self.provider.credential_fields
            if not self.secrets.get(name, "").strip()
        ]


@dataclass
class IntegrationTestResult:
    ok: bool
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"ok": self.ok, "message": self.message}

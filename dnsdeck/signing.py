"""
Request signing strategies.

Each provider authenticates requests its own way. Every strategy below takes
an unsigned ApiRequest and returns a new, authenticated one; none of them keep
state between calls. Clock and nonce sources are injectable so signatures can
be checked against known vectors.
"""

import base64
import hashlib
import hmac
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional
from urllib.parse import quote

from .errors import DnsError, ErrorCode
from .models import Provider, ProviderCredential

Clock = Callable[[], datetime]
NonceSource = Callable[[], str]

ISO_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

ALIYUN_API_VERSION = "2015-01-09"

BAIDU_HOST = "dns.baidubce.com"
BAIDU_SIGN_EXPIRES = 1800
BAIDU_SIGNED_HEADERS = ("host", "x-bce-date")

TENCENT_HOST = "dnspod.tencentcloudapi.com"
TENCENT_SERVICE = "dnspod"
TENCENT_API_VERSION = "2021-03-23"
TENCENT_CONTENT_TYPE = "application/json; charset=utf-8"
TENCENT_ALGORITHM = "TC3-HMAC-SHA256"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def random_nonce() -> str:
    return uuid.uuid4().hex


@dataclass
class ApiRequest:
    """An HTTP request before (and after) authentication"""

    method: str
    url: str
    path: str = "/"
    params: dict[str, str] = field(default_factory=dict)
    data: Optional[dict[str, str]] = None
    body: Optional[bytes] = None
    json_data: Any = None
    headers: dict[str, str] = field(default_factory=dict)


# =============================================================================
# Canonicalization helpers
# =============================================================================


def percent_encode(value: str) -> str:
    """RFC 3986 encoding: space as %20, '*' as %2A, '~' left alone"""
    return quote(str(value), safe="~")


def canonical_query(params: Mapping[str, Any]) -> str:
    """Sorted, percent-encoded `k=v` pairs joined by '&'"""
    return "&".join(
        f"{percent_encode(k)}={percent_encode(v)}" for k, v in sorted(params.items())
    )


def hmac_sha256(key: bytes, message: str) -> bytes:
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()


def hmac_sha256_hex(key: bytes, message: str) -> str:
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).hexdigest()


def sha256_hex(payload: bytes) -> str:
    return hashlib.sha256(payload).hexdigest()


# =============================================================================
# Strategies
# =============================================================================


@dataclass(frozen=True)
class HeaderAuth:
    """Secrets passed verbatim in fixed header names"""

    headers: Mapping[str, str] = field(repr=False)

    def sign(self, request: ApiRequest) -> ApiRequest:
        return replace(request, headers={**request.headers, **self.headers})


@dataclass(frozen=True)
class FormTokenAuth:
    """DNSPod login token sent as a form field next to `format=json`"""

    login_token: str = field(repr=False)

    def sign(self, request: ApiRequest) -> ApiRequest:
        data = dict(request.data or {})
        data["login_token"] = self.login_token
        data["format"] = "json"
        return replace(request, data=data)


@dataclass(frozen=True)
class AliyunSigner:
    """
    Aliyun RPC signature (HMAC-SHA1 over the canonical query string).

    The signed query, Signature included, is written straight into the URL so
    that the encoding on the wire is exactly the one that was signed.
    """

    access_key_id: str
    access_key_secret: str = field(repr=False)
    clock: Clock = field(default=utc_now, repr=False, compare=False)
    nonce: NonceSource = field(default=random_nonce, repr=False, compare=False)

    def sign(self, request: ApiRequest) -> ApiRequest:
        params = {k: str(v) for k, v in request.params.items()}
        params.update(
            {
                "Format": "JSON",
                "Version": ALIYUN_API_VERSION,
                "AccessKeyId": self.access_key_id,
                "SignatureMethod": "HMAC-SHA1",
                "SignatureVersion": "1.0",
                "SignatureNonce": self.nonce(),
                "Timestamp": self.clock().astimezone(timezone.utc).strftime(ISO_TIMESTAMP_FORMAT),
            }
        )
        signature = self.signature(request.method, params)
        query = f"{canonical_query(params)}&Signature={percent_encode(signature)}"
        return replace(request, url=f"{request.url}?{query}", params={})

    def signature(self, method: str, params: Mapping[str, str]) -> str:
        string_to_sign = f"{method.upper()}&%2F&{percent_encode(canonical_query(params))}"
        key = f"{self.access_key_secret}&".encode("utf-8")
        digest = hmac.new(key, string_to_sign.encode("utf-8"), hashlib.sha1).digest()
        return base64.b64encode(digest).decode("ascii")


@dataclass(frozen=True)
class BaiduSigner:
    """Baidu Cloud `bce-auth-v1` Authorization header"""

    access_key_id: str
    secret_access_key: str = field(repr=False)
    clock: Clock = field(default=utc_now, repr=False, compare=False)
    host: str = BAIDU_HOST
    expires: int = BAIDU_SIGN_EXPIRES

    def sign(self, request: ApiRequest) -> ApiRequest:
        timestamp = self.clock().astimezone(timezone.utc).strftime(ISO_TIMESTAMP_FORMAT)
        headers = {**request.headers, "host": self.host, "x-bce-date": timestamp}
        headers["Authorization"] = self.authorization(request, timestamp)
        return replace(request, headers=headers)

    def authorization(self, request: ApiRequest, timestamp: str) -> str:
        auth_prefix = f"bce-auth-v1/{self.access_key_id}/{timestamp}/{self.expires}"
        signing_key = hmac_sha256(self.secret_access_key.encode("utf-8"), auth_prefix)

        signed = {"host": self.host, "x-bce-date": timestamp}
        canonical_headers = "\n".join(
            f"{percent_encode(name)}:{percent_encode(value.strip())}"
            for name, value in sorted(signed.items())
        )
        string_to_sign = "\n".join(
            [
                request.method.upper(),
                percent_encode(request.path),
                canonical_query(request.params),
                canonical_headers,
            ]
        )
        signature = hmac_sha256_hex(signing_key, string_to_sign)
        return f"{auth_prefix}//{';'.join(BAIDU_SIGNED_HEADERS)}/{signature}"


@dataclass(frozen=True)
class DnscomSigner:
    """DNS.COM: hex HMAC-SHA256 over `METHOD\\nPATH\\nsorted params`"""

    api_key: str
    api_secret: str = field(repr=False)
    clock: Clock = field(default=utc_now, repr=False, compare=False)

    def sign(self, request: ApiRequest) -> ApiRequest:
        uses_form = request.method.upper() != "GET"
        params = dict(request.data or {}) if uses_form else dict(request.params)
        params["api_key"] = self.api_key
        params["timestamp"] = str(int(self.clock().timestamp()))
        params["signature"] = self.signature(request.method, request.path, params)

        if uses_form:
            return replace(request, data=params)
        return replace(request, params=params)

    def signature(self, method: str, path: str, params: Mapping[str, str]) -> str:
        canonical = "&".join(f"{k}={v}" for k, v in sorted(params.items()))
        string_to_sign = f"{method.upper()}\n{path}\n{canonical}"
        return hmac_sha256_hex(self.api_secret.encode("utf-8"), string_to_sign)


@dataclass(frozen=True)
class TencentCloudSigner:
    """
    Tencent Cloud TC3-HMAC-SHA256.

    The timestamp is read once per request and shared by the credential
    scope, the string to sign and the X-TC-Timestamp header.
    """

    secret_id: str
    secret_key: str = field(repr=False)
    clock: Clock = field(default=utc_now, repr=False, compare=False)
    host: str = TENCENT_HOST
    service: str = TENCENT_SERVICE

    def sign(self, request: ApiRequest) -> ApiRequest:
        now = self.clock().astimezone(timezone.utc)
        timestamp = int(now.timestamp())
        payload = request.body or b""

        headers = {
            **request.headers,
            "Content-Type": TENCENT_CONTENT_TYPE,
            "Host": self.host,
            "X-TC-Timestamp": str(timestamp),
            "Authorization": self.authorization(request.method, payload, now),
        }
        return replace(request, headers=headers)

    def credential_scope(self, date: str) -> str:
        return f"{date}/{self.service}/tc3_request"

    def string_to_sign(self, method: str, payload: bytes, now: datetime) -> str:
        canonical_request = "\n".join(
            [
                method.upper(),
                "/",
                "",
                f"content-type:{TENCENT_CONTENT_TYPE}",
                f"host:{self.host}",
                "",
                "content-type;host",
                sha256_hex(payload),
            ]
        )
        return "\n".join(
            [
                TENCENT_ALGORITHM,
                str(int(now.timestamp())),
                self.credential_scope(now.strftime("%Y-%m-%d")),
                sha256_hex(canonical_request.encode("utf-8")),
            ]
        )

    def authorization(self, method: str, payload: bytes, now: datetime) -> str:
        date = now.strftime("%Y-%m-%d")
        secret_date = hmac_sha256(f"TC3{self.secret_key}".encode("utf-8"), date)
        secret_service = hmac_sha256(secret_date, self.service)
        secret_signing = hmac_sha256(secret_service, "tc3_request")
        signature = hmac_sha256_hex(secret_signing, self.string_to_sign(method, payload, now))
        return (
            f"{TENCENT_ALGORITHM} Credential={self.secret_id}/{self.credential_scope(date)}, "
            f"SignedHeaders=content-type;host, Signature={signature}"
        )


# =============================================================================
# Factory
# =============================================================================


def signer_for(
    credential: ProviderCredential,
    clock: Optional[Clock] = None,
    nonce: Optional[NonceSource] = None,
) -> Any:
    """Build the signing strategy for a credential bundle"""
    missing = credential.missing_fields()
    if missing:
        raise DnsError(
            ErrorCode.INVALID_INPUT,
            f"{credential.provider.display_name} credentials missing: {', '.join(missing)}",
        )

    clock = clock or utc_now
    nonce = nonce or random_nonce
    get = credential.get
    provider = credential.provider

    if provider == Provider.CLOUDFLARE:
        return HeaderAuth({"X-Auth-Email": get("email"), "X-Auth-Key": get("api_key")})
    if provider == Provider.HUAWEI:
        return HeaderAuth({"X-Auth-Token": get("token")})
    if provider == Provider.RAINYUN:
        return HeaderAuth({"x-api-key": get("api_key")})
    if provider == Provider.DNSPOD:
        return FormTokenAuth(f"{get('token_id')},{get('token')}")
    if provider == Provider.ALIYUN:
        return AliyunSigner(get("access_key_id"), get("access_key_secret"), clock, nonce)
    if provider == Provider.BAIDU:
        return BaiduSigner(get("access_key_id"), get("secret_access_key"), clock)
    if provider == Provider.DNSCOM:
        return DnscomSigner(get("api_key"), get("api_secret"), clock)
    if provider == Provider.TENCENTCLOUD:
        return TencentCloudSigner(get("secret_id"), get("secret_key"), clock)

    raise DnsError(ErrorCode.INVALID_INPUT, f"Unsupported provider: {provider}")

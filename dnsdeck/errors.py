"""
Error taxonomy for provider calls.

Every failure leaving this package is a DnsError carrying one of the codes
below. Transport failures, non-2xx responses and provider error envelopes are
all mapped here so that callers only ever branch on `code`.
"""

import logging
from typing import Any, Iterable, Optional

import requests

from .models import DomainStatus

logger = logging.getLogger(__name__)


class ErrorCode:
    """Closed set of error codes returned to callers"""

    AUTH_FAILED = "auth_failed"
    UNREACHABLE = "unreachable"
    TIMEOUT = "timeout"
    FETCH_FAILED = "fetch_failed"
    CREATE_FAILED = "create_failed"
    UPDATE_FAILED = "update_failed"
    DELETE_FAILED = "delete_failed"
    NOT_CONFIGURED = "not_configured"
    INVALID_INPUT = "invalid_input"
    INVALID_TYPE = "invalid_type"
    INVALID_CONTENT = "invalid_content"
    INVALID_TTL = "invalid_ttl"
    MISSING_FIELD = "missing_field"
    INVALID_NAME = "invalid_name"
    INVALID_CAA_TAG = "invalid_caa_tag"
    CONFLICT = "conflict"
    JSON_DECODE_FAILED = "json_decode_failed"
    SERIALIZE_ERROR = "serialize_error"
    HTTP_ERROR = "http_error"


# Substrings of provider error codes that mean the credentials or the
# signature were rejected
AUTH_CODE_FRAGMENTS = (
    "AccessKey",
    "Signature",
    "AuthFailure",
    "UnauthorizedOperation",
    "AccessDenied",
    "InvalidToken",
    "Unauthorized",
)

AUTH_HTTP_STATUSES = (401, 403)


class DnsError(Exception):
    """Provider or validation error with a stable code"""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: Optional[int] = None,
        provider_code: Optional[str] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        # Raw error code reported by the provider, when there is one
        self.provider_code = provider_code

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}

    @property
    def is_auth_failure(self) -> bool:
        return self.code == ErrorCode.AUTH_FAILED


def is_auth_code(code: Any, extra_codes: Iterable[str] = ()) -> bool:
    """Check a provider error code against known authentication failures"""
    if code is None:
        return False
    text = str(code)
    if text in {str(c) for c in extra_codes}:
        return True
    return any(fragment in text for fragment in AUTH_CODE_FRAGMENTS)


def from_request_exception(exc: requests.RequestException) -> DnsError:
    """Map a transport-level failure (no HTTP response) to an error"""
    # ConnectTimeout is both a Timeout and a ConnectionError; timeout wins
    if isinstance(exc, requests.Timeout):
        return DnsError(ErrorCode.TIMEOUT, f"Request timed out: {exc}")
    if isinstance(exc, requests.ConnectionError):
        return DnsError(ErrorCode.UNREACHABLE, f"Connection failed: {exc}")
    return DnsError(ErrorCode.HTTP_ERROR, f"Request failed: {exc}")


def from_http_status(
    status_code: int, reason: Optional[str], body: str, error_code: str
) -> DnsError:
    """Map a non-2xx response to an error, 401/403 being auth failures"""
    code = error_code
    if status_code in AUTH_HTTP_STATUSES:
        code = ErrorCode.AUTH_FAILED
    message = f"HTTP {status_code}: {reason or 'Unknown'} (response text: {body})"
    return DnsError(code, message, status_code)


def from_provider_code(
    provider_code: Any,
    message: Optional[str],
    error_code: str,
    extra_auth_codes: Iterable[str] = (),
) -> DnsError:
    """Map an error embedded in a 2xx response envelope"""
    code = (
        ErrorCode.AUTH_FAILED
        if is_auth_code(provider_code, extra_auth_codes)
        else error_code
    )
    text = message or str(provider_code or "Unknown error")
    return DnsError(
        code, text, provider_code=str(provider_code) if provider_code is not None else None
    )


def decode_failed(exc: Exception, body: str) -> DnsError:
    return DnsError(
        ErrorCode.JSON_DECODE_FAILED,
        f"Failed to decode response: {exc} (response text: {body})",
    )


def domain_status_for(error: DnsError) -> DomainStatus:
    """Status shown on the placeholder item of a provider that failed"""
    if error.code == ErrorCode.AUTH_FAILED:
        return DomainStatus.AUTH_FAILED
    if error.code in (ErrorCode.UNREACHABLE, ErrorCode.TIMEOUT):
        return DomainStatus.UNREACHABLE
    if error.code == ErrorCode.NOT_CONFIGURED:
        return DomainStatus.NOT_CONFIGURED
    return DomainStatus.FETCH_FAILED

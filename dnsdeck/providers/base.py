"""
Abstract DNS Provider Client

One uniform zone/record contract implemented against every provider API.
The base class owns the HTTP plumbing (signing, transport errors, status
mapping, JSON decoding) and the create-time conflict protocol; subclasses
only translate between provider payloads and the shared models.
"""

import logging
import re
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Optional

import requests

from ..config import AppConfig
from ..errors import (
    AUTH_HTTP_STATUSES,
    DnsError,
    ErrorCode,
    decode_failed,
    from_http_status,
    from_request_exception,
)
from ..models import (
    ConflictStrategy,
    DnsRecord,
    DomainItem,
    Provider,
    ProviderCredential,
    RecordCreateRequest,
    RecordUpdateRequest,
    normalize_record_type,
)
from ..names import same_host
from ..signing import ApiRequest, signer_for

logger = logging.getLogger(__name__)

RFC3339_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

_FRACTION_RE = re.compile(r"\.\d+")


def to_rfc3339(value: Any, naive_tz: timezone = timezone.utc) -> Optional[str]:
    """
    Normalize a provider timestamp to an RFC 3339 UTC string.

    Accepts RFC 3339 / ISO 8601 strings and "YYYY-MM-DD HH:MM:SS". Values
    without an offset are read in `naive_tz`. Unparseable text is returned
    unchanged; empty values give None.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None

    candidate = _FRACTION_RE.sub("", text, count=1)
    if candidate.endswith(("Z", "z")):
        candidate = candidate[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError:
        return text

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=naive_tz)
    return parsed.astimezone(timezone.utc).strftime(RFC3339_FORMAT)


class ProviderClient(ABC):
    """
    Base class for provider clients.

    A client is built per logical operation from one credential bundle and
    holds nothing else but its HTTP session and signing strategy.
    """

    provider: Provider
    api_base: str = ""

    # Upper bound on pages fetched by any pagination loop
    MAX_PAGES = 100

    # Whether a bare JSON array is a valid top-level response
    ACCEPTS_JSON_ARRAY = False

    def __init__(
        self,
        credential: ProviderCredential,
        config: Optional[AppConfig] = None,
        signer: Any = None,
    ):
        if credential.provider != self.provider:
            raise DnsError(
                ErrorCode.INVALID_INPUT,
                f"{self.__class__.__name__} cannot use {credential.provider.value} credentials",
            )
        self.config = config or AppConfig()
        self.signer = signer or signer_for(credential)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self._session = self._create_session()

    @property
    def display_name(self) -> str:
        return self.provider.display_name

    def _create_session(self) -> requests.Session:
        """Create configured requests session"""
        session = requests.Session()
        session.headers.update({"User-Agent": self.config.user_agent})
        return session

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "ProviderClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ==========================================================================
    # HTTP plumbing
    # ==========================================================================

    def _api_request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict] = None,
        data: Optional[dict] = None,
        json_data: Any = None,
        body: Optional[bytes] = None,
        headers: Optional[dict] = None,
        error_code: str = ErrorCode.FETCH_FAILED,
    ) -> Any:
        """Sign, send and decode one API call, mapping every failure to DnsError"""
        request = ApiRequest(
            method=method.upper(),
            url=f"{self.api_base}{path}",
            path=path,
            params={k: v for k, v in (params or {}).items() if v is not None},
            data=data,
            body=body,
            json_data=json_data,
            headers=dict(headers or {}),
        )
        signed = self.signer.sign(request)

        self.logger.debug(f"{signed.method} {self.api_base}{path}")

        try:
            response = self._session.request(
                method=signed.method,
                url=signed.url,
                params=signed.params or None,
                data=signed.data if signed.data is not None else signed.body,
                json=signed.json_data,
                headers=signed.headers,
                timeout=self.config.timeout,
            )
        except requests.RequestException as e:
            error = from_request_exception(e)
            self.logger.warning(f"{self.display_name} request failed: {error}")
            raise error

        if not 200 <= response.status_code < 300:
            error = self._http_error(response, error_code)
            self.logger.warning(f"{self.display_name} API error: {error}")
            raise error

        payload = self._decode(response)
        self._check_envelope(payload, error_code)
        return payload

    def _http_error(self, response: requests.Response, error_code: str) -> DnsError:
        """
        Map a non-2xx response.

        A provider error envelope in the body gives a better message than the
        status line; 401/403 are auth failures either way.
        """
        try:
            payload = response.json()
        except ValueError:
            payload = None

        error = self._envelope_error(payload, error_code) if payload is not None else None
        if error is None:
            return from_http_status(
                response.status_code, response.reason, response.text, error_code
            )

        if response.status_code in AUTH_HTTP_STATUSES:
            error.code = ErrorCode.AUTH_FAILED
        error.status_code = response.status_code
        return error

    def _decode(self, response: requests.Response) -> Any:
        if not response.content or not response.text.strip():
            return {}
        try:
            payload = response.json()
        except ValueError as e:
            raise decode_failed(e, response.text)

        if isinstance(payload, dict) or (self.ACCEPTS_JSON_ARRAY and isinstance(payload, list)):
            return payload
        raise decode_failed(
            ValueError(f"expected a JSON object, got {type(payload).__name__}"), response.text
        )

    def _check_envelope(self, payload: Any, error_code: str) -> None:
        error = self._envelope_error(payload, error_code)
        if error is not None:
            self.logger.warning(f"{self.display_name} API error: {error}")
            raise error

    def _envelope_error(self, payload: Any, error_code: str) -> Optional[DnsError]:
        """Error embedded in a decoded response body, if any"""
        return None

    # ==========================================================================
    # Abstract methods - must be implemented by providers
    # ==========================================================================

    @abstractmethod
    def test(self) -> None:
        """Make one cheap authenticated call; raise DnsError on failure"""

    @abstractmethod
    def list_domains(self) -> list[DomainItem]:
        """List every zone on the account, all pages flattened"""

    @abstractmethod
    def list_records(self, zone_id: str, zone_name: str) -> list[DnsRecord]:
        """List every record in a zone with names relative to the zone"""

    @abstractmethod
    def _create_record(
        self, zone_id: str, zone_name: str, req: RecordCreateRequest
    ) -> DnsRecord:
        """Create a record without any conflict check"""

    @abstractmethod
    def update_record(
        self, zone_id: str, zone_name: str, req: RecordUpdateRequest
    ) -> DnsRecord:
        """Replace the record identified by `req.id`"""

    @abstractmethod
    def delete_record(self, zone_id: str, record_id: str, zone_name: str = "") -> None:
        """Delete a record by its provider id"""

    # ==========================================================================
    # Conflict & write protocol
    # ==========================================================================

    def find_conflict_ids(
        self, zone_id: str, zone_name: str, record_type: str, host: str
    ) -> list[str]:
        """Ids of existing records with the same type and host"""
        record_type = normalize_record_type(record_type)
        return [
            record.id
            for record in self.list_records(zone_id, zone_name)
            if record.record_type == record_type and same_host(zone_name, record.name, host)
        ]

    def create_record(
        self, zone_id: str, zone_name: str, req: RecordCreateRequest
    ) -> DnsRecord:
        """
        Create a record, honouring the request's conflict strategy.

        With existing (type, name) matches, DO_NOT_CREATE fails with
        `conflict`; OVERWRITE updates the single match in place and refuses
        to choose when there are several.
        """
        conflicts = self.find_conflict_ids(zone_id, zone_name, req.record_type, req.name)

        if not conflicts:
            record = self._create_record(zone_id, zone_name, req)
            self.logger.info(f"✓ Created {record.record_type} {record.name} in {zone_name}")
            return record

        if req.conflict_strategy != ConflictStrategy.OVERWRITE:
            self.logger.info(
                f"{req.record_type.upper()} {req.name} already exists in {zone_name}, not creating"
            )
            raise DnsError(ErrorCode.CONFLICT, "Record already exists")

        if len(conflicts) > 1:
            raise DnsError(
                ErrorCode.CONFLICT,
                f"Multiple conflicting records found ({len(conflicts)}), refusing to overwrite",
            )

        self.logger.info(
            f"Overwriting {req.record_type.upper()} {req.name} in {zone_name} (id {conflicts[0]})"
        )
        return self.update_record(zone_id, zone_name, req.as_update(conflicts[0]))

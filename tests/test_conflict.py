"""Create-time conflict handling shared by every provider client."""

import pytest

from dnsdeck.errors import DnsError, ErrorCode
from dnsdeck.models import (
    ConflictStrategy,
    DnsRecord,
    Provider,
    RecordCreateRequest,
)
from dnsdeck.providers.base import ProviderClient, to_rfc3339


class InMemoryClient(ProviderClient):
    """Provider client backed by a list instead of an API"""

    provider = Provider.HUAWEI

    def __init__(self, credential, records):
        super().__init__(credential)
        self.records = list(records)
        self.created = []
        self.updated = []

    def test(self):
        pass

    def list_domains(self):
        return []

    def list_records(self, zone_id, zone_name):
        return list(self.records)

    def _create_record(self, zone_id, zone_name, req):
        self.created.append(req)
        return record("new", req.record_type, req.name, req.content)

    def update_record(self, zone_id, zone_name, req):
        self.updated.append(req)
        return record(req.id, req.record_type, req.name, req.content)

    def delete_record(self, zone_id, record_id, zone_name=""):
        pass


def record(record_id, record_type, name, content="192.0.2.1"):
    return DnsRecord(
        id=record_id,
        provider=Provider.HUAWEI,
        domain="example.com",
        record_type=record_type,
        name=name,
        content=content,
        ttl=300,
    )


def request(strategy=ConflictStrategy.DO_NOT_CREATE, name="www"):
    return RecordCreateRequest(
        record_type="A",
        name=name,
        content="192.0.2.99",
        ttl=300,
        conflict_strategy=strategy,
    )


@pytest.fixture
def make_client(credential):
    def factory(*records):
        return InMemoryClient(credential(Provider.HUAWEI), records)

    return factory


def test_creates_when_nothing_matches(make_client):
    client = make_client(record("1", "A", "api"), record("2", "TXT", "www"))
    created = client.create_record("z", "example.com", request())
    assert created.id == "new"
    assert len(client.created) == 1
    assert client.updated == []


def test_do_not_create_refuses_existing(make_client):
    client = make_client(record("1", "A", "www"))
    with pytest.raises(DnsError) as excinfo:
        client.create_record("z", "example.com", request())
    assert excinfo.value.code == ErrorCode.CONFLICT
    assert excinfo.value.message == "Record already exists"
    assert client.created == [] and client.updated == []


def test_overwrite_updates_single_match(make_client):
    client = make_client(record("17", "A", "www"))
    updated = client.create_record(
        "z", "example.com", request(ConflictStrategy.OVERWRITE)
    )
    assert updated.id == "17"
    assert client.updated[0].id == "17"
    assert client.updated[0].content == "192.0.2.99"
    assert client.created == []


def test_overwrite_refuses_multiple_matches(make_client):
    client = make_client(record("1", "A", "www"), record("2", "A", "www"))
    with pytest.raises(DnsError) as excinfo:
        client.create_record("z", "example.com", request(ConflictStrategy.OVERWRITE))
    assert excinfo.value.code == ErrorCode.CONFLICT
    assert "Multiple conflicting records found (2)" in excinfo.value.message
    assert client.created == [] and client.updated == []


def test_names_match_after_normalization(make_client):
    client = make_client(record("1", "A", "www.example.com."))
    with pytest.raises(DnsError):
        client.create_record("z", "example.com", request(name="WWW"))


def test_apex_matches_zone_name(make_client):
    client = make_client(record("1", "A", "example.com"))
    assert client.find_conflict_ids("z", "example.com", "a", "@") == ["1"]


def test_padded_lowercase_type_still_conflicts(make_client):
    client = make_client(record("1", "A", "www"))
    req = RecordCreateRequest(record_type=" a ", name="www", content="192.0.2.99")

    assert req.record_type == "A"
    with pytest.raises(DnsError) as excinfo:
        client.create_record("z", "example.com", req)
    assert excinfo.value.code == ErrorCode.CONFLICT
    assert client.created == []


def test_overwrite_carries_normalized_type(make_client):
    client = make_client(record("1", "MX", "@"))
    req = RecordCreateRequest(
        record_type="mx\t",
        name="@",
        content="mx.example.com",
        mx_priority=10,
        conflict_strategy=ConflictStrategy.OVERWRITE,
    )
    client.create_record("z", "example.com", req)
    assert client.updated[0].record_type == "MX"
    assert client.updated[0].mx_priority == 10


def test_client_rejects_other_providers_credentials(credential):
    with pytest.raises(DnsError) as excinfo:
        InMemoryClient(credential(Provider.ALIYUN), [])
    assert excinfo.value.code == ErrorCode.INVALID_INPUT


class TestRfc3339:
    def test_utc_suffix(self):
        assert to_rfc3339("2024-05-01T10:00:00.123Z") == "2024-05-01T10:00:00Z"

    def test_offset_is_converted(self):
        assert to_rfc3339("2024-05-01T18:00:00+08:00") == "2024-05-01T10:00:00Z"

    def test_naive_is_utc(self):
        assert to_rfc3339("2024-05-01 10:00:00") == "2024-05-01T10:00:00Z"

    def test_unparseable_is_kept(self):
        assert to_rfc3339("yesterday") == "yesterday"

    def test_empty(self):
        assert to_rfc3339("") is None
        assert to_rfc3339(None) is None

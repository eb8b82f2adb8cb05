import pytest

from dnsdeck.errors import DnsError, ErrorCode
from dnsdeck.models import RecordCreateRequest, RecordUpdateRequest
from dnsdeck.validation import validate_record, validate_update


def create(**overrides):
    fields = {"record_type": "A", "name": "www", "content": "192.0.2.10", "ttl": 600}
    fields.update(overrides)
    return RecordCreateRequest(**fields)


def error_code(req) -> str:
    with pytest.raises(DnsError) as excinfo:
        validate_record(req)
    return excinfo.value.code


class TestValidRecords:
    @pytest.mark.parametrize(
        "overrides",
        [
            {},
            {"record_type": "aaaa", "content": "2001:db8::1"},
            {"record_type": "CNAME", "content": "target.example.net"},
            {"record_type": "NS", "content": "ns1.example.net"},
            {"record_type": "TXT", "content": "v=spf1 -all"},
            {"record_type": "MX", "content": "mx.example.com", "mx_priority": 0},
            {
                "record_type": "SRV",
                "name": "_sip._tcp",
                "content": "sip.example.com",
                "srv_priority": 10,
                "srv_weight": 5,
                "srv_port": 5060,
            },
            {"record_type": "CAA", "name": "@", "content": "letsencrypt.org"},
            {"record_type": "CAA", "content": "x", "caa_flags": 128, "caa_tag": "issuewild"},
            {"ttl": 60},
            {"ttl": 86400},
        ],
    )
    def test_accepted(self, overrides):
        validate_record(create(**overrides))


class TestRejectedRecords:
    def test_unknown_type(self):
        assert error_code(create(record_type="PTR")) == ErrorCode.INVALID_TYPE

    def test_blank_name(self):
        assert error_code(create(name="  ")) == ErrorCode.INVALID_NAME

    def test_blank_content(self):
        assert error_code(create(content="")) == ErrorCode.INVALID_CONTENT

    @pytest.mark.parametrize("ttl", [59, 86401, 0, -1])
    def test_ttl_out_of_range(self, ttl):
        assert error_code(create(ttl=ttl)) == ErrorCode.INVALID_TTL

    def test_a_needs_ipv4(self):
        assert error_code(create(content="2001:db8::1")) == ErrorCode.INVALID_CONTENT
        assert error_code(create(content="999.1.1.1")) == ErrorCode.INVALID_CONTENT

    def test_aaaa_needs_ipv6(self):
        req = create(record_type="AAAA", content="192.0.2.1")
        assert error_code(req) == ErrorCode.INVALID_CONTENT

    def test_cname_needs_domain(self):
        req = create(record_type="CNAME", content="localhost")
        assert error_code(req) == ErrorCode.INVALID_CONTENT

    def test_mx_priority_required(self):
        req = create(record_type="MX", content="mx.example.com")
        assert error_code(req) == ErrorCode.MISSING_FIELD

    def test_mx_priority_range(self):
        req = create(record_type="MX", content="mx.example.com", mx_priority=65536)
        assert error_code(req) == ErrorCode.INVALID_INPUT

    def test_srv_fields_required(self):
        req = create(
            record_type="SRV", name="_sip._tcp", content="sip.example.com", srv_priority=1
        )
        assert error_code(req) == ErrorCode.MISSING_FIELD

    def test_srv_host_shape(self):
        req = create(
            record_type="SRV",
            name="sip",
            content="sip.example.com",
            srv_priority=1,
            srv_weight=1,
            srv_port=5060,
        )
        assert error_code(req) == ErrorCode.INVALID_NAME

    @pytest.mark.parametrize("tag", ["", "is sue", "issué"])
    def test_caa_tag(self, tag):
        req = create(record_type="CAA", content="letsencrypt.org", caa_tag=tag)
        assert error_code(req) == ErrorCode.INVALID_CAA_TAG

    def test_caa_flags_range(self):
        req = create(record_type="CAA", content="letsencrypt.org", caa_flags=256)
        assert error_code(req) == ErrorCode.INVALID_INPUT


def test_update_requires_id():
    req = RecordUpdateRequest(id="", record_type="A", name="www", content="192.0.2.1")
    with pytest.raises(DnsError) as excinfo:
        validate_update(req)
    assert excinfo.value.code == ErrorCode.MISSING_FIELD


def test_update_runs_record_rules():
    req = RecordUpdateRequest(id="1", record_type="A", name="www", content="nope")
    with pytest.raises(DnsError) as excinfo:
        validate_update(req)
    assert excinfo.value.code == ErrorCode.INVALID_CONTENT

import pytest

from dnsdeck.errors import DnsError, ErrorCode
from dnsdeck.models import RecordCreateRequest, RecordUpdateRequest
from dnsdeck.providers.rainyun import (
    RainyunClient,
    extract_array,
    extract_int,
    extract_string,
    parse_id,
)

API = "https://api.v2.rainyun.com"


class TestLooseJson:
    @pytest.mark.parametrize(
        "payload",
        [
            [{"id": 1}],
            {"data": [{"id": 1}]},
            {"data": {"data": [{"id": 1}]}},
            {"data": {"list": [{"id": 1}]}},
            {"data": {"Records": [{"id": 1}]}},
            {"records": [{"id": 1}]},
            {"items": [{"id": 1}, "junk"]},
        ],
    )
    def test_extract_array_shapes(self, payload):
        assert extract_array(payload) == [{"id": 1}]

    def test_extract_array_unknown_shape(self):
        assert extract_array({"data": {"total": 0}}) == []
        assert extract_array("nope") == []

    def test_extract_string_takes_first_usable_key(self):
        item = {"name": None, "domain_name": 42, "flag": True}
        assert extract_string(item, ("flag", "name", "domain_name")) == "42"
        assert extract_string(item, ("missing",)) is None

    def test_extract_int(self):
        assert extract_int({"a": "x", "b": "7"}, ("a", "b")) == 7
        assert extract_int({}, ("a",)) is None

    def test_parse_id(self):
        assert parse_id(" 12 ") == 12
        with pytest.raises(DnsError) as excinfo:
            parse_id("abc")
        assert excinfo.value.code == ErrorCode.INVALID_INPUT


def test_list_domains_skips_incomplete_items(client_for, api_response, sent_request):
    client = client_for(
        RainyunClient,
        api_response(
            {
                "code": 200,
                "data": {
                    "Records": [
                        {"id": 31, "domain": "example.com", "record_count": 4},
                        {"id": 32},
                    ]
                },
            }
        ),
    )

    (domain,) = client.list_domains()

    assert (domain.name, domain.provider_id, domain.records_count) == ("example.com", "31", 4)
    request = sent_request(client)
    assert request["url"] == f"{API}/product/domain/"
    assert request["headers"]["x-api-key"] == "ry-key"


def test_bare_array_response_is_accepted(client_for, api_response):
    client = client_for(RainyunClient, api_response([{"id": 5, "domain": "example.net"}]))
    (domain,) = client.list_domains()
    assert (domain.name, domain.provider_id) == ("example.net", "5")


def test_null_response_is_a_decode_failure(client_for, api_response):
    client = client_for(RainyunClient, api_response(text="null"))
    with pytest.raises(DnsError) as excinfo:
        client.list_domains()
    assert excinfo.value.code == ErrorCode.JSON_DECODE_FAILED


def test_list_records_prefers_structured_fields(client_for, api_response, sent_request):
    client = client_for(
        RainyunClient,
        api_response(
            {
                "code": 200,
                "data": {
                    "TotalRecords": 3,
                    "Records": [
                        {"record_id": 1, "host": "@", "type": "mx", "value": "mx.example.com", "ttl": 600, "level": 10},
                        {
                            "record_id": 2,
                            "host": "_sip._tcp",
                            "type": "SRV",
                            "value": "1 2 3 sip.example.com",
                            "ttl": 600,
                            "port": 5061,
                        },
                        {"record_id": 3, "type": "A", "value": "192.0.2.1"},
                    ],
                },
            }
        ),
    )

    records = client.list_records("31", "example.com")

    assert len(records) == 2
    mx, srv = records
    assert (mx.record_type, mx.mx_priority) == ("MX", 10)
    assert (srv.srv_priority, srv.srv_weight, srv.srv_port) == (1, 2, 5061)
    assert sent_request(client)["params"] == {"limit": 500, "page_no": 1}


def test_create_payload(client_for, api_response, sent_request):
    client = client_for(
        RainyunClient,
        api_response({"code": 200, "data": {"Records": []}}),
        api_response({"code": 200, "data": 555}),
    )
    req = RecordCreateRequest(
        record_type="MX", name="@", content="mx.example.com", ttl=600, mx_priority=10
    )

    record = client.create_record("31", "example.com", req)

    assert record.id == "555"
    assert record.mx_priority == 10
    create = sent_request(client, 1)
    assert create["method"] == "POST"
    assert create["url"] == f"{API}/product/domain/31/dns"
    assert create["json"] == {
        "host": "@",
        "level": 10,
        "line": "DEFAULT",
        "rain_product_id": 31,
        "rain_product_type": "rcs",
        "record_id": 0,
        "ttl": 600,
        "type": "MX",
        "value": "mx.example.com",
    }


def test_update_parses_echoed_record(client_for, api_response, sent_request):
    client = client_for(
        RainyunClient,
        api_response(
            {
                "code": 200,
                "data": {"record_id": 8, "host": "www", "type": "A", "value": "192.0.2.9", "ttl": 300},
            }
        ),
    )
    req = RecordUpdateRequest(id="8", record_type="A", name="www", content="192.0.2.9", ttl=300)

    record = client.update_record("31", "example.com", req)

    assert (record.id, record.content, record.ttl) == ("8", "192.0.2.9", 300)
    update = sent_request(client)
    assert update["method"] == "PATCH"
    assert update["json"]["record_id"] == 8
    assert update["json"]["level"] == 0


def test_delete_sends_numeric_record_id(client_for, api_response, sent_request):
    client = client_for(RainyunClient, api_response({"code": 200}))
    client.delete_record("31", "8")
    request = sent_request(client)
    assert request["method"] == "DELETE"
    assert request["url"] == f"{API}/product/domain/31/dns/"
    assert request["json"] == {"record_id": 8}


def test_non_numeric_zone_id(client_for):
    client = client_for(RainyunClient)
    req = RecordUpdateRequest(id="8", record_type="A", name="www", content="192.0.2.9")
    with pytest.raises(DnsError) as excinfo:
        client.update_record("example.com", "example.com", req)
    assert excinfo.value.code == ErrorCode.INVALID_INPUT


def test_error_envelope(client_for, api_response):
    client = client_for(RainyunClient, api_response({"code": 30039, "message": "domain not found"}))
    with pytest.raises(DnsError) as excinfo:
        client.list_records("31", "example.com")
    assert excinfo.value.code == ErrorCode.FETCH_FAILED
    assert excinfo.value.message == "domain not found"


def test_bad_api_key(client_for, api_response):
    client = client_for(
        RainyunClient, api_response({"code": 401, "message": "unauthorized"}, status_code=401)
    )
    with pytest.raises(DnsError) as excinfo:
        client.test()
    assert excinfo.value.code == ErrorCode.AUTH_FAILED

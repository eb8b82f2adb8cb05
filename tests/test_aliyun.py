from urllib.parse import parse_qsl, urlsplit

import pytest

from dnsdeck.errors import DnsError, ErrorCode
from dnsdeck.models import RecordCreateRequest, RecordUpdateRequest
from dnsdeck.providers.aliyun import AliyunClient


def query_of(request) -> dict:
    return dict(parse_qsl(urlsplit(request["url"]).query))


def test_list_domains_pages_until_total(client_for, api_response, sent_request):
    client = client_for(
        AliyunClient,
        api_response(
            {
                "TotalCount": 2,
                "PageNumber": 1,
                "Domains": {"Domain": [{"DomainId": "d1", "DomainName": "example.com", "RecordCount": 4}]},
            }
        ),
        api_response(
            {
                "TotalCount": 2,
                "PageNumber": 2,
                "Domains": {"Domain": [{"DomainId": "d2", "DomainName": "example.org"}]},
            }
        ),
    )

    domains = client.list_domains()

    assert [d.name for d in domains] == ["example.com", "example.org"]
    assert domains[0].records_count == 4
    assert domains[1].records_count is None

    first = sent_request(client, 0)
    assert first["method"] == "GET"
    assert first["url"].startswith("https://alidns.aliyuncs.com/?")
    assert first["params"] is None
    query = query_of(first)
    assert query["Action"] == "DescribeDomains"
    assert query["PageNumber"] == "1"
    assert query["AccessKeyId"] == "ali-id"
    assert "Signature" in query
    assert query_of(sent_request(client, 1))["PageNumber"] == "2"


def test_list_records(client_for, api_response, sent_request):
    client = client_for(
        AliyunClient,
        api_response(
            {
                "TotalCount": 2,
                "DomainRecords": {
                    "Record": [
                        {"RecordId": "1", "RR": "@", "Type": "MX", "Value": "mx.example.com", "TTL": 600, "Priority": 10},
                        {"RecordId": "2", "RR": "@", "Type": "CAA", "Value": "0 issue letsencrypt.org", "TTL": 600},
                    ]
                },
            }
        ),
    )

    mx, caa = client.list_records("example.com", "example.com")

    assert (mx.id, mx.name, mx.mx_priority) == ("1", "@", 10)
    assert (caa.content, caa.caa_tag, caa.caa_flags) == ("letsencrypt.org", "issue", 0)
    assert query_of(sent_request(client))["DomainName"] == "example.com"


def test_create_echoes_request(client_for, api_response, sent_request):
    client = client_for(
        AliyunClient,
        api_response({"TotalCount": 0, "DomainRecords": {"Record": []}}),
        api_response({"RequestId": "abc", "RecordId": "9001"}),
    )
    req = RecordCreateRequest(
        record_type="SRV",
        name="_sip._tcp",
        content="sip.example.com",
        srv_priority=1,
        srv_weight=2,
        srv_port=5060,
    )

    record = client.create_record("example.com", "example.com", req)

    assert record.id == "9001"
    assert record.srv_port == 5060
    query = query_of(sent_request(client, 1))
    assert query["Action"] == "AddDomainRecord"
    assert query["DomainName"] == "example.com"
    assert query["Value"] == "1 2 5060 sip.example.com"
    assert "Priority" not in query


def test_update_sends_priority_for_mx(client_for, api_response, sent_request):
    client = client_for(AliyunClient, api_response({"RecordId": "7"}))
    req = RecordUpdateRequest(
        id="7", record_type="MX", name="@", content="mx.example.com", mx_priority=5
    )

    record = client.update_record("example.com", "example.com", req)

    assert record.id == "7"
    query = query_of(sent_request(client))
    assert query["Action"] == "UpdateDomainRecord"
    assert query["RecordId"] == "7"
    assert query["Priority"] == "5"


def test_delete(client_for, api_response, sent_request):
    client = client_for(AliyunClient, api_response({"RecordId": "7"}))
    client.delete_record("example.com", "7")
    query = query_of(sent_request(client))
    assert query["Action"] == "DeleteDomainRecord"
    assert query["RecordId"] == "7"


def test_bad_access_key(client_for, api_response):
    client = client_for(
        AliyunClient,
        api_response(
            {"Code": "InvalidAccessKeyId.NotFound", "Message": "Specified access key is not found."},
            status_code=404,
        ),
    )
    with pytest.raises(DnsError) as excinfo:
        client.test()
    assert excinfo.value.code == ErrorCode.AUTH_FAILED
    assert excinfo.value.status_code == 404


def test_signature_mismatch_on_write(client_for, api_response):
    client = client_for(
        AliyunClient,
        api_response({"Code": "SignatureDoesNotMatch", "Message": "bad signature"}, status_code=400),
    )
    with pytest.raises(DnsError) as excinfo:
        client.delete_record("example.com", "7")
    assert excinfo.value.code == ErrorCode.AUTH_FAILED


def test_duplicate_record_is_create_failure(client_for, api_response):
    client = client_for(
        AliyunClient,
        api_response({"TotalCount": 0, "DomainRecords": {"Record": []}}),
        api_response({"Code": "DomainRecordDuplicate", "Message": "The DNS record already exists."}, status_code=400),
    )
    req = RecordCreateRequest(record_type="A", name="www", content="192.0.2.1")
    with pytest.raises(DnsError) as excinfo:
        client.create_record("example.com", "example.com", req)
    assert excinfo.value.code == ErrorCode.CREATE_FAILED

import pytest

from dnsdeck.names import (
    full_name,
    is_srv_host,
    relative_name,
    same_host,
    srv_service_proto,
)


@pytest.mark.parametrize(
    "host, expected",
    [
        ("@", "example.com"),
        ("", "example.com"),
        ("www", "www.example.com"),
        ("www.example.com", "www.example.com"),
        ("www.example.com.", "www.example.com"),
        ("_sip._tcp", "_sip._tcp.example.com"),
    ],
)
def test_full_name(host, expected):
    assert full_name("example.com", host) == expected


def test_full_name_with_trailing_dot():
    assert full_name("example.com", "@", trailing_dot=True) == "example.com."
    assert full_name("example.com.", "mail", trailing_dot=True) == "mail.example.com."


@pytest.mark.parametrize(
    "name, expected",
    [
        ("example.com", "@"),
        ("example.com.", "@"),
        ("@", "@"),
        ("", "@"),
        ("www.example.com", "www"),
        ("a.b.example.com.", "a.b"),
        ("www", "www"),
        ("other.org", "other.org"),
    ],
)
def test_relative_name(name, expected):
    assert relative_name("example.com", name) == expected


def test_relative_name_does_not_strip_partial_suffix():
    assert relative_name("example.com", "notexample.com") == "notexample.com"


def test_same_host():
    assert same_host("example.com", "www", "www.example.com.")
    assert same_host("example.com", "@", "example.com")
    assert same_host("example.com", "WWW", "www")
    assert not same_host("example.com", "www", "api")


def test_srv_host_decomposition():
    assert is_srv_host("_sip._tcp")
    assert is_srv_host("_sip._udp.voice")
    assert not is_srv_host("sip._tcp")
    assert not is_srv_host("_sip")

    assert srv_service_proto("_xmpp._tcp") == ("_xmpp", "_tcp")
    assert srv_service_proto("www") == ("_service", "_tcp")


ZONES = ["example.com", "example.com.", "sub.example.co.uk"]
HOSTS = ["@", "www", "a.b", "_sip._tcp", "WWW.Mixed"]


@pytest.mark.parametrize("zone", ZONES)
@pytest.mark.parametrize("host", HOSTS)
@pytest.mark.parametrize("trailing_dot", [False, True])
def test_relative_name_undoes_full_name(zone, host, trailing_dot):
    absolute = full_name(zone, host, trailing_dot=trailing_dot)

    assert absolute.rstrip(".").lower().endswith(zone.rstrip(".").lower())
    assert relative_name(zone, absolute) == host


@pytest.mark.parametrize("zone", ZONES)
def test_apex_is_the_zone_itself(zone):
    assert full_name(zone, "@") == zone.rstrip(".")
    assert full_name(zone, "@", trailing_dot=True) == zone.rstrip(".") + "."

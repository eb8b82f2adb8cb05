import pytest

from dnsdeck.config import (
    AppConfig,
    credentials_from_env,
    env_var_name,
    load_credential_file,
    load_credentials,
)
from dnsdeck.errors import DnsError, ErrorCode
from dnsdeck.models import Provider

BUNDLE = """
cloudflare:
  email: ops@example.com
  api_key: cf-file-key
  last_verified_at: "2024-05-01T10:00:00Z"
aliyun:
  access_key_id: ali-id
  access_key_secret: ali-secret
  unrelated: dropped
route53:
  key: ignored
"""


@pytest.fixture
def bundle(tmp_path):
    path = tmp_path / "credentials.yaml"
    path.write_text(BUNDLE, encoding="utf-8")
    return str(path)


def test_app_config_from_env(monkeypatch):
    monkeypatch.setenv("DNSDECK_TIMEOUT", "5.5")
    monkeypatch.setenv("DNSDECK_MAX_WORKERS", "2")
    monkeypatch.setenv("DNSDECK_USER_AGENT", "probe/1")
    monkeypatch.setenv("DNSDECK_CREDENTIALS", "/etc/dnsdeck.yaml")

    config = AppConfig.from_env()

    assert config.timeout == 5.5
    assert config.max_workers == 2
    assert config.user_agent == "probe/1"
    assert config.credentials_path == "/etc/dnsdeck.yaml"


def test_app_config_defaults(monkeypatch):
    for name in ("DNSDECK_TIMEOUT", "DNSDECK_MAX_WORKERS", "DNSDECK_USER_AGENT", "DNSDECK_CREDENTIALS"):
        monkeypatch.delenv(name, raising=False)
    config = AppConfig.from_env()
    assert config.timeout == 30.0
    assert config.user_agent.startswith("dnsdeck/")


def test_env_var_name():
    assert env_var_name(Provider.TENCENTCLOUD, "secret_id") == "DNSDECK_TENCENTCLOUD_SECRET_ID"


def test_load_credential_file(bundle):
    credentials = load_credential_file(bundle)

    assert set(credentials) == {Provider.CLOUDFLARE, Provider.ALIYUN}
    cloudflare = credentials[Provider.CLOUDFLARE]
    assert cloudflare.secrets == {"email": "ops@example.com", "api_key": "cf-file-key"}
    assert cloudflare.last_verified_at == "2024-05-01T10:00:00Z"
    assert "unrelated" not in credentials[Provider.ALIYUN].secrets


def test_missing_file(tmp_path):
    with pytest.raises(DnsError) as excinfo:
        load_credential_file(str(tmp_path / "nope.yaml"))
    assert excinfo.value.code == ErrorCode.INVALID_INPUT


def test_invalid_yaml(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("cloudflare: [unclosed", encoding="utf-8")
    with pytest.raises(DnsError) as excinfo:
        load_credential_file(str(path))
    assert excinfo.value.code == ErrorCode.INVALID_INPUT


def test_top_level_must_be_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- cloudflare\n", encoding="utf-8")
    with pytest.raises(DnsError):
        load_credential_file(str(path))


def test_credentials_from_env():
    environ = {
        "DNSDECK_HUAWEI_TOKEN": "hw",
        "DNSDECK_RAINYUN_API_KEY": "",
        "OTHER": "x",
    }
    assert credentials_from_env(environ) == {Provider.HUAWEI: {"token": "hw"}}


def test_environment_wins_over_file(bundle):
    environ = {
        "DNSDECK_CLOUDFLARE_API_KEY": "cf-env-key",
        "DNSDECK_HUAWEI_TOKEN": "hw",
    }

    credentials = load_credentials(bundle, environ)

    assert credentials[Provider.CLOUDFLARE].secrets == {
        "email": "ops@example.com",
        "api_key": "cf-env-key",
    }
    assert credentials[Provider.CLOUDFLARE].last_verified_at == "2024-05-01T10:00:00Z"
    assert credentials[Provider.HUAWEI].secrets == {"token": "hw"}
    assert Provider.ALIYUN in credentials


def test_no_file_no_env():
    assert load_credentials("", {}) == {}


@pytest.mark.parametrize("name", ["DNSDECK_TIMEOUT", "DNSDECK_MAX_WORKERS"])
def test_malformed_number_is_invalid_input(monkeypatch, name):
    monkeypatch.setenv(name, "soon")
    with pytest.raises(DnsError) as excinfo:
        AppConfig.from_env()
    assert excinfo.value.code == ErrorCode.INVALID_INPUT
    assert name in excinfo.value.message

import json
from typing import Any, Optional
from unittest.mock import Mock

import pytest
import requests

from dnsdeck.models import Provider, ProviderCredential

SECRETS = {
    Provider.CLOUDFLARE: {"email": "ops@example.com", "api_key": "cf-key"},
    Provider.DNSPOD: {"token_id": "12345", "token": "dp-token"},
    Provider.ALIYUN: {"access_key_id": "ali-id", "access_key_secret": "ali-secret"},
    Provider.HUAWEI: {"token": "hw-token"},
    Provider.BAIDU: {"access_key_id": "bd-ak", "secret_access_key": "bd-sk"},
    Provider.DNSCOM: {"api_key": "dc-key", "api_secret": "dc-secret"},
    Provider.RAINYUN: {"api_key": "ry-key"},
    Provider.TENCENTCLOUD: {"secret_id": "tc-id", "secret_key": "tc-key"},
}


def make_response(
    payload: Any = None,
    status_code: int = 200,
    text: Optional[str] = None,
    reason: str = "OK",
) -> requests.Response:
    """Build a real requests.Response with a JSON (or raw text) body"""
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    if text is None:
        text = "" if payload is None else json.dumps(payload)
    response._content = text.encode("utf-8")
    response.encoding = "utf-8"
    return response


def make_credential(provider: Provider) -> ProviderCredential:
    return ProviderCredential(provider=provider, secrets=dict(SECRETS[provider]))


@pytest.fixture
def api_response():
    return make_response


@pytest.fixture
def credential():
    return make_credential


@pytest.fixture
def client_for():
    """
    Build a provider client whose HTTP session replays canned responses.

    Exceptions in the response list are raised by the session instead.
    """
    created = []

    def factory(client_class, *responses):
        client = client_class(make_credential(client_class.provider))
        client._session.request = Mock(side_effect=list(responses))
        created.append(client)
        return client

    yield factory

    for client in created:
        client.close()


def sent(client, index: int = 0) -> dict:
    """Keyword arguments of the index-th request a mocked client made"""
    return client._session.request.call_args_list[index].kwargs


@pytest.fixture
def sent_request():
    return sent

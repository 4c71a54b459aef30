import httpx
import pytest

from linodebatch.client import Client
from linodebatch.config import ClientConfig
from tests.mocks.linode_api import (
    TEST_API_KEY,
    TEST_API_URL,
    FakeLinodeAPI,
    make_linode_transport,
)


@pytest.fixture(autouse=True)
def test_set_env(monkeypatch):
    monkeypatch.setenv("LINODE_API_KEY", TEST_API_KEY)
    monkeypatch.delenv("LINODE_API_URL", raising=False)
    monkeypatch.delenv("LINODE_MAX_BATCH_SIZE", raising=False)
    monkeypatch.delenv("LINODE_TIMEOUT", raising=False)


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(base_url=TEST_API_URL)


@pytest.fixture
def fake_api() -> FakeLinodeAPI:
    return FakeLinodeAPI()


@pytest.fixture
def client(config: ClientConfig, fake_api: FakeLinodeAPI) -> Client:
    """
    Create a client whose HTTP calls are answered by ``fake_api``.

    Returns
    -------
    Client
        Client bound to the fake API transport.
    """
    client = Client(api_key=TEST_API_KEY, config=config)
    transport = make_linode_transport(fake_api)
    client._client_factory = lambda: httpx.Client(transport=transport)
    return client

import httpx
import pydantic
import pytest
from typer.testing import CliRunner

from linodebatch.cli.main import app
from linodebatch.client import Client
from tests.mocks.linode_api import FakeLinodeAPI

runner = CliRunner()
from_env = Client.__dict__["from_env"]


@pytest.fixture(autouse=True)
def patch_client_from_env(monkeypatch, client: Client):
    monkeypatch.setattr(Client, "from_env", classmethod(lambda cls, api_key=None: client))


def test_list_linodes(fake_api: FakeLinodeAPI):
    fake_api.linodes = [
        {"LINODEID": 7, "STATUS": 1, "LABEL": "web", "LPM_DISPLAYGROUP": "prod", "TOTALRAM": 2048},
    ]

    result = runner.invoke(app, ["linodes"])

    assert result.exit_code == 0
    assert "web" in result.output
    assert "2048" in result.output


def test_list_ips(fake_api: FakeLinodeAPI):
    fake_api.ips = {3: [{"LINODEID": 3, "ISPUBLIC": 1, "IPADDRESS": "203.0.113.9"}]}

    result = runner.invoke(app, ["ips", "1", "3"])

    assert result.exit_code == 0
    assert "203.0.113.9" in result.output
    assert "public" in result.output


def test_list_linodes_api_error(fake_api: FakeLinodeAPI):
    fake_api.action_errors["linode.list"] = [(4, "Authentication failed")]

    result = runner.invoke(app, ["linodes"])

    assert result.exit_code == 1
    assert "Authentication failed" in result.output


def test_list_ips_transport_error(client: Client):
    client._client_factory = lambda: httpx.Client(
        transport=httpx.MockTransport(handler=lambda request: httpx.Response(status_code=502))
    )

    result = runner.invoke(app, ["ips", "1"])

    assert result.exit_code == 1
    assert "HTTP error: 502 Bad Gateway" in result.output


def test_invalid_environment_setting(monkeypatch):
    monkeypatch.setattr(Client, "from_env", from_env)
    monkeypatch.setenv("LINODE_MAX_BATCH_SIZE", "0")

    result = runner.invoke(app, ["linodes"])

    assert result.exit_code == 1
    assert not isinstance(result.exception, pydantic.ValidationError)
    assert "LINODE_MAX_BATCH_SIZE='0'" in result.output

"""
Client for the Linode API.
Requests created by a client are batched automatically when sent.
"""

from __future__ import annotations

import typing as t

import httpx

from linodebatch.config import ClientConfig, get_default_api_key
from linodebatch.linode import Linode, LinodeIP, linode_ip_list, linode_list
from linodebatch.request import Request

DEFAULT_CONFIG = ClientConfig()


class Client:
    """
    Craft batched HTTP requests and parse JSON responses from the Linode API.

    Parameters
    ----------
    api_key : str
        Linode API key sent with every batch.
    config : ClientConfig, optional
        Shared, immutable client settings.
    """

    def __init__(self, api_key: str, config: ClientConfig = DEFAULT_CONFIG):
        self.api_key = api_key
        self.config = config
        self._client_factory: t.Callable[[], httpx.Client] = lambda: httpx.Client(
            timeout=self.config.timeout, follow_redirects=True
        )

    @classmethod
    def from_env(cls, api_key: str | None = None) -> Client:
        """Build a client from ``LINODE_*`` environment variables."""
        return cls(api_key=api_key or get_default_api_key(), config=ClientConfig.from_env())

    def __repr__(self) -> str:
        return f"<Client base_url={self.config.base_url!r}>"

    def new_request(self) -> Request:
        return Request(client=self)

    def http_client(self) -> httpx.Client:
        return self._client_factory()

    def linode_list(self) -> list[Linode]:
        """List linodes, ordered by display group then label."""
        return linode_list(request=self.new_request())

    def linode_ip_list(self, linode_ids: t.Iterable[int]) -> dict[int, list[LinodeIP]]:
        """Map each linode ID to its IPs, private IPs first."""
        return linode_ip_list(request=self.new_request(), linode_ids=linode_ids)

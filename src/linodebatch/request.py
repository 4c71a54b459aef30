"""
Action batching for the Linode API.

A ``Request`` collects actions and renders them as one or more ``batch`` calls,
each holding at most ``ClientConfig.max_batch_size`` actions. Batches are sent
one after another and their responses merged with an all-or-nothing contract.
"""

from __future__ import annotations

import json
import typing as t
import uuid

import httpx
import structlog

from linodebatch.exceptions import BatchError, SerializationError
from linodebatch.response import ActionResponse, BatchResult, decode_response
from linodebatch.utils.logging import logging_context

if t.TYPE_CHECKING:
    from linodebatch.client import Client

log = structlog.get_logger(__name__)

ACTION_KEY = "api_action"
API_KEY_PARAM = "api_key"
REQUEST_ARRAY_PARAM = "api_requestArray"
BATCH_ACTION = "batch"

Action = dict[str, t.Any]


def encode_actions(actions: t.Sequence[Action]) -> str:
    """
    Encode actions as a compact JSON array with sorted keys.

    Parameters
    ----------
    actions : Sequence[Action]
        Actions of a single batch.

    Returns
    -------
    str
        JSON array, identical for identical input.

    Raises
    ------
    SerializationError
        If a parameter value is not JSON encodable.
    """
    try:
        return json.dumps(actions, sort_keys=True, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as error:
        raise SerializationError(f"unable to encode batch actions: {error}") from error


class Request:
    """
    One or more API actions which are batched together when sent.

    The action sequence is append-only; batches are derived from it each time
    ``batches`` or ``urls`` is called.
    """

    def __init__(self, client: Client):
        self._client = client
        self._actions: list[Action] = []

    def __len__(self) -> int:
        return len(self._actions)

    @property
    def actions(self) -> list[Action]:
        return list(self._actions)

    def add_action(self, method: str, params: t.Mapping[str, t.Any] | None = None) -> Request:
        """
        Add an API action, sent as the ``api_action`` parameter.

        Parameters
        ----------
        method : str
            API method name, e.g. ``linode.list``.
        params : Mapping[str, Any] | None
            Action parameters, passed through verbatim.

        Returns
        -------
        Request
            This request, to allow chaining.
        """
        action: Action = dict(params) if params is not None else {}
        action[ACTION_KEY] = method
        self._actions.append(action)
        return self

    def batches(self) -> list[list[Action]]:
        """Split actions into consecutive groups of at most ``max_batch_size``."""
        size = self._client.config.max_batch_size
        return [self._actions[i : i + size] for i in range(0, len(self._actions), size)]

    def urls(self) -> list[str]:
        """
        Build one URL per batch.

        Returns
        -------
        list[str]
            Ordered batch URLs, empty when no action was added.

        Raises
        ------
        SerializationError
            If any batch cannot be encoded. No URL is returned in that case.
        """
        urls: list[str] = []
        for batch in self.batches():
            # keys in lexicographic order, so the query string is reproducible
            params = {
                ACTION_KEY: BATCH_ACTION,
                API_KEY_PARAM: self._client.api_key,
                REQUEST_ARRAY_PARAM: encode_actions(batch),
            }
            urls.append(str(httpx.URL(self._client.config.base_url, params=params)))
        return urls

    def get_json(self) -> list[ActionResponse]:
        """
        Send every batch and return the successful responses.

        Batches are sent sequentially. A failing batch does not prevent the
        following ones from being sent, but any error voids the whole call.

        Returns
        -------
        list[ActionResponse]
            Successful responses in batch order, then item order.

        Raises
        ------
        SerializationError
            If actions cannot be encoded, before any network activity.
        BatchRequestError
            If any batch reported a transport, decode or API error.
        """
        urls = self.urls()
        result = BatchResult()
        if not urls:
            return result.unwrap()

        with logging_context(call_id=uuid.uuid4().hex), self._client.http_client() as http_client:
            log.debug(
                event="Sending batched request",
                num_actions=len(self._actions),
                num_batches=len(urls),
            )
            for batch_index, url in enumerate(urls):
                result.extend(_send_batch(http_client=http_client, url=url, batch_index=batch_index))
            if result.errors:
                log.warning(
                    event="Batched request failed",
                    num_errors=len(result.errors),
                    num_batches=len(urls),
                )
            return result.unwrap()


def _send_batch(*, http_client: httpx.Client, url: str, batch_index: int) -> BatchResult:
    try:
        response = http_client.get(url)
    except httpx.HTTPError as error:
        log.error(event="Batch transport failed", batch_index=batch_index, error=repr(error))
        return BatchResult(errors=[BatchError(kind="transport", message=str(error))])
    log.debug(
        event="Batch response received",
        batch_index=batch_index,
        status_code=response.status_code,
    )
    return decode_response(response)

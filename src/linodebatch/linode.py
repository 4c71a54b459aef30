from __future__ import annotations

import typing as t

import structlog
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from linodebatch.exceptions import ResponseShapeError
from linodebatch.response import ActionResponse
from linodebatch.utils.sorting import stable_sort

if t.TYPE_CHECKING:
    from linodebatch.request import Request

log = structlog.get_logger(__name__)

LINODE_LIST_ACTION = "linode.list"
LINODE_IP_LIST_ACTION = "linode.ip.list"


class Linode(BaseModel):
    """A linode as returned by the API."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int = Field(validation_alias="LINODEID")
    status: int = Field(default=0, validation_alias="STATUS")
    label: str = Field(default="", validation_alias="LABEL")
    display_group: str = Field(default="", validation_alias="LPM_DISPLAYGROUP")
    ram: int = Field(default=0, validation_alias="TOTALRAM")

    @property
    def is_running(self) -> bool:
        return self.status == 1


class LinodeIP(BaseModel):
    """A linode IP address as returned by the API."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    linode_id: int = Field(validation_alias="LINODEID")
    public: int = Field(default=0, validation_alias="ISPUBLIC")
    ip: str = Field(default="", validation_alias="IPADDRESS")

    @property
    def is_public(self) -> bool:
        return self.public == 1


linode_list_adapter = TypeAdapter(list[Linode])
linode_ip_list_adapter = TypeAdapter(list[LinodeIP])


def linode_sort_key(linode: Linode) -> tuple[str, str]:
    return linode.display_group, linode.label


def linode_ip_sort_key(ip: LinodeIP) -> int:
    return ip.public


def _check_action(response: ActionResponse, expected: str) -> None:
    if response.action != expected:
        raise ResponseShapeError(f"unexpected api action {response.action}")


def _validate_payload(adapter: TypeAdapter[t.Any], response: ActionResponse) -> t.Any:
    try:
        return adapter.validate_json(response.raw)
    except ValidationError as error:
        raise ResponseShapeError(
            f"unexpected payload for api action {response.action}: {error}"
        ) from error


def linode_list(request: Request) -> list[Linode]:
    """
    Retrieve every linode of the account.

    Parameters
    ----------
    request : Request
        Fresh request to send the ``linode.list`` action with.

    Returns
    -------
    list[Linode]
        Linodes ordered by display group, then label.

    Raises
    ------
    ResponseShapeError
        If the API did not answer with exactly one well-formed ``linode.list`` payload.
    """
    responses = request.add_action(LINODE_LIST_ACTION).get_json()
    if len(responses) != 1:
        raise ResponseShapeError(f"unexpected number of responses: {len(responses)}")
    _check_action(responses[0], LINODE_LIST_ACTION)
    linodes = _validate_payload(linode_list_adapter, responses[0])
    log.debug(event="Linodes listed", num_linodes=len(linodes))
    return stable_sort(linodes, key=linode_sort_key)


def linode_ip_list(request: Request, linode_ids: t.Iterable[int]) -> dict[int, list[LinodeIP]]:
    """
    Retrieve IP addresses for several linodes, batched together.

    Parameters
    ----------
    request : Request
        Fresh request to add one ``linode.ip.list`` action per ID to.
    linode_ids : Iterable[int]
        Linode IDs to look up.

    Returns
    -------
    dict[int, list[LinodeIP]]
        Private IPs first for each linode. Keys are read from the returned
        payloads; linodes without any IP are absent.
    """
    for linode_id in linode_ids:
        request.add_action(LINODE_IP_LIST_ACTION, {"LinodeID": str(linode_id)})

    responses = request.get_json()
    ips_by_linode: dict[int, list[LinodeIP]] = {}
    for response in responses:
        _check_action(response, LINODE_IP_LIST_ACTION)
        ips = _validate_payload(linode_ip_list_adapter, response)
        if ips:
            ips_by_linode[ips[0].linode_id] = stable_sort(ips, key=linode_ip_sort_key)
    log.debug(
        event="Linode IPs listed",
        num_requested=len(request),
        num_linodes=len(ips_by_linode),
    )
    return ips_by_linode

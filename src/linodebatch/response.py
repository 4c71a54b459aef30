"""
Decoding of batch responses.

Each batch response is a JSON array with one item per action. Items announce
their own ``ACTION`` and carry either an ``ERRORARRAY`` or a ``DATA`` payload.
``DATA`` is kept as the exact bytes sent by the API.
"""

from __future__ import annotations

import json
import re
import typing as t
from dataclasses import dataclass, field

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from linodebatch.exceptions import BatchError, BatchRequestError

log = structlog.get_logger(__name__)

UNDECODABLE_RESPONSE_MESSAGE = "unable to decode api JSON response"
DATA_FIELD = "DATA"

_json_decoder = json.JSONDecoder()
_whitespace = re.compile(r"[ \t\n\r]*")


class ApiError(BaseModel):
    code: int = Field(validation_alias="ERRORCODE")
    message: str = Field(validation_alias="ERRORMESSAGE")


class ResponseItem(BaseModel):
    """Raw per-action item of a batch response."""

    model_config = ConfigDict(extra="ignore")

    action: str = Field(default="", validation_alias="ACTION")
    errors: list[ApiError] | None = Field(default=None, validation_alias="ERRORARRAY")
    raw_data: bytes = Field(default=b"", validation_alias=DATA_FIELD)


def _skip_whitespace(text: str, index: int) -> int:
    return _whitespace.match(text, index).end()


def _split_object(text: str, index: int) -> tuple[dict[str, str], int]:
    """Split the JSON object starting at ``index`` into raw member fragments.

    Args:
        text (str): The JSON document
        index (int): Position of the opening brace

    Returns:
        tuple[dict[str, str], int]: Raw value text by member name, and the position after the object
    """
    if text[index] != "{":
        raise ValueError(f"expected an object at position {index}")
    members: dict[str, str] = {}
    index = _skip_whitespace(text, index + 1)
    if text[index] == "}":
        return members, index + 1
    while True:
        name, index = _json_decoder.raw_decode(text, index)
        if not isinstance(name, str):
            raise ValueError(f"expected a member name at position {index}")
        index = _skip_whitespace(text, index)
        if text[index] != ":":
            raise ValueError(f"expected ':' at position {index}")
        start = _skip_whitespace(text, index + 1)
        _, end = _json_decoder.raw_decode(text, start)
        members[name] = text[start:end]
        index = _skip_whitespace(text, end)
        if text[index] == "}":
            return members, index + 1
        if text[index] != ",":
            raise ValueError(f"expected ',' or '}}' at position {index}")
        index = _skip_whitespace(text, index + 1)


def split_items(body: str | bytes) -> list[dict[str, str]]:
    """
    Split a batch response body into the raw members of each item.

    Parameters
    ----------
    body : str | bytes
        Raw response body, UTF-8 when given as bytes.

    Returns
    -------
    list[dict[str, str]]
        One mapping per item, from member name to the member's JSON text.

    Raises
    ------
    ValueError
        If the body is not a JSON array of objects.
    """
    text = body.decode("utf-8") if isinstance(body, bytes) else body
    index = _skip_whitespace(text, 0)
    if text[index : index + 1] != "[":
        raise ValueError("expected a JSON array")
    items: list[dict[str, str]] = []
    index = _skip_whitespace(text, index + 1)
    if text[index : index + 1] == "]":
        index += 1
    else:
        while True:
            item, index = _split_object(text, index)
            items.append(item)
            index = _skip_whitespace(text, index)
            if text[index : index + 1] == "]":
                index += 1
                break
            if text[index : index + 1] != ",":
                raise ValueError(f"expected ',' or ']' at position {index}")
            index = _skip_whitespace(text, index + 1)
    if _skip_whitespace(text, index) != len(text):
        raise ValueError(f"unexpected data after the array at position {index}")
    return items


def _parse_item(members: dict[str, str]) -> ResponseItem:
    values: dict[str, t.Any] = {
        name: json.loads(raw) for name, raw in members.items() if name != DATA_FIELD
    }
    if DATA_FIELD in members:
        values[DATA_FIELD] = members[DATA_FIELD].encode("utf-8")
    return ResponseItem.model_validate(values)


@dataclass(frozen=True)
class ActionResponse:
    """
    Successful response of one action.

    Parameters
    ----------
    action : str
        Action name echoed by the API.
    raw : bytes
        ``DATA`` payload exactly as sent by the API, left uninterpreted.
        Empty when the API sent no payload.
    """

    action: str
    raw: bytes = b""

    @property
    def data(self) -> t.Any:
        """Decoded ``DATA`` payload, ``None`` when there is no payload."""
        if not self.raw:
            return None
        return json.loads(self.raw)


@dataclass
class BatchResult:
    """
    Successes and errors accumulated over the batches of one logical call.
    """

    successes: list[ActionResponse] = field(default_factory=list)
    errors: list[BatchError] = field(default_factory=list)

    def extend(self, other: BatchResult) -> None:
        self.successes.extend(other.successes)
        self.errors.extend(other.errors)

    def unwrap(self) -> list[ActionResponse]:
        """
        Return successes, or fail if any error was collected.

        Raises
        ------
        BatchRequestError
            Aggregating every collected error. Successes are discarded.
        """
        if self.errors:
            raise BatchRequestError(self.errors)
        return list(self.successes)


def decode_body(body: str | bytes) -> BatchResult:
    """
    Decode the body of one batch response.

    Parameters
    ----------
    body : str | bytes
        Raw response body.

    Returns
    -------
    BatchResult
        Successful items in order, plus one error per API error entry. A body
        which is not an array of items yields a single decode error.
    """
    try:
        items = [_parse_item(members) for members in split_items(body)]
    except (ValueError, IndexError, ValidationError) as error:
        log.debug(event="Undecodable batch response", error=str(error))
        return BatchResult(errors=[BatchError(kind="decode", message=UNDECODABLE_RESPONSE_MESSAGE)])

    result = BatchResult()
    for item in items:
        if item.errors:
            for api_error in item.errors:
                result.errors.append(
                    BatchError(kind="protocol", message=api_error.message, code=api_error.code)
                )
            log.debug(event="Action returned errors", action=item.action, num_errors=len(item.errors))
            continue
        result.successes.append(ActionResponse(action=item.action, raw=item.raw_data))
    return result


def decode_response(response: httpx.Response) -> BatchResult:
    """
    Decode one batch HTTP response.

    A non-2xx status yields a single transport error and the body is ignored.
    """
    if not response.is_success:
        return BatchResult(
            errors=[
                BatchError(
                    kind="transport",
                    message=f"HTTP error: {response.status_code} {response.reason_phrase}",
                )
            ]
        )
    return decode_body(response.content)

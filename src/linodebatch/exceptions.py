"""
Linodebatch-specific runtime exceptions.
"""

from __future__ import annotations

import typing as t
from dataclasses import dataclass

ERROR_SEPARATOR = "; "

ErrorKind = t.Literal["transport", "decode", "protocol"]


@dataclass(frozen=True)
class BatchError:
    """
    One error captured while sending or decoding a batch.

    Parameters
    ----------
    kind : ErrorKind
        ``"transport"`` for network failures and non-2xx statuses,
        ``"decode"`` for unparseable bodies, ``"protocol"`` for errors
        reported by the API inside a well-formed body.
    message : str
        Human readable description.
    code : int | None
        API error code, only set for protocol errors.
    """

    kind: ErrorKind
    message: str
    code: int | None = None

    def __str__(self) -> str:
        if self.code is not None:
            return f"[code: {self.code}] {self.message}"
        return self.message


class LinodeBatchError(Exception):
    """Base class for every error raised by linodebatch."""


class ConfigurationError(LinodeBatchError):
    """Raised when the client cannot be configured from its environment."""


class SerializationError(LinodeBatchError):
    """Raised when actions cannot be encoded into a batch request."""


class ResponseShapeError(LinodeBatchError):
    """Raised when a successful response does not have the shape an action expects."""


class BatchRequestError(LinodeBatchError):
    """
    Aggregated failure of a logical call spanning one or more batches.

    Notes
    -----
    The message joins every underlying error in batch order, then item order.
    The structured records stay available on ``errors`` so callers can branch
    on API error codes.
    """

    def __init__(self, errors: t.Sequence[BatchError]):
        self.errors: list[BatchError] = list(errors)
        super().__init__(ERROR_SEPARATOR.join(str(error) for error in self.errors))

    @property
    def codes(self) -> list[int]:
        """API error codes carried by protocol errors, in order."""
        return [error.code for error in self.errors if error.code is not None]

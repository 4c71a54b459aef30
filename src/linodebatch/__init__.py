from .client import Client as Client
from .config import ClientConfig as ClientConfig
from .exceptions import BatchError as BatchError
from .exceptions import BatchRequestError as BatchRequestError
from .exceptions import ConfigurationError as ConfigurationError
from .exceptions import LinodeBatchError as LinodeBatchError
from .exceptions import ResponseShapeError as ResponseShapeError
from .exceptions import SerializationError as SerializationError
from .linode import Linode as Linode
from .linode import LinodeIP as LinodeIP
from .request import Request as Request
from .response import ActionResponse as ActionResponse

__all__ = [
    "Client",
    "ClientConfig",
    "Request",
    "ActionResponse",
    "Linode",
    "LinodeIP",
    "LinodeBatchError",
    "BatchError",
    "BatchRequestError",
    "ConfigurationError",
    "ResponseShapeError",
    "SerializationError",
]

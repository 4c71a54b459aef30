"""Client configuration"""

import os

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from linodebatch.exceptions import ConfigurationError

DEFAULT_API_URL = "https://api.linode.com/"
# undocumented in the Linode API docs
DEFAULT_MAX_BATCH_SIZE = 24
DEFAULT_TIMEOUT_SECONDS = 30.0

ENV_OVERRIDES = {
    "base_url": "LINODE_API_URL",
    "max_batch_size": "LINODE_MAX_BATCH_SIZE",
    "timeout": "LINODE_TIMEOUT",
}


class ClientConfig(BaseModel):
    """
    Immutable settings shared by every client of a process.

    Build it once at startup and pass the same instance to each ``Client``.
    """

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(default=DEFAULT_API_URL, description="API endpoint receiving batches")
    max_batch_size: int = Field(
        default=DEFAULT_MAX_BATCH_SIZE,
        ge=1,
        description="maximum number of actions sent in a single request",
    )
    timeout: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS,
        gt=0,
        description="transport timeout in seconds for each batch request",
    )

    @field_validator("base_url")
    @classmethod
    def check_base_url(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("base_url cannot be empty")
        return stripped

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Build a config, applying ``LINODE_*`` environment overrides when set."""
        overrides: dict[str, str] = {}
        for field_name, env_name in ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value:
                overrides[field_name] = value
        try:
            return cls.model_validate(overrides)
        except ValidationError as error:
            invalid = []
            for detail in error.errors():
                field_name = str(detail["loc"][0])
                invalid.append(
                    f"{ENV_OVERRIDES[field_name]}={overrides[field_name]!r} ({detail['msg']})"
                )
            raise ConfigurationError(
                f"invalid environment configuration: {', '.join(invalid)}"
            ) from error


def get_default_api_key() -> str:
    api_key = os.getenv("LINODE_API_KEY")
    if not api_key:
        raise ConfigurationError(
            "API key not found. Either set LINODE_API_KEY in the environment variables or provide it through the api_key parameter."
        )
    return api_key

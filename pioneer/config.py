import os
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

#: Environment variable prefix for every relay setting.
ENV_PREFIX = "PIONEER_"


class RelaySettings(BaseModel):
    """
    Settings for the channel relay and the builders bound to it.

    Values are usually taken from ``PIONEER_*`` environment variables
    via :meth:`from_env`, but the model can be built directly in code
    and tests.
    """

    url: str = "ws://127.0.0.1:9001"
    greeting: str = "Hello from Python!"
    reconnect_delay: float = Field(default=5.0, ge=0.0)
    reply_timeout: float = Field(default=10.0, gt=0.0)
    event_naming: Literal["shared", "namespaced"] = "shared"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RelaySettings":
        """
        Build settings from environment variables.

        Every field maps to ``PIONEER_<FIELD>`` in upper case, e.g.
        ``PIONEER_RECONNECT_DELAY``. Unset variables keep their defaults.

        :param environ: Mapping to read from. Defaults to ``os.environ``.
        :return: Validated settings.
        :raises pydantic.ValidationError: If a value cannot be parsed.
        """
        env = os.environ if environ is None else environ
        values = {}
        for name in cls.model_fields:
            key = f"{ENV_PREFIX}{name.upper()}"
            if key in env:
                values[name] = env[key]
        return cls.model_validate(values)

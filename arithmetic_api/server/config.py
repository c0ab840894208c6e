"""Server configuration."""
import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, DirectoryPath, Field, IPvAnyAddress

from arithmetic_api.common.validator import DEFAULT_MAX_DEPTH


class ServerConfig(BaseModel):
    """
    Settings of the HTTP server.

    The instance is frozen: it is built once at startup and shared read-only
    by every request.
    """

    model_config = ConfigDict(frozen=True)

    host: IPvAnyAddress = Field(default="127.0.0.1", description="Server host address")
    port: int = Field(default=3000, ge=1, le=65535, description="Server TCP port")
    static_dir: Optional[DirectoryPath] = Field(default=None, description="Directory served at '/'")
    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=1, description="Maximum expression nesting")
    log_level: str = Field(default="INFO", description="Logging level name")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServerConfig":
        """
        Build a configuration from environment variables.

        Recognised variables: ARITHMETIC_HOST, PORT, ARITHMETIC_STATIC_DIR,
        ARITHMETIC_MAX_DEPTH and ARITHMETIC_LOG_LEVEL. Unset variables keep
        their default.

        :param Mapping environ: Variables to read, os.environ by default

        :return: Validated configuration
        :rtype: ServerConfig
        :raises pydantic.ValidationError: If a variable holds an invalid value
        """
        environ = os.environ if environ is None else environ
        names = {
            "host": "ARITHMETIC_HOST",
            "port": "PORT",
            "static_dir": "ARITHMETIC_STATIC_DIR",
            "max_depth": "ARITHMETIC_MAX_DEPTH",
            "log_level": "ARITHMETIC_LOG_LEVEL",
        }
        values = {field: environ[var] for field, var in names.items() if environ.get(var)}
        return cls(**values)

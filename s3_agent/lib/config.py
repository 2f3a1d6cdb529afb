"""Agent configuration and fixed client policy."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .exceptions import ConfigError

# botocore's SigV4 signer needs a region; the endpoint decides routing.
DEFAULT_REGION = "us-east-1"
HTTP_TIMEOUT_SECONDS = 200
MAX_RETRIES = 5
# Most non-AWS backends do not serve virtual-hosted bucket names.
ADDRESSING_STYLE = "path"

ENV_PREFIX = "S3_"


@dataclass(frozen=True)
class AgentConfig:
    """Connection parameters for an S3-compatible endpoint."""

    access_key: str
    secret_key: str = field(repr=False)
    endpoint: str
    root_ca: bytes | None = field(default=None, repr=False)

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        prefix: str = ENV_PREFIX,
        load_root_ca: bool = True,
    ) -> "AgentConfig":
        """Load configuration from environment variables.

        Reads {prefix}ACCESS_KEY, {prefix}SECRET_KEY, {prefix}ENDPOINT and the
        optional {prefix}ROOT_CA_FILE. Missing values are left empty so that
        validation reports them.

        Args:
            environ: Mapping to read from (default: os.environ)
            prefix: Variable name prefix
            load_root_ca: Read {prefix}ROOT_CA_FILE; disable when the CA
                comes from elsewhere

        Returns:
            AgentConfig built from the environment

        Raises:
            ConfigError: If the root CA file cannot be read
        """
        env = os.environ if environ is None else environ

        root_ca = None
        ca_file = env.get(f"{prefix}ROOT_CA_FILE") if load_root_ca else None
        if ca_file:
            root_ca = read_root_ca(Path(ca_file))

        return cls(
            access_key=env.get(f"{prefix}ACCESS_KEY", ""),
            secret_key=env.get(f"{prefix}SECRET_KEY", ""),
            endpoint=env.get(f"{prefix}ENDPOINT", ""),
            root_ca=root_ca,
        )


def read_root_ca(path: Path) -> bytes:
    """Read root CA bytes from disk, raising ConfigError on failure."""
    try:
        return path.read_bytes()
    except OSError as e:
        raise ConfigError(f"Cannot read root CA file {path}: {e}") from e

"""S3 agent construction: validate config, build TLS trust, open a boto3 client."""

import atexit
import re
import weakref
from dataclasses import dataclass, field
from typing import Any, Protocol
from urllib.parse import SplitResult, urlsplit

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError

from .config import (
    ADDRESSING_STYLE,
    DEFAULT_REGION,
    HTTP_TIMEOUT_SECONDS,
    MAX_RETRIES,
    AgentConfig,
)
from .exceptions import (
    InvalidEndpointError,
    MissingFieldError,
    SessionError,
    TLSConfigError,
)
from .logging_config import LOGGER
from .tls import TLSTransport, build_tls_transport

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_OPTIONAL_PORT = re.compile(r"(:[0-9]*)?")


@dataclass(frozen=True)
class ClientParams:
    """Everything the storage client factory needs to build an S3 client."""

    access_key: str
    secret_key: str = field(repr=False)
    endpoint: str
    region: str = DEFAULT_REGION
    addressing_style: str = ADDRESSING_STYLE
    max_retries: int = MAX_RETRIES
    timeout: int = HTTP_TIMEOUT_SECONDS
    verify: bool | str = True


class StorageClientFactory(Protocol):
    """Builds an S3 API client from ClientParams."""

    def create_client(self, params: ClientParams) -> Any: ...


class Boto3ClientFactory:
    """StorageClientFactory backed by a boto3 session."""

    def create_client(self, params: ClientParams) -> Any:
        """Open a boto3 session with static credentials and build an S3 client.

        Args:
            params: Client parameters

        Returns:
            boto3 S3 client
        """
        session = boto3.session.Session(
            aws_access_key_id=params.access_key,
            aws_secret_access_key=params.secret_key,
            region_name=params.region,
        )
        client_config = Config(
            connect_timeout=params.timeout,
            read_timeout=params.timeout,
            retries={"max_attempts": params.max_retries, "mode": "standard"},
            s3={"addressing_style": params.addressing_style},
        )
        return session.client(
            "s3",
            endpoint_url=params.endpoint,
            verify=params.verify,
            config=client_config,
        )


@dataclass(eq=False)
class S3Agent:
    """Handle wrapping one S3 API client."""

    client: Any
    endpoint: str
    tls: TLSTransport = field(default_factory=TLSTransport, repr=False)


def _check_port(netloc: str) -> None:
    hostport = netloc.rpartition("@")[2]
    if hostport.startswith("["):
        port = hostport.partition("]")[2]
    else:
        colon = hostport.rfind(":")
        port = hostport[colon:] if colon != -1 else ""
    if not _OPTIONAL_PORT.fullmatch(port):
        raise ValueError(f"invalid port {port!r} after host")


def parse_endpoint(endpoint: str) -> SplitResult:
    """Parse endpoint as a URL.

    Ports must be numeric but are not range checked, and percent escapes
    in the query are left unchecked.

    Raises:
        InvalidEndpointError: If endpoint is not valid URL syntax
    """
    # urlsplit silently strips some control characters
    if _CONTROL_CHARS.search(endpoint):
        raise InvalidEndpointError(endpoint, "invalid control character in URL")
    if endpoint.startswith(":"):
        raise InvalidEndpointError(endpoint, "missing protocol scheme")

    try:
        parts = urlsplit(endpoint)
        _check_port(parts.netloc)
    except ValueError as e:
        raise InvalidEndpointError(endpoint, str(e)) from e

    # Without a scheme "host:port" is ambiguous with a relative path
    if not parts.scheme and not parts.netloc and ":" in parts.path.partition("/")[0]:
        raise InvalidEndpointError(endpoint, "first path segment in URL cannot contain colon")
    if " " in parts.netloc:
        raise InvalidEndpointError(endpoint, "invalid character ' ' in host name")
    if any(_BAD_ESCAPE.search(part) for part in (parts.netloc, parts.path, parts.fragment)):
        raise InvalidEndpointError(endpoint, "invalid URL escape")

    return parts


def _keep_bundle_for(client: Any, transport: TLSTransport) -> None:
    """Remove the CA bundle once client is collected, or at exit."""
    if transport.ca_bundle_path is None:
        return
    try:
        weakref.finalize(client, transport.cleanup)
    except TypeError:
        # client does not support weak references
        atexit.register(transport.cleanup)


def validate_config(config: AgentConfig) -> None:
    """Check required fields and endpoint syntax.

    Raises:
        MissingFieldError: If endpoint, access key or secret key is empty
        InvalidEndpointError: If endpoint cannot be parsed as a URL
    """
    if not config.endpoint:
        raise MissingFieldError("endpoint")

    parse_endpoint(config.endpoint)

    if not config.access_key:
        raise MissingFieldError("access_key")

    if not config.secret_key:
        raise MissingFieldError("secret_key")


def new_s3_agent(
    config: AgentConfig, client_factory: StorageClientFactory | None = None
) -> S3Agent:
    """Build an S3 agent for an S3-compatible endpoint.

    1. Validate config
    2. Build TLS trust from the optional root CA
    3. Open a session with static credentials, the fixed region, path-style
       addressing, the fixed timeout and retry count
    4. Wrap the resulting client

    Args:
        config: Connection parameters
        client_factory: Factory building the S3 client (default: boto3)

    Returns:
        S3Agent wrapping the new client

    Raises:
        MissingFieldError: If a required field is empty
        InvalidEndpointError: If the endpoint is not valid URL syntax
        TLSConfigError: If the root CA is not valid certificate material
        SessionError: If the SDK fails to build the client
    """
    validate_config(config)

    try:
        transport = build_tls_transport(config.root_ca)
    except TLSConfigError as e:
        raise TLSConfigError(f"build tls config failed, error is [{e}]") from e

    params = ClientParams(
        access_key=config.access_key,
        secret_key=config.secret_key,
        endpoint=config.endpoint,
        verify=transport.verify,
    )
    factory = client_factory if client_factory is not None else Boto3ClientFactory()

    try:
        client = factory.create_client(params)
    except (BotoCoreError, ValueError) as e:
        transport.cleanup()
        raise SessionError(str(e)) from e
    except Exception:
        transport.cleanup()
        raise

    # botocore reopens the verify path on every new connection
    _keep_bundle_for(client, transport)

    LOGGER.info(
        "Built S3 agent for %s",
        config.endpoint,
        extra={
            "endpoint": config.endpoint,
            "addressing_style": params.addressing_style,
            "custom_ca": transport.ca_bundle_path is not None,
        },
    )
    return S3Agent(client=client, endpoint=config.endpoint, tls=transport)

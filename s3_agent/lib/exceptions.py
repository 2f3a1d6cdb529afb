"""Errors raised while building an S3 agent."""


class S3AgentError(Exception):
    """Base class for agent construction errors."""


class MissingFieldError(S3AgentError):
    """A required configuration field is empty."""

    def __init__(self, field: str) -> None:
        super().__init__(f"{field.replace('_', ' ')} is empty")
        self.field = field


class InvalidEndpointError(S3AgentError):
    """Endpoint string is not valid URL syntax."""

    def __init__(self, endpoint: str, reason: str) -> None:
        super().__init__(f"url parse endpoint [{endpoint}] failed, error is [{reason}]")
        self.endpoint = endpoint
        self.reason = reason


class TLSConfigError(S3AgentError):
    """Root CA material could not be turned into a TLS trust configuration."""


class SessionError(S3AgentError):
    """The SDK refused to open a session or build the client."""


class ConfigError(S3AgentError):
    """Configuration could not be loaded from the environment."""

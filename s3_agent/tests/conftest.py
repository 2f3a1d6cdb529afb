"""Test fixtures for s3_agent tests."""

from datetime import datetime, timedelta, timezone
from typing import Any
from unittest.mock import MagicMock

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from s3_agent.lib.agent import ClientParams
from s3_agent.lib.config import AgentConfig


class RecordingClientFactory:
    """Storage client factory that records every ClientParams it receives."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[ClientParams] = []

    def create_client(self, params: ClientParams) -> Any:
        self.calls.append(params)
        if self.error is not None:
            raise self.error
        return MagicMock(name=f"s3-client-{len(self.calls)}")


def _build_ca_pem(common_name: str) -> bytes:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    not_before = datetime.now(timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_before)
        .not_valid_after(not_before + timedelta(days=30))
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .sign(key, hashes.SHA256())
    )
    return cert.public_bytes(serialization.Encoding.PEM)


@pytest.fixture(scope="session")
def root_ca_pem() -> bytes:
    """Return a self-signed root CA certificate in PEM format."""
    return _build_ca_pem("Test Storage Root CA")


@pytest.fixture(scope="session")
def second_ca_pem() -> bytes:
    """Return a second, unrelated CA certificate in PEM format."""
    return _build_ca_pem("Test Storage Second CA")


@pytest.fixture
def client_factory() -> RecordingClientFactory:
    """Return a recording storage client factory."""
    return RecordingClientFactory()


@pytest.fixture
def agent_config() -> AgentConfig:
    """Return a valid configuration without a root CA."""
    return AgentConfig(access_key="AK", secret_key="SK", endpoint="https://s3.example.com")

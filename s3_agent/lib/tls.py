"""TLS trust configuration built from optional root CA bytes."""

import os
import tempfile
from dataclasses import dataclass, field

from cryptography import x509
from cryptography.hazmat.primitives import serialization

from .exceptions import TLSConfigError


@dataclass
class TLSTransport:
    """Trust settings handed to botocore.

    verify is True for system trust, otherwise the path of a PEM bundle
    holding the supplied CA certificates.
    """

    verify: bool | str = True
    certificates: list[x509.Certificate] = field(default_factory=list)

    @property
    def ca_bundle_path(self) -> str | None:
        """Return the CA bundle path, or None when using system trust."""
        return self.verify if isinstance(self.verify, str) else None

    def cleanup(self) -> None:
        """Remove the CA bundle file, if one was written."""
        path = self.ca_bundle_path
        if path and os.path.exists(path):
            os.remove(path)


def load_root_certificates(root_ca: bytes) -> list[x509.Certificate]:
    """Parse every PEM certificate in root_ca.

    Raises:
        TLSConfigError: If no valid certificate is found
    """
    try:
        certificates = x509.load_pem_x509_certificates(root_ca)
    except ValueError as e:
        raise TLSConfigError(f"invalid root CA certificate: {e}") from e

    if not certificates:
        raise TLSConfigError("no certificate found in root CA data")
    return certificates


def write_ca_bundle(certificates: list[x509.Certificate]) -> str:
    """Write certificates to a private PEM bundle and return its path."""
    fd, path = tempfile.mkstemp(prefix="s3-agent-ca-", suffix=".pem")
    with os.fdopen(fd, "wb") as f:
        for cert in certificates:
            f.write(cert.public_bytes(serialization.Encoding.PEM))
    return path


def build_tls_transport(root_ca: bytes | None) -> TLSTransport:
    """Build TLS trust settings for the given root CA.

    Args:
        root_ca: PEM encoded CA certificate(s), or None/empty for system trust

    Returns:
        TLSTransport trusting the supplied CA, or the system store

    Raises:
        TLSConfigError: If root_ca is not valid certificate material
    """
    if not root_ca:
        return TLSTransport()

    certificates = load_root_certificates(root_ca)
    return TLSTransport(verify=write_ca_bundle(certificates), certificates=certificates)

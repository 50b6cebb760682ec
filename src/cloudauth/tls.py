"""Client certificates for mutual TLS."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID


@dataclass(frozen=True)
class ClientCertificate:
    """PEM-encoded certificate chain and matching private key."""

    cert_pem: bytes
    key_pem: bytes


def load_client_certificate(path: str | Path) -> ClientCertificate:
    """Split a combined PEM file into its certificate chain and private key.

    Args:
        path: File holding one or more certificates followed or preceded by
            an unencrypted private key.

    Raises:
        ValueError: If the file lacks a valid certificate or private key.
    """
    data = Path(path).read_bytes()
    try:
        certs = x509.load_pem_x509_certificates(data)
    except ValueError as exc:
        raise ValueError(f"No certificate found in {path}") from exc
    try:
        key = serialization.load_pem_private_key(data, password=None)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"No private key found in {path}") from exc

    return ClientCertificate(
        cert_pem=b"".join(c.public_bytes(serialization.Encoding.PEM) for c in certs),
        key_pem=key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        ),
    )


def generate_self_signed_certificate(
    common_name: str,
    organization_name: str | None = None,
    country_name: str | None = None,
    serial_number: int = 1,
    validity_days: int = 365,
    key_size: int = 2048,
) -> ClientCertificate:
    """Generate a self-signed X.509 client certificate and private key.

    Meant for local mTLS setups and tests; production certificates come from
    your CA.

    Args:
        common_name: Common Name (CN) for the certificate subject.
        organization_name: Organization Name (O) for the certificate subject.
        country_name: Country Name (C) for the certificate subject.
        serial_number: Serial number for the certificate.
        validity_days: Offset in days from now for the certificate
            expiration time.
        key_size: RSA key size in bits.

    Returns:
        The certificate and PKCS8 private key in PEM format.
    """
    key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)

    attributes = [
        x509.NameAttribute(oid, value)
        for oid, value in (
            (NameOID.COUNTRY_NAME, country_name),
            (NameOID.ORGANIZATION_NAME, organization_name),
            (NameOID.COMMON_NAME, common_name),
        )
        if value
    ]
    name = x509.Name(attributes)
    now = datetime.now(timezone.utc)

    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(serial_number)
        .not_valid_before(now)
        .not_valid_after(now + timedelta(days=validity_days))
        .add_extension(
            x509.ExtendedKeyUsage([ExtendedKeyUsageOID.CLIENT_AUTH]),
            critical=False,
        )
        .sign(private_key=key, algorithm=hashes.SHA256())
    )

    return ClientCertificate(
        cert_pem=cert.public_bytes(serialization.Encoding.PEM),
        key_pem=key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,  # produces "PRIVATE KEY"
            encryption_algorithm=serialization.NoEncryption(),
        ),
    )

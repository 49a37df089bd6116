"""Certificate decoding and signature checks."""

import logging
from typing import Optional, Union

from cryptography import x509
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import dsa, ec, ed448, ed25519, padding, rsa, x448, x25519

from chain_trust.exceptions import CertificateDecodeError, ProviderError
from chain_trust.names import display_name

logger = logging.getLogger(__name__)

PEM_MARKER = b"-----BEGIN CERTIFICATE-----"

CertificateLike = Union[x509.Certificate, bytes]


def as_certificate(value: CertificateLike) -> x509.Certificate:
    """
    Accept a decoded certificate or DER bytes as returned by getpeercert(binary_form=True).

    Raises:
        CertificateDecodeError: If the bytes are not a DER certificate
    """
    if isinstance(value, x509.Certificate):
        return value
    try:
        return x509.load_der_x509_certificate(bytes(value))
    except ValueError as e:
        raise CertificateDecodeError(f"Cannot decode presented certificate: {e}") from e


def fingerprint_sha256(cert: x509.Certificate) -> str:
    return cert.fingerprint(hashes.SHA256()).hex()


def _public_key(cert: x509.Certificate):
    try:
        return cert.public_key()
    except (ValueError, UnsupportedAlgorithm) as e:
        raise ProviderError(
            f"Cannot load public key of '{display_name(cert.subject)}': {e}"
        ) from e


def _verify(cert: x509.Certificate, public_key) -> None:
    """
    Verify the signature on cert with public_key.

    Raises InvalidSignature, TypeError or ValueError when the signature does not
    match or the key does not fit the signature algorithm. Raises ProviderError
    when the algorithm itself cannot be processed.
    """
    try:
        parameters = cert.signature_algorithm_parameters
        hash_algorithm = cert.signature_hash_algorithm
    except UnsupportedAlgorithm as e:
        raise ProviderError(
            f"Unsupported signature algorithm {cert.signature_algorithm_oid.dotted_string}: {e}"
        ) from e

    signature = cert.signature
    data = cert.tbs_certificate_bytes
    try:
        if isinstance(public_key, rsa.RSAPublicKey):
            if not isinstance(parameters, (padding.PKCS1v15, padding.PSS)):
                raise TypeError("RSA key cannot verify a non-RSA signature")
            public_key.verify(signature, data, parameters, hash_algorithm)
        elif isinstance(public_key, ec.EllipticCurvePublicKey):
            if not isinstance(parameters, ec.ECDSA):
                raise TypeError("EC key cannot verify a non-ECDSA signature")
            public_key.verify(signature, data, parameters)
        elif isinstance(public_key, (ed25519.Ed25519PublicKey, ed448.Ed448PublicKey)):
            if parameters is not None or hash_algorithm is not None:
                raise TypeError("EdDSA key cannot verify a hashed signature")
            public_key.verify(signature, data)
        elif isinstance(public_key, dsa.DSAPublicKey):
            if parameters is not None or hash_algorithm is None:
                raise TypeError("DSA key cannot verify a non-DSA signature")
            public_key.verify(signature, data, hash_algorithm)
        elif isinstance(public_key, (x25519.X25519PublicKey, x448.X448PublicKey)):
            raise TypeError("Key agreement keys cannot verify signatures")
        else:
            raise ProviderError(f"No signature verification for key type {type(public_key).__name__}")
    except UnsupportedAlgorithm as e:
        raise ProviderError(f"Signature verification not supported: {e}") from e


def signature_error(cert: x509.Certificate, signer: x509.Certificate) -> Optional[str]:
    """
    Check that cert was signed with signer's key.

    Returns:
        None if the signature verifies, otherwise a short reason
    """
    try:
        _verify(cert, _public_key(signer))
    except InvalidSignature:
        return "signature mismatch"
    except (TypeError, ValueError) as e:
        return f"incompatible key: {e}"
    return None


def is_self_signed(cert: x509.Certificate) -> bool:
    """
    Determine whether cert's signature verifies under its own public key.

    Signature mismatches and incompatible keys mean "not self-signed".
    ProviderError is propagated.
    """
    error = signature_error(cert, cert)
    if error is not None:
        logger.debug(f"Certificate '{display_name(cert.subject)}' is not self-signed: {error}")
        return False
    return True

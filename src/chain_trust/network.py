"""Retrieval of the certificate chain a TLS server presents."""

import socket
import ssl
import logging
import subprocess
from typing import List, Optional

from cryptography import x509
from cryptography.hazmat.primitives import serialization

from chain_trust.truststore import split_pem_certificates

logger = logging.getLogger(__name__)


def _extract_chain_via_openssl(host: str, port: int, timeout: float, server_name: Optional[str] = None) -> List[bytes]:
    """
    Extract the presented chain using the OpenSSL command line tool.
    This is a fallback when get_unverified_chain() is not available.

    Returns:
        List of DER-encoded certificates, leaf first (empty on failure)
    """
    openssl_cmd = [
        "openssl", "s_client",
        "-connect", f"{host}:{port}",
        "-servername", server_name or host,
        "-showcerts",
    ]

    try:
        result = subprocess.run(
            openssl_cmd,
            input=b"Q\n",
            capture_output=True,
            timeout=timeout + 2,
            check=False,
        )
    except subprocess.TimeoutExpired:
        logger.debug("OpenSSL command timed out")
        return []
    except FileNotFoundError:
        logger.debug("OpenSSL command not found")
        return []

    chain_der: List[bytes] = []
    for pem_cert in split_pem_certificates(result.stdout or b""):
        try:
            cert = x509.load_pem_x509_certificate(pem_cert)
        except ValueError as e:
            logger.debug(f"Error parsing certificate from OpenSSL output: {e}")
            continue
        chain_der.append(cert.public_bytes(serialization.Encoding.DER))

    logger.debug(f"Extracted {len(chain_der)} certificate(s) via OpenSSL")
    return chain_der


def fetch_peer_chain(
    host: str,
    port: int,
    timeout: float = 10.0,
    server_name: Optional[str] = None,
) -> List[bytes]:
    """
    Connect to host:port and return the certificate chain presented by the server.

    Certificate verification is disabled for the handshake: the chain is
    collected so that the trust strategy can run its own check on it.

    Args:
        host: Target hostname
        port: Target port
        timeout: Connection timeout in seconds
        server_name: SNI hostname (defaults to host)

    Returns:
        List of DER-encoded certificates, leaf first

    Raises:
        ConnectionError: If DNS resolution or the connection fails
        ssl.SSLError: If the TLS handshake fails
    """
    logger.debug(f"Connecting to {host}:{port} (timeout={timeout}s)")

    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE

    try:
        sock = socket.create_connection((host, port), timeout=timeout)
    except socket.gaierror as e:
        raise ConnectionError(f"DNS resolution failed for {host}: {e}")
    except socket.timeout:
        raise ConnectionError(f"Connection timeout after {timeout}s")
    except OSError as e:
        raise ConnectionError(f"Connection error to {host}:{port}: {e}")

    try:
        with context.wrap_socket(sock, server_hostname=server_name or host) as ssl_sock:
            logger.debug("TLS handshake completed")
            leaf_der = ssl_sock.getpeercert(binary_form=True)
            if not leaf_der:
                raise ssl.SSLError("No certificate received from server")

            # get_unverified_chain() exists from Python 3.13 on
            if hasattr(ssl_sock, "get_unverified_chain"):
                chain = [bytes(cert) for cert in ssl_sock.get_unverified_chain() or [] if cert]
                if chain:
                    logger.debug(f"Received {len(chain)} certificate(s) in chain")
                    return chain
    except socket.timeout:
        raise ConnectionError(f"Connection timeout after {timeout}s")
    except ssl.SSLError as e:
        raise ssl.SSLError(f"TLS handshake failed: {e}")
    finally:
        sock.close()

    logger.info("Extracting certificate chain via OpenSSL...")
    chain = _extract_chain_via_openssl(host, port, timeout, server_name)
    if not chain or chain[0] != leaf_der:
        logger.warning("Could not extract the full chain, continuing with the leaf certificate only")
        return [leaf_der]
    return chain

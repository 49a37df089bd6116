"""Trust store loading."""

import logging
import re
from collections.abc import Sequence
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional

from cryptography import x509
from cryptography.hazmat.primitives.serialization import pkcs12

from chain_trust.certificate import PEM_MARKER
from chain_trust.exceptions import TrustStoreError
from chain_trust.names import display_name

logger = logging.getLogger(__name__)

CERTIFICATE_SUFFIXES = (".pem", ".crt", ".cer", ".der")


class StoreType(str, Enum):
    """Supported trust store encodings."""

    PEM = "PEM"
    DER = "DER"
    PKCS12 = "PKCS12"


class TrustAnchors(Sequence):
    """
    Read-only, ordered collection of trusted certificates.

    Created once from the configured trust store and shared by reference.
    Order is the order the store produced; duplicates are kept.
    """

    __slots__ = ("_certs",)

    def __init__(self, certs: Iterable[x509.Certificate] = ()):
        self._certs = tuple(certs)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return TrustAnchors(self._certs[index])
        return self._certs[index]

    def __len__(self) -> int:
        return len(self._certs)

    def __repr__(self) -> str:
        return f"TrustAnchors({len(self._certs)} certificate(s))"

    def subjects(self) -> List[str]:
        return [display_name(cert.subject) for cert in self._certs]


def split_pem_certificates(data: bytes) -> List[bytes]:
    """Split PEM data into individual certificate blocks."""
    pattern = rb"-----BEGIN CERTIFICATE-----(.*?)-----END CERTIFICATE-----"
    matches = re.findall(pattern, data, re.DOTALL)
    return [
        b"-----BEGIN CERTIFICATE-----" + match + b"-----END CERTIFICATE-----\n"
        for match in matches
    ]


def detect_store_type(path: Path, data: bytes) -> StoreType:
    """Guess the encoding of a trust store file from its suffix and content."""
    if path.suffix.lower() in (".p12", ".pfx"):
        return StoreType.PKCS12
    if PEM_MARKER in data:
        return StoreType.PEM
    return StoreType.DER


def load_certificates(
    data: bytes,
    store_type: StoreType,
    password: Optional[str] = None,
) -> List[x509.Certificate]:
    """
    Decode all certificates contained in data.

    Raises:
        TrustStoreError: If the data cannot be decoded
    """
    try:
        if store_type == StoreType.PEM:
            return [x509.load_pem_x509_certificate(block) for block in split_pem_certificates(data)]
        if store_type == StoreType.DER:
            return [x509.load_der_x509_certificate(data)]
        bundle = pkcs12.load_pkcs12(data, password.encode("utf-8") if password is not None else None)
    except ValueError as e:
        raise TrustStoreError(f"Cannot decode {store_type.value} trust store: {e}") from e

    certs = []
    if bundle.cert is not None:
        certs.append(bundle.cert.certificate)
    certs.extend(entry.certificate for entry in bundle.additional_certs)
    return certs


def _store_files(path: Path) -> List[Path]:
    if path.is_dir():
        return sorted(
            child for child in path.iterdir()
            if child.is_file() and child.suffix.lower() in CERTIFICATE_SUFFIXES
        )
    return [path]


def load_trust_store(
    path: Path,
    store_type: Optional[StoreType] = None,
    password: Optional[str] = None,
) -> TrustAnchors:
    """
    Load trusted certificates from a file or a directory of certificate files.

    Args:
        path: Trust store file (PEM bundle, DER, PKCS#12) or directory
        store_type: Encoding; detected per file when not given
        password: PKCS#12 password

    Returns:
        TrustAnchors in file order

    Raises:
        TrustStoreError: If the store is missing, unreadable or empty
    """
    if not path.exists():
        raise TrustStoreError(f"Trust store not found: {path}")

    certs: List[x509.Certificate] = []
    for file_path in _store_files(path):
        try:
            data = file_path.read_bytes()
        except OSError as e:
            raise TrustStoreError(f"Cannot read trust store file {file_path}: {e}") from e
        file_type = store_type or detect_store_type(file_path, data)
        loaded = load_certificates(data, file_type, password)
        logger.debug(f"Loaded {len(loaded)} certificate(s) from {file_path} ({file_type.value})")
        certs.extend(loaded)

    if not certs:
        raise TrustStoreError(f"No certificates found in trust store {path}")

    anchors = TrustAnchors(certs)
    logger.info(f"Loaded {len(anchors)} trusted certificate(s) from {path}")
    logger.debug(f"Trusted subjects: {'; '.join(anchors.subjects())}")
    return anchors

"""Exceptions raised by chain_trust."""


class ChainTrustError(Exception):
    """Base class for all chain_trust errors."""


class ProviderError(ChainTrustError):
    """
    A signature algorithm or key type cannot be processed.

    This is a configuration problem and aborts the validation attempt.
    It must never be read as "not trusted".
    """


class TrustStoreError(ChainTrustError):
    """The trust store could not be read or contains no certificates."""


class CertificateDecodeError(ChainTrustError, ValueError):
    """A presented certificate is not valid DER."""

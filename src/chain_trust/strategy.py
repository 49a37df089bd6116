"""TLS trust strategy that completes the presented chain from the trust store."""

import logging
from typing import Sequence

from chain_trust.certificate import CertificateLike, as_certificate, fingerprint_sha256
from chain_trust.chain import validate_key_chain
from chain_trust.models import TrustDecision
from chain_trust.names import display_name
from chain_trust.truststore import TrustAnchors

logger = logging.getLogger(__name__)


class CompleteChainTrustStrategy:
    """
    Supplementary trust check run at handshake time.

    The leaf of the presented chain is validated against the configured trust
    anchors and the outcome is logged. is_trusted() always returns False: the
    strategy never grants trust by itself, the final decision stays with the
    TLS stack's own verification.
    """

    def __init__(self, anchors: TrustAnchors):
        self.anchors = anchors

    def evaluate(self, presented_chain: Sequence[CertificateLike], auth_type: str) -> TrustDecision:
        """
        Validate the leaf of presented_chain and return the logged outcome.

        Raises:
            ValueError: If presented_chain is empty
            CertificateDecodeError: If the leaf is not a DER certificate
            ProviderError: If a signature algorithm is not supported
        """
        if not presented_chain:
            raise ValueError("Presented certificate chain is empty")

        leaf = as_certificate(presented_chain[0])
        chain_valid = validate_key_chain(leaf, self.anchors)

        decision = TrustDecision(
            leaf_subject=display_name(leaf.subject),
            leaf_issuer=display_name(leaf.issuer),
            leaf_fingerprint_sha256=fingerprint_sha256(leaf),
            chain_valid=chain_valid,
            presented_count=len(presented_chain),
            anchors_count=len(self.anchors),
            auth_type=auth_type,
        )
        if chain_valid:
            logger.debug(
                f"Certificate '{decision.leaf_subject}' chains to a trusted root "
                f"(auth type {auth_type})"
            )
        else:
            logger.info(
                f"Certificate '{decision.leaf_subject}' issued by '{decision.leaf_issuer}' "
                f"could not be validated up to a trusted root (auth type {auth_type})"
            )
        return decision

    def is_trusted(self, presented_chain: Sequence[CertificateLike], auth_type: str) -> bool:
        self.evaluate(presented_chain, auth_type)
        return False

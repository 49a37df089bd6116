"""Certificate chain validation against a set of trusted certificates."""

import logging
from datetime import datetime, timezone
from typing import Optional, Sequence, Set

from cryptography import x509
from cryptography.x509.oid import ExtensionOID

from chain_trust import TRACE
from chain_trust.certificate import fingerprint_sha256, is_self_signed, signature_error
from chain_trust.models import HopOutcome, HopResult
from chain_trust.names import display_name, names_match

logger = logging.getLogger(__name__)

# Extensions a one-certificate PKIX path knows how to process when critical.
RECOGNIZED_CRITICAL_EXTENSIONS = frozenset(
    [
        ExtensionOID.BASIC_CONSTRAINTS,
        ExtensionOID.KEY_USAGE,
        ExtensionOID.EXTENDED_KEY_USAGE,
        ExtensionOID.SUBJECT_ALTERNATIVE_NAME,
        ExtensionOID.NAME_CONSTRAINTS,
        ExtensionOID.CERTIFICATE_POLICIES,
        ExtensionOID.POLICY_MAPPINGS,
        ExtensionOID.POLICY_CONSTRAINTS,
        ExtensionOID.INHIBIT_ANY_POLICY,
    ]
)


def _validation_time(at: Optional[datetime]) -> datetime:
    """Default to now; naive datetimes are taken as UTC."""
    if at is None:
        return datetime.now(timezone.utc)
    if at.tzinfo is None:
        return at.replace(tzinfo=timezone.utc)
    return at


def _check_validity(cert: x509.Certificate, at: datetime) -> Optional[str]:
    if at < cert.not_valid_before_utc:
        return f"not yet valid (notBefore {cert.not_valid_before_utc.isoformat()})"
    if at > cert.not_valid_after_utc:
        return f"expired (notAfter {cert.not_valid_after_utc.isoformat()})"
    return None


def _check_critical_extensions(cert: x509.Certificate) -> Optional[str]:
    try:
        extensions = cert.extensions
    except ValueError as e:
        return f"malformed extensions: {e}"
    for extension in extensions:
        if extension.critical and extension.oid not in RECOGNIZED_CRITICAL_EXTENSIONS:
            return f"unrecognized critical extension {extension.oid.dotted_string}"
    return None


def check_issuer_hop(
    subject: x509.Certificate,
    candidate: x509.Certificate,
    at: Optional[datetime] = None,
) -> HopResult:
    """
    Validate a one-certificate path made of subject with candidate as sole trust anchor.

    The candidate matches when its subject name equals the issuer name of
    subject. A matching candidate is then checked like a PKIX trust anchor:
    subject's signature must verify under the candidate's key, subject must be
    inside its validity period and must not carry unrecognized critical
    extensions. Revocation is not checked.

    Args:
        subject: Certificate being linked to an issuer
        candidate: Possible issuer from the trust store
        at: Validation time (defaults to now; naive values are read as UTC)

    Returns:
        HopResult with NO_MATCH, MATCHED_INVALID (with reason) or MATCHED_VALID

    Raises:
        ProviderError: The signature algorithm or key type is not supported
    """
    if not names_match(subject.issuer, candidate.subject):
        return HopResult(HopOutcome.NO_MATCH)

    at = _validation_time(at)

    reason = (
        signature_error(subject, candidate)
        or _check_validity(subject, at)
        or _check_critical_extensions(subject)
    )
    if reason is not None:
        return HopResult(HopOutcome.MATCHED_INVALID, reason)
    return HopResult(HopOutcome.MATCHED_VALID)


def validate_key_chain(
    subject: x509.Certificate,
    candidates: Sequence[x509.Certificate],
    at: Optional[datetime] = None,
) -> bool:
    """
    Validate that subject chains up to a self-signed root found in candidates.

    Candidates are scanned from last to first. The first candidate that passes
    the one-hop validation decides the result: if it is self-signed the root is
    reached, otherwise the search continues from that candidate and its result
    is returned. Other candidates carrying the same subject name are not tried
    once a match has been committed to.

    Args:
        subject: Leaf certificate
        candidates: Trusted certificates, in trust store order
        at: Validation time (defaults to now; naive values are read as UTC)

    Returns:
        True if validation until a root certificate succeeded, False otherwise

    Raises:
        ProviderError: The signature algorithm or key type is not supported
    """
    return _validate_from(subject, candidates, _validation_time(at), set())


def _validate_from(
    subject: x509.Certificate,
    candidates: Sequence[x509.Certificate],
    at: datetime,
    visited: Set[str],
) -> bool:
    fingerprint = fingerprint_sha256(subject)
    if fingerprint in visited:
        logger.warning(
            f"Issuer cycle detected at '{display_name(subject.subject)}', stopping this path"
        )
        return False
    visited.add(fingerprint)

    for candidate in reversed(candidates):
        hop = check_issuer_hop(subject, candidate, at)
        if hop.outcome == HopOutcome.NO_MATCH:
            continue
        if not hop.is_valid:
            logger.log(
                TRACE,
                f"Validation of '{display_name(subject.subject)}' via "
                f"'{display_name(candidate.subject)}' failed ({hop.reason}), "
                "checking next trusted certificate",
            )
            continue

        if is_self_signed(candidate):
            logger.debug(f"Validating root [{display_name(candidate.subject)}]")
            return True
        if candidate != subject:
            logger.debug(
                f"Validating [{display_name(subject.subject)}] via: "
                f"[{display_name(candidate.subject)}]"
            )
            return _validate_from(candidate, candidates, at, visited)

    return False

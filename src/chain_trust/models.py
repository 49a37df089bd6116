"""Data models for trust-chain checks."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class Severity(str, Enum):
    """Severity levels for report output."""

    OK = "OK"
    FAIL = "FAIL"


class HopOutcome(str, Enum):
    """Result of checking one candidate as the issuer of a certificate."""

    MATCHED_VALID = "matched-and-valid"
    MATCHED_INVALID = "matched-and-invalid"
    NO_MATCH = "no-match"


@dataclass(frozen=True)
class HopResult:
    """Outcome of a single-hop validation."""

    outcome: HopOutcome
    reason: Optional[str] = None  # Set only for MATCHED_INVALID

    @property
    def is_valid(self) -> bool:
        return self.outcome == HopOutcome.MATCHED_VALID


@dataclass
class TrustDecision:
    """Logged outcome of the supplementary trust check on a presented chain."""

    leaf_subject: str
    leaf_issuer: str
    leaf_fingerprint_sha256: str
    chain_valid: bool  # A self-signed root in the trust store was reached
    presented_count: int
    anchors_count: int
    auth_type: str
    trusted: bool = False  # The strategy never grants trust by itself
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def severity(self) -> Severity:
        return Severity.OK if self.chain_valid else Severity.FAIL

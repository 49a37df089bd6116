"""Report generation (text and JSON)."""

import json
from dataclasses import asdict
from datetime import datetime
from io import StringIO
from typing import Any

from rich.console import Console

from chain_trust.models import Severity, TrustDecision

# Global flag for colored output
_use_color = True


def set_color_output(enabled: bool) -> None:
    """Enable or disable colored output."""
    global _use_color
    _use_color = enabled


def _format_severity(severity: Severity) -> str:
    """Format severity with visual indicator."""
    marker = "✓" if severity == Severity.OK else "✗"
    if not _use_color:
        return f"{severity.value} {marker}"

    color = "green" if severity == Severity.OK else "red"
    output = StringIO()
    console = Console(file=output, force_terminal=True, width=1000)
    console.print(f"[{color}]{severity.value} {marker}[/{color}]", end="")
    return output.getvalue().strip()


def generate_text_report(decision: TrustDecision, target: str) -> str:
    """
    Generate human-readable text report.

    Args:
        decision: Outcome of the trust strategy
        target: Certificate file or host:port that was checked

    Returns:
        Formatted text report
    """
    lines = []
    lines.append("=" * 70)
    lines.append("Trust Chain Check Report")
    lines.append("=" * 70)
    lines.append(f"Target: {target}")
    lines.append(f"Timestamp: {decision.timestamp.strftime('%Y-%m-%d %H:%M:%S UTC')}")
    lines.append("")
    lines.append(f"Leaf Subject: {decision.leaf_subject}")
    lines.append(f"Leaf Issuer: {decision.leaf_issuer}")
    lines.append(f"Fingerprint (SHA-256): {decision.leaf_fingerprint_sha256}")
    lines.append(f"Presented Certificates: {decision.presented_count}")
    lines.append(f"Trusted Certificates: {decision.anchors_count}")
    lines.append("")
    lines.append(f"Chain to Trusted Root: {_format_severity(decision.severity)}")
    if not decision.chain_valid:
        lines.append("  No path to a self-signed root in the trust store could be validated")
    lines.append(f"Trust Granted by Strategy: {'yes' if decision.trusted else 'no'}")
    lines.append("=" * 70)

    return "\n".join(lines)


def generate_json_report(decision: TrustDecision, target: str) -> str:
    """
    Generate JSON report.

    Args:
        decision: Outcome of the trust strategy
        target: Certificate file or host:port that was checked

    Returns:
        JSON string
    """
    def serialize(obj: Any) -> str:
        if isinstance(obj, datetime):
            return obj.isoformat()
        raise TypeError(f"Type {type(obj)} not serializable")

    data = {"target": target, **asdict(decision), "severity": decision.severity.value}
    return json.dumps(data, indent=2, default=serialize)

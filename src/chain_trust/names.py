"""Distinguished-name helpers."""

import re
from collections import Counter

from cryptography import x509

_WHITESPACE = re.compile(r"\s+")


def _normalize_value(value) -> object:
    if isinstance(value, bytes):
        return value
    return _WHITESPACE.sub(" ", value.strip()).casefold()


def name_key(name: x509.Name) -> Counter:
    """
    Reduce a name to a multiset of (OID, normalized value) pairs.

    RDN order and multi-valued RDN grouping are dropped, string values are
    case-folded with runs of whitespace collapsed.
    """
    return Counter(
        (attribute.oid.dotted_string, _normalize_value(attribute.value))
        for attribute in name
    )


def names_match(first: x509.Name, second: x509.Name) -> bool:
    """Order-independent comparison of two distinguished names."""
    return name_key(first) == name_key(second)


def display_name(name: x509.Name) -> str:
    """RFC 4514 string for log output."""
    return name.rfc4514_string() or "<empty>"

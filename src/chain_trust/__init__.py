"""Trust-chain validation against a configured trust store."""

import logging

__version__ = "1.0.0"

# Finer than DEBUG; used for per-candidate validation failures.
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

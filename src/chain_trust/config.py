"""Trust store configuration."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from chain_trust.truststore import StoreType, TrustAnchors, load_trust_store

# Environment variables read by the CLI options.
ENV_STORE_PATH = "CHAIN_TRUST_STORE"
ENV_STORE_PASSWORD = "CHAIN_TRUST_STORE_PASSWORD"
ENV_STORE_TYPE = "CHAIN_TRUST_STORE_TYPE"


@dataclass(frozen=True)
class TrustStoreConfig:
    """Location and encoding of the trust store."""

    path: Path
    password: Optional[str] = None
    store_type: Optional[StoreType] = None  # Detected from the file when None

    def load(self) -> TrustAnchors:
        """Load the configured trust store. Raises TrustStoreError."""
        return load_trust_store(self.path, store_type=self.store_type, password=self.password)

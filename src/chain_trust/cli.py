"""CLI entry point using Typer."""

import logging
import ssl
import sys
from pathlib import Path
from typing import Optional

import typer

from chain_trust import TRACE
from chain_trust.config import ENV_STORE_PASSWORD, ENV_STORE_PATH, ENV_STORE_TYPE, TrustStoreConfig
from chain_trust.exceptions import ChainTrustError, TrustStoreError
from chain_trust.models import TrustDecision
from chain_trust.network import fetch_peer_chain
from chain_trust.reporter import generate_json_report, generate_text_report, set_color_output
from chain_trust.strategy import CompleteChainTrustStrategy
from chain_trust.truststore import StoreType, detect_store_type, load_certificates

app = typer.Typer(help="Validate certificates against a trust store, link by link up to a self-signed root")

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
)

EXIT_CHAIN_VALID = 0
EXIT_CHAIN_INVALID = 2
EXIT_ERROR = 3

TrustStoreOption = typer.Option(..., "--trust-store", "-s", envvar=ENV_STORE_PATH, help="Trust store file (PEM, DER, PKCS#12) or directory")
StoreTypeOption = typer.Option(None, "--store-type", envvar=ENV_STORE_TYPE, case_sensitive=False, help="Trust store encoding (detected when omitted)")
PasswordOption = typer.Option(None, "--password", envvar=ENV_STORE_PASSWORD, help="PKCS#12 trust store password")


def _setup(verbose: bool, color: bool) -> None:
    set_color_output(color)
    if verbose:
        logging.getLogger().setLevel(TRACE)
        logging.getLogger("chain_trust").setLevel(TRACE)


def _run_strategy(presented_chain: list, config: TrustStoreConfig, auth_type: str) -> TrustDecision:
    strategy = CompleteChainTrustStrategy(config.load())
    return strategy.evaluate(presented_chain, auth_type)


def _report_and_exit(decision: TrustDecision, target: str, json_output: bool) -> None:
    if json_output:
        print(generate_json_report(decision, target))
    else:
        print(generate_text_report(decision, target))
    sys.exit(EXIT_CHAIN_VALID if decision.chain_valid else EXIT_CHAIN_INVALID)


@app.command()
def verify(
    cert_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Certificate file (PEM or DER); the first certificate is the leaf"),
    trust_store: Path = TrustStoreOption,
    store_type: Optional[StoreType] = StoreTypeOption,
    password: Optional[str] = PasswordOption,
    auth_type: str = typer.Option("RSA", "--auth-type", help="Key exchange / authentication type reported to the strategy"),
    json_output: bool = typer.Option(False, "--json", "-j", help="JSON output"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Trace logging"),
    color: bool = typer.Option(True, "--color/--no-color", help="Enable/disable colored output"),
):
    """
    Validate a certificate file against the trust store.
    """
    logger = logging.getLogger(__name__)
    _setup(verbose, color)

    config = TrustStoreConfig(path=trust_store, password=password, store_type=store_type)
    try:
        data = cert_file.read_bytes()
        presented = load_certificates(data, detect_store_type(cert_file, data))
        if not presented:
            raise TrustStoreError(f"No certificate found in {cert_file}")
        decision = _run_strategy(presented, config, auth_type)
    except ChainTrustError as e:
        logger.error(str(e))
        sys.exit(EXIT_ERROR)

    _report_and_exit(decision, str(cert_file), json_output)


@app.command()
def check(
    host: str = typer.Argument(..., help="Hostname of the TLS server"),
    port: int = typer.Option(443, "--port", "-p", help="Port (default: 443)"),
    timeout: float = typer.Option(10.0, "--timeout", "-t", help="Timeout in seconds"),
    server_name: Optional[str] = typer.Option(None, "--server-name", help="SNI hostname (defaults to host)"),
    trust_store: Path = TrustStoreOption,
    store_type: Optional[StoreType] = StoreTypeOption,
    password: Optional[str] = PasswordOption,
    json_output: bool = typer.Option(False, "--json", "-j", help="JSON output"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Trace logging"),
    color: bool = typer.Option(True, "--color/--no-color", help="Enable/disable colored output"),
):
    """
    Fetch the chain presented by a TLS server and validate its leaf against the trust store.
    """
    logger = logging.getLogger(__name__)
    _setup(verbose, color)

    config = TrustStoreConfig(path=trust_store, password=password, store_type=store_type)
    try:
        presented = fetch_peer_chain(host, port, timeout=timeout, server_name=server_name)
        decision = _run_strategy(presented, config, "TLS")
    except (ChainTrustError, ConnectionError, ssl.SSLError) as e:
        logger.error(str(e))
        sys.exit(EXIT_ERROR)

    _report_and_exit(decision, f"{host}:{port}", json_output)


def main() -> None:
    app()


if __name__ == "__main__":
    main()

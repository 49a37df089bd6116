"""Tests for the command line interface."""

import json
from unittest.mock import patch

import pytest
from cryptography.hazmat.primitives import serialization
from typer.testing import CliRunner

from chain_trust.cli import EXIT_CHAIN_INVALID, EXIT_CHAIN_VALID, EXIT_ERROR, app
from chain_trust.config import ENV_STORE_PATH

from helpers import to_pem

runner = CliRunner()


@pytest.fixture
def trust_store(tmp_path, proper_chain):
    path = tmp_path / "truststore.pem"
    path.write_bytes(to_pem(proper_chain["root"], proper_chain["intermediate"]))
    return path


@pytest.fixture
def leaf_file(tmp_path, proper_chain):
    path = tmp_path / "leaf.pem"
    path.write_bytes(to_pem(proper_chain["leaf"], proper_chain["intermediate"]))
    return path


def test_verify_valid_chain(leaf_file, trust_store):
    result = runner.invoke(app, ["verify", str(leaf_file), "--trust-store", str(trust_store), "--no-color"])

    assert result.exit_code == EXIT_CHAIN_VALID
    assert "Chain to Trusted Root: OK" in result.stdout
    assert "Trust Granted by Strategy: no" in result.stdout
    assert "Presented Certificates: 2" in result.stdout


def test_verify_untrusted_chain(tmp_path, leaf_file, unrelated_root):
    store = tmp_path / "other.pem"
    store.write_bytes(to_pem(unrelated_root))

    result = runner.invoke(app, ["verify", str(leaf_file), "--trust-store", str(store), "--no-color"])

    assert result.exit_code == EXIT_CHAIN_INVALID
    assert "Chain to Trusted Root: FAIL" in result.stdout


def test_verify_json_output(leaf_file, trust_store, proper_chain):
    result = runner.invoke(app, ["verify", str(leaf_file), "--trust-store", str(trust_store), "--json"])

    assert result.exit_code == EXIT_CHAIN_VALID
    data = json.loads(result.stdout)
    assert data["chain_valid"] is True
    assert data["trusted"] is False
    assert data["severity"] == "OK"
    assert data["target"] == str(leaf_file)
    assert data["leaf_subject"] == "CN=gateway.example.com"


def test_verify_der_leaf(tmp_path, trust_store, proper_chain):
    leaf = tmp_path / "leaf.der"
    leaf.write_bytes(proper_chain["leaf"].public_bytes(serialization.Encoding.DER))

    result = runner.invoke(app, ["verify", str(leaf), "--trust-store", str(trust_store), "--no-color"])

    assert result.exit_code == EXIT_CHAIN_VALID


def test_verify_trust_store_from_environment(leaf_file, trust_store):
    result = runner.invoke(app, ["verify", str(leaf_file), "--no-color"], env={ENV_STORE_PATH: str(trust_store)})

    assert result.exit_code == EXIT_CHAIN_VALID


def test_verify_empty_trust_store(tmp_path, leaf_file):
    store = tmp_path / "empty.pem"
    store.write_text("")

    result = runner.invoke(app, ["verify", str(leaf_file), "--trust-store", str(store)])

    assert result.exit_code == EXIT_ERROR


def test_verify_file_without_certificate(tmp_path, trust_store):
    cert_file = tmp_path / "nothing.pem"
    cert_file.write_text("-----BEGIN NOTHING-----\n")

    result = runner.invoke(app, ["verify", str(cert_file), "--trust-store", str(trust_store)])

    assert result.exit_code == EXIT_ERROR


def test_check_fetches_peer_chain(trust_store, proper_chain):
    chain = [
        proper_chain["leaf"].public_bytes(serialization.Encoding.DER),
        proper_chain["intermediate"].public_bytes(serialization.Encoding.DER),
    ]

    with patch("chain_trust.cli.fetch_peer_chain", return_value=chain) as mock_fetch:
        result = runner.invoke(
            app,
            ["check", "gateway.example.com", "--port", "8443", "--trust-store", str(trust_store), "--no-color"],
        )

    assert result.exit_code == EXIT_CHAIN_VALID
    assert "Target: gateway.example.com:8443" in result.stdout
    mock_fetch.assert_called_once_with("gateway.example.com", 8443, timeout=10.0, server_name=None)


def test_check_connection_error(trust_store):
    with patch("chain_trust.cli.fetch_peer_chain", side_effect=ConnectionError("Connection timeout after 10.0s")):
        result = runner.invoke(app, ["check", "gateway.example.com", "--trust-store", str(trust_store)])

    assert result.exit_code == EXIT_ERROR


def test_check_undecodable_peer_certificate(trust_store):
    with patch("chain_trust.cli.fetch_peer_chain", return_value=[b"garbage"]):
        result = runner.invoke(app, ["check", "gateway.example.com", "--trust-store", str(trust_store)])

    assert result.exit_code == EXIT_ERROR
    assert isinstance(result.exception, SystemExit)

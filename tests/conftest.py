"""Session keys and certificate chain fixtures."""

import pytest

from helpers import make_cert, make_name, rsa_key


@pytest.fixture(scope="session")
def root_key():
    return rsa_key()


@pytest.fixture(scope="session")
def intermediate_key():
    return rsa_key()


@pytest.fixture(scope="session")
def leaf_key():
    return rsa_key()


@pytest.fixture(scope="session")
def other_key():
    return rsa_key()


@pytest.fixture
def proper_chain(root_key, intermediate_key, leaf_key):
    """Create a proper Leaf -> Intermediate -> Root chain with valid signatures."""
    root_subject = make_name("Root CA", "Example Trust")
    intermediate_subject = make_name("Intermediate CA", "Example Trust")

    root = make_cert(root_subject, root_subject, root_key.public_key(), root_key)
    intermediate = make_cert(
        intermediate_subject, root_subject, intermediate_key.public_key(), root_key
    )
    leaf = make_cert(
        make_name("gateway.example.com"),
        intermediate_subject,
        leaf_key.public_key(),
        intermediate_key,
        ca=False,
    )
    return {"leaf": leaf, "intermediate": intermediate, "root": root}


@pytest.fixture
def unrelated_root(other_key):
    subject = make_name("Unrelated CA")
    return make_cert(subject, subject, other_key.public_key(), other_key)

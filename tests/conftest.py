import pytest

from fairplay.fair import sha256_hex

SERVER_SEED = "abc123"
CLIENT_SEED = "xyz789"
SERVER_SEED_HASH = "6ca13d52ca70c883e0f0bb101e425a89e8624de51db2d2392593af6a84118090"


@pytest.fixture
def seeds():
    """Revealed seed pair shared by the golden-value tests."""
    return {"server_seed": SERVER_SEED, "server_seed_hash": SERVER_SEED_HASH, "client_seed": CLIENT_SEED}


@pytest.fixture
def other_hash():
    return sha256_hex("some-other-seed")

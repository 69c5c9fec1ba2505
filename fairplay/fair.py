import hmac
import hashlib
from typing import List, Optional

# Versioned protocol constant: 13 hex chars = 52 bits, exact in a float64.
FLOAT_HEX_CHARS = 13
FLOAT_DENOM = 16 ** FLOAT_HEX_CHARS


def sha256_hex(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def hmac_sha256_hex(key: str, message: str) -> str:
    return hmac.new(key.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()


def seed_material(client_seed: str, nonce: int, index: Optional[int] = None) -> str:
    """HMAC message for a bet; multi-draw games append a sub-index."""
    if index is None:
        return f"{client_seed}:{nonce}"
    return f"{client_seed}:{nonce}:{index}"


def hash_to_uniform(hex_digest: str, offset: int = 0) -> float:
    # Big-endian read of FLOAT_HEX_CHARS hex chars, always in [0,1)
    head = hex_digest[offset:offset + FLOAT_HEX_CHARS]
    if len(head) != FLOAT_HEX_CHARS:
        raise ValueError(f"Digest too short for a {FLOAT_HEX_CHARS}-char window at offset {offset}")
    return int(head, 16) / FLOAT_DENOM


def bet_digest(server_seed: str, client_seed: str, nonce: int, index: Optional[int] = None) -> str:
    return hmac_sha256_hex(server_seed, seed_material(client_seed, nonce, index))


def derive_float(server_seed: str, client_seed: str, nonce: int, index: Optional[int] = None) -> float:
    return hash_to_uniform(bet_digest(server_seed, client_seed, nonce, index))


def sequence(server_seed: str, client_seed: str, start_nonce: int, rounds: int) -> List[float]:
    out: List[float] = []
    for k in range(rounds):
        out.append(derive_float(server_seed, client_seed, start_nonce + k))
    return out

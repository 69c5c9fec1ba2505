"""Seed pair lifecycle: commit, issue nonces, reveal on rotation."""
import secrets
import threading
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from .config import get_logger, settings
from .fair import sha256_hex

logger = get_logger(__name__)


def generate_client_seed() -> str:
    return secrets.token_hex(16)


def generate_server_seed() -> str:
    return secrets.token_hex(32)


@dataclass(frozen=True)
class SeedPair:
    server_seed: str
    server_seed_hash: str
    client_seed: str
    nonce: int  # next nonce to issue; frozen once revealed
    created_at: datetime
    revealed_at: Optional[datetime] = None

    @property
    def active(self) -> bool:
        return self.revealed_at is None

    def to_public_dict(self) -> dict:
        return {
            "server_seed_hash": self.server_seed_hash,
            "client_seed": self.client_seed,
            "nonce": self.nonce,
            "created_at": self.created_at.isoformat(),
        }

    def to_revealed_dict(self) -> dict:
        if self.active:
            raise RuntimeError("Server seed is still committed and cannot be disclosed")
        out = self.to_public_dict()
        out["server_seed"] = self.server_seed
        out["revealed_at"] = self.revealed_at.isoformat()
        return out


class SeedPairManager:
    """Owns the active seed pair and the revealed history.

    One lock serialises nonce issuance and rotation, so no nonce is handed
    out twice and none is issued for a seed after it has been revealed.
    """

    def __init__(self, client_seed: Optional[str] = None, nonce_base: Optional[int] = None):
        self.nonce_base = settings.nonce_base if nonce_base is None else nonce_base
        if self.nonce_base < 0:
            raise ValueError("nonce_base must be >= 0")
        self._lock = threading.Lock()
        self._history: List[SeedPair] = []
        self._pair = self._new_pair(client_seed or generate_client_seed())

    def _new_pair(self, client_seed: str) -> SeedPair:
        if not client_seed:
            raise ValueError("Client seed must be a non-empty string")
        server_seed = generate_server_seed()
        pair = SeedPair(
            server_seed=server_seed,
            server_seed_hash=sha256_hex(server_seed),
            client_seed=client_seed,
            nonce=self.nonce_base,
            created_at=datetime.now(timezone.utc),
        )
        logger.info(f"Committed server seed hash={pair.server_seed_hash}")
        return pair

    @property
    def server_seed_hash(self) -> str:
        with self._lock:
            return self._pair.server_seed_hash

    @property
    def client_seed(self) -> str:
        with self._lock:
            return self._pair.client_seed

    def current(self) -> dict:
        with self._lock:
            return self._pair.to_public_dict()

    def history(self) -> List[SeedPair]:
        with self._lock:
            return list(self._history)

    def commit_server_seed(self) -> str:
        """Retire the active pair (revealing it) and return only the new hash."""
        _, new_hash = self.rotate_seed()
        return new_hash

    def next_nonce(self) -> int:
        with self._lock:
            nonce = self._pair.nonce
            self._pair = replace(self._pair, nonce=nonce + 1)
            return nonce

    def reserve(self) -> Tuple[str, str, int]:
        """Atomically hand out (server_seed, client_seed, nonce) for one bet."""
        with self._lock:
            pair = self._pair
            self._pair = replace(pair, nonce=pair.nonce + 1)
            return pair.server_seed, pair.client_seed, pair.nonce

    def rotate_seed(self, client_seed: Optional[str] = None) -> Tuple[str, str]:
        """Reveal the active server seed and commit a fresh one.

        Returns ``(revealed_server_seed, new_server_seed_hash)``. The new pair
        keeps the current client seed unless one is given, and its nonce
        restarts at the base value.
        """
        retired, new = self.rotate_pair(client_seed)
        return retired.server_seed, new.server_seed_hash

    def rotate_pair(self, client_seed: Optional[str] = None) -> Tuple[SeedPair, SeedPair]:
        with self._lock:
            retired = replace(self._pair, revealed_at=datetime.now(timezone.utc))
            self._history.append(retired)
            self._pair = self._new_pair(client_seed or retired.client_seed)
            logger.info(f"Revealed server seed hash={retired.server_seed_hash} after {retired.nonce - self.nonce_base} bets")
            return retired, self._pair

"""Independent post-hoc verification of a single bet.

``verify_bet`` is a pure function: it rehashes the revealed server seed against
the published commitment and recomputes the bet outcome from scratch. Input
errors raise :class:`InvalidBetInput`; a well-formed but wrong claim comes
back as a :class:`VerificationResult` with ``is_valid=False``.
"""
import math
import re
from numbers import Integral
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Union

from .config import get_logger
from .fair import sha256_hex
from .games import GAME_TYPES, InvalidBetInput, compute_outcome

logger = get_logger(__name__)

FLOAT_TOLERANCE = 1e-6
_HEX64 = re.compile(r"^[0-9a-fA-F]{64}$")

Outcome = Union[float, int, Sequence[int]]


@dataclass(frozen=True)
class VerificationResult:
    is_valid: bool
    server_seed_match: bool
    outcome_match: bool
    details: str
    computed_outcome: Any = None

    def to_dict(self) -> dict:
        return {
            "isValid": self.is_valid,
            "serverSeedMatch": self.server_seed_match,
            "outcomeMatch": self.outcome_match,
            "details": self.details,
            "computedOutcome": self.computed_outcome,
        }


def verify_server_seed(server_seed: str, server_seed_hash: str) -> bool:
    return sha256_hex(server_seed) == server_seed_hash.lower()


def parse_nonce(nonce: Any) -> int:
    if isinstance(nonce, bool):
        raise InvalidBetInput(f"Nonce must be an integer, got {nonce!r}")
    if isinstance(nonce, Integral):
        value = int(nonce)
    elif isinstance(nonce, float) and nonce.is_integer():
        value = int(nonce)
    elif isinstance(nonce, str) and nonce.strip().isdigit():
        value = int(nonce.strip())
    else:
        raise InvalidBetInput(f"Nonce must be an integer, got {nonce!r}")
    if value < 0:
        raise InvalidBetInput(f"Nonce must be non-negative, got {value}")
    return value


def _check_seeds(server_seed: str, server_seed_hash: str, client_seed: str) -> None:
    for name, value in (("server seed", server_seed), ("client seed", client_seed)):
        if not isinstance(value, str) or not value:
            raise InvalidBetInput(f"The {name} must be a non-empty string")
    if not isinstance(server_seed_hash, str) or not _HEX64.match(server_seed_hash):
        raise InvalidBetInput("Server seed hash must be 64 hexadecimal characters")


def _expected_number(expected: Any, game_type: str) -> float:
    if isinstance(expected, bool):
        raise InvalidBetInput(f"Expected {game_type} outcome must be a number, got {expected!r}")
    try:
        value = float(expected)
    except (TypeError, ValueError):
        raise InvalidBetInput(f"Expected {game_type} outcome must be a number, got {expected!r}") from None
    if not math.isfinite(value):
        raise InvalidBetInput(f"Expected {game_type} outcome must be finite, got {expected!r}")
    return value


def _expected_cells(expected: Any) -> List[int]:
    if isinstance(expected, str):
        parts = [p.strip() for p in expected.split(",") if p.strip()]
    elif isinstance(expected, (list, tuple)):
        parts = list(expected)
    else:
        raise InvalidBetInput(f"Expected mines outcome must be a list of cell indices, got {expected!r}")
    cells = []
    for p in parts:
        if isinstance(p, bool):
            raise InvalidBetInput(f"Invalid mine cell {p!r}")
        try:
            cell = int(p)
        except (TypeError, ValueError):
            raise InvalidBetInput(f"Invalid mine cell {p!r}") from None
        if cell != float(p):
            raise InvalidBetInput(f"Invalid mine cell {p!r}")
        cells.append(cell)
    return sorted(cells)


def normalize_expected(game_type: str, expected: Any) -> Outcome:
    if game_type == "mines":
        return _expected_cells(expected)
    value = _expected_number(expected, game_type)
    if game_type == "plinko":
        if not value.is_integer():
            raise InvalidBetInput(f"Expected plinko slot must be an integer, got {expected!r}")
        return int(value)
    return value


def outcomes_match(game_type: str, computed: Outcome, expected: Outcome) -> bool:
    if game_type == "mines":
        return list(computed) == list(expected)
    if game_type == "plinko":
        return computed == expected
    return abs(computed - expected) < FLOAT_TOLERANCE


def _format(outcome: Outcome) -> str:
    if isinstance(outcome, list):
        return "[" + ", ".join(str(c) for c in outcome) + "]"
    return repr(outcome) if isinstance(outcome, float) else str(outcome)


def verify_bet(server_seed: str, server_seed_hash: str, client_seed: str, nonce: Any, game_type: str,
               expected_outcome: Any, game_params: Optional[Dict[str, Any]] = None) -> VerificationResult:
    _check_seeds(server_seed, server_seed_hash, client_seed)
    nonce = parse_nonce(nonce)
    if game_type not in GAME_TYPES:
        raise InvalidBetInput(f"Unknown game type '{game_type}'; expected one of {', '.join(GAME_TYPES)}")
    expected = normalize_expected(game_type, expected_outcome)

    computed = compute_outcome(game_type, server_seed, client_seed, nonce, game_params)["outcome"]
    seed_ok = verify_server_seed(server_seed, server_seed_hash)
    outcome_ok = outcomes_match(game_type, computed, expected)

    parts = []
    if not seed_ok:
        parts.append("Server seed does not match the provided hash")
    parts.append(f"{game_type.capitalize()}: {_format(computed)}, Expected: {_format(expected)}")
    details = ". ".join(parts)

    if not seed_ok or not outcome_ok:
        logger.warning(f"Verification failed for {game_type} nonce={nonce}: seed_match={seed_ok} "
                       f"outcome_match={outcome_ok}")

    return VerificationResult(
        is_valid=seed_ok and outcome_ok,
        server_seed_match=seed_ok,
        outcome_match=outcome_ok,
        details=details,
        computed_outcome=computed,
    )

"""Per-game outcome transforms and payout tables.

Every game consumes floats from :func:`fairplay.fair.derive_float`. Single-draw
games (dice, limbo, crash) use the plain ``client:nonce`` material; multi-draw
games (mines, plinko) keep the bet's nonce and append a sub-index
``client:nonce:i`` per draw, so one bet always advances the nonce by exactly one.
"""
import math
from numbers import Real
from typing import Any, Dict, List, Optional

from .config import settings
from .fair import FLOAT_HEX_CHARS, bet_digest, derive_float, hash_to_uniform

HOUSE_EDGE = 0.99
EPSILON = 1e-12
DICE_PRECISION = 100
INSTANT_CRASH_RATE = 0.01
GAME_TYPES = ("dice", "limbo", "crash", "mines", "plinko")
RISK_LEVELS = ("low", "medium", "high")
PLINKO_MAX_ROWS = 32

PLINKO_MULTIPLIERS: Dict[str, Dict[int, List[float]]] = {
    "low": {
        8: [5.6, 2.1, 1.1, 1, 0.5, 1, 1.1, 2.1, 5.6],
        10: [8.9, 3, 1.4, 1.1, 1, 0.5, 1, 1.1, 1.4, 3, 8.9],
        12: [10, 3, 1.6, 1.4, 1.1, 1, 0.5, 1, 1.1, 1.4, 1.6, 3, 10],
        14: [16, 4, 2.2, 1.6, 1.3, 1.1, 1, 0.5, 1, 1.1, 1.3, 1.6, 2.2, 4, 16],
        16: [16, 9, 2, 1.4, 1.4, 1.2, 1.1, 1, 0.5, 1, 1.1, 1.2, 1.4, 1.4, 2, 9, 16],
    },
    "medium": {
        8: [13, 3, 1.3, 0.7, 0.4, 0.7, 1.3, 3, 13],
        10: [22, 5, 2, 1.4, 0.6, 0.4, 0.6, 1.4, 2, 5, 22],
        12: [33, 11, 4, 2, 1.1, 0.6, 0.3, 0.6, 1.1, 2, 4, 11, 33],
        14: [43, 13, 6, 3, 1.3, 0.7, 0.4, 0.2, 0.4, 0.7, 1.3, 3, 6, 13, 43],
        16: [110, 41, 10, 5, 3, 1.5, 1, 0.5, 0.3, 0.5, 1, 1.5, 3, 5, 10, 41, 110],
    },
    "high": {
        8: [29, 4, 1.5, 0.3, 0.2, 0.3, 1.5, 4, 29],
        10: [76, 10, 3, 0.9, 0.3, 0.2, 0.3, 0.9, 3, 10, 76],
        12: [170, 24, 8.1, 2, 0.7, 0.2, 0.2, 0.2, 0.7, 2, 8.1, 24, 170],
        14: [420, 56, 18, 5, 1.9, 0.3, 0.2, 0.2, 0.2, 0.3, 1.9, 5, 18, 56, 420],
        16: [1000, 130, 26, 9, 4, 2, 0.2, 0.2, 0.2, 0.2, 0.2, 2, 4, 9, 26, 130, 1000],
    },
}


class InvalidBetInput(ValueError):
    """Malformed seeds, nonce or game parameters; raised before any hashing."""


def _truncate(x: float, places: int = 2) -> float:
    scale = 10 ** places
    return math.floor(x * scale) / scale


def _is_number(x: Any) -> bool:
    return isinstance(x, Real) and not isinstance(x, bool) and math.isfinite(x)


def _is_int(x: Any) -> bool:
    return isinstance(x, int) and not isinstance(x, bool)


def _multiplier_cap(max_multiplier: Optional[float]) -> float:
    cap = settings.max_multiplier if max_multiplier is None else max_multiplier
    if not _is_number(cap) or cap < 1:
        raise InvalidBetInput(f"Max multiplier must be a number >= 1, got {cap!r}")
    return cap


def _clamp_multiplier(raw: float, cap: float) -> float:
    return _truncate(min(max(raw, 1.0), cap))


# Payouts

def dice_multiplier(target: float, is_over: bool) -> float:
    win_chance = (100 - target) if is_over else target
    if win_chance <= 0:
        raise InvalidBetInput(f"Dice target {target} leaves no winning rolls")
    # decimal inputs such as 99/50 may land a hair under the true value
    return math.floor(99 / win_chance * 10_000 + 1e-9) / 10_000


def mines_multiplier(mines_count: int, gems_revealed: int, board_size: Optional[int] = None) -> float:
    board = settings.mines_board_size if board_size is None else board_size
    safe = board - mines_count
    if not 0 <= gems_revealed <= safe:
        raise InvalidBetInput(f"Cannot reveal {gems_revealed} gems with {safe} safe cells")
    if gems_revealed == 0:
        return 1.0
    odds = 1.0
    for i in range(gems_revealed):
        odds *= (board - i) / (safe - i)
    return math.floor(HOUSE_EDGE * odds * 100 + 1e-9) / 100


def plinko_multiplier(rows: int, risk: str, slot: int) -> float:
    try:
        table = PLINKO_MULTIPLIERS[risk][rows]
    except KeyError:
        raise InvalidBetInput(f"No plinko payout table for {rows} rows at '{risk}' risk") from None
    if not 0 <= slot < len(table):
        raise InvalidBetInput(f"Slot {slot} outside 0..{len(table) - 1}")
    return float(table[slot])


# Outcomes

def dice_roll(server_seed: str, client_seed: str, nonce: int, target: float = 50, is_over: bool = True) -> dict:
    if not _is_number(target) or not 0 < target < 100:
        raise InvalidBetInput(f"Dice target must be a number strictly between 0 and 100, got {target!r}")
    if not isinstance(is_over, bool):
        raise InvalidBetInput(f"Dice direction must be a boolean, got {is_over!r}")
    f = derive_float(server_seed, client_seed, nonce)
    roll = math.floor(f * 100 * DICE_PRECISION) / DICE_PRECISION
    win = roll > target if is_over else roll < target
    return {
        "outcome": roll,
        "roll": roll,
        "target": target,
        "is_over": is_over,
        "win": win,
        "multiplier": dice_multiplier(target, is_over) if win else 0.0,
    }


def limbo_result(server_seed: str, client_seed: str, nonce: int, max_multiplier: Optional[float] = None) -> dict:
    cap = _multiplier_cap(max_multiplier)
    digest = bet_digest(server_seed, client_seed, nonce)
    f = hash_to_uniform(digest)
    result = _clamp_multiplier(HOUSE_EDGE / max(f, EPSILON), cap)
    return {"outcome": result, "result": result, "hash": digest}


def crash_point(server_seed: str, client_seed: str, nonce: int, max_multiplier: Optional[float] = None) -> dict:
    cap = _multiplier_cap(max_multiplier)
    digest = bet_digest(server_seed, client_seed, nonce)
    x = hash_to_uniform(digest)
    # Second window of the same digest decides the instant bust
    instant = hash_to_uniform(digest, FLOAT_HEX_CHARS) < INSTANT_CRASH_RATE
    if instant:
        point = 1.0
    else:
        point = _clamp_multiplier(HOUSE_EDGE / max(1.0 - x, EPSILON), cap)
    return {"outcome": point, "crash_point": point, "instant": instant, "hash": digest}


def mine_positions(server_seed: str, client_seed: str, nonce: int, mines_count: int = 3,
                   board_size: Optional[int] = None) -> dict:
    board = settings.mines_board_size if board_size is None else board_size
    if not _is_int(board) or board < 1:
        raise InvalidBetInput(f"Board size must be a positive integer, got {board!r}")
    if not _is_int(mines_count) or not 0 <= mines_count <= board:
        raise InvalidBetInput(f"Mines count must be an integer in 0..{board}, got {mines_count!r}")

    seen = set()
    draws = 0
    while len(seen) < mines_count:
        cell = int(derive_float(server_seed, client_seed, nonce, draws) * board)
        seen.add(cell)
        draws += 1

    positions = sorted(seen)
    return {
        "outcome": positions,
        "mine_positions": positions,
        "board_size": board,
        "draws": draws,
        "hash": bet_digest(server_seed, client_seed, nonce),
    }


def plinko_path(server_seed: str, client_seed: str, nonce: int, rows: Optional[int] = None,
                risk: Optional[str] = None) -> dict:
    rows = settings.plinko_default_rows if rows is None else rows
    if not _is_int(rows) or not 1 <= rows <= PLINKO_MAX_ROWS:
        raise InvalidBetInput(f"Plinko rows must be an integer in 1..{PLINKO_MAX_ROWS}, got {rows!r}")

    path = [1 if derive_float(server_seed, client_seed, nonce, row) >= 0.5 else 0 for row in range(rows)]
    slot = sum(path)
    out = {
        "outcome": slot,
        "path": path,
        "final_slot": slot,
        "hash": bet_digest(server_seed, client_seed, nonce),
    }
    if risk is not None:
        out["multiplier"] = plinko_multiplier(rows, risk, slot)
    return out


def _param(params: Dict[str, Any], *names: str, default: Any = None) -> Any:
    for name in names:
        if name in params:
            return params[name]
    return default


def compute_outcome(game_type: str, server_seed: str, client_seed: str, nonce: int,
                    game_params: Optional[Dict[str, Any]] = None) -> dict:
    """Recompute one bet; accepts camelCase or snake_case parameter names."""
    params = game_params or {}
    if game_type == "dice":
        if _param(params, "target") is None:
            raise InvalidBetInput("Dice requires a 'target' parameter")
        return dice_roll(server_seed, client_seed, nonce, _param(params, "target"),
                         _param(params, "isOver", "is_over", default=True))
    if game_type == "limbo":
        return limbo_result(server_seed, client_seed, nonce, _param(params, "maxMultiplier", "max_multiplier"))
    if game_type == "crash":
        return crash_point(server_seed, client_seed, nonce, _param(params, "maxMultiplier", "max_multiplier"))
    if game_type == "mines":
        if _param(params, "minesCount", "mines_count") is None:
            raise InvalidBetInput("Mines requires a 'minesCount' parameter")
        return mine_positions(server_seed, client_seed, nonce, _param(params, "minesCount", "mines_count"),
                              _param(params, "boardSize", "board_size"))
    if game_type == "plinko":
        return plinko_path(server_seed, client_seed, nonce, _param(params, "rows"), _param(params, "risk"))
    raise InvalidBetInput(f"Unknown game type '{game_type}'; expected one of {', '.join(GAME_TYPES)}")

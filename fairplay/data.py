import json
from typing import Any, Dict, Iterable

import pandas as pd

from .seeds import SeedPair
from .verify import verify_bet

BET_COLUMNS = ["server_seed", "server_seed_hash", "client_seed", "nonce", "game_type", "expected_outcome"]
PARAM_COLUMNS = {
    "target": "target",
    "is_over": "isOver",
    "mines_count": "minesCount",
    "board_size": "boardSize",
    "rows": "rows",
    "risk": "risk",
    "max_multiplier": "maxMultiplier",
}
_TRUE = {"true", "1", "yes", "over"}
_FALSE = {"false", "0", "no", "under"}


def _read(path: str) -> pd.DataFrame:
    if path.lower().endswith(".csv"):
        return pd.read_csv(path, dtype={"server_seed": str, "server_seed_hash": str, "client_seed": str,
                                        "expected_outcome": str})
    if path.lower().endswith(".json"):
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list):
            data = data.get("records", [])
        return pd.DataFrame(data)
    raise ValueError("Unsupported file format; use CSV or JSON")


def load_bets(path: str) -> pd.DataFrame:
    df = _read(path)
    missing = [c for c in BET_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Missing bet column(s) {', '.join(missing)}")
    return df.reset_index(drop=True)


def _plain(value: Any) -> Any:
    # numpy scalars -> python, NaN -> None
    if value is None:
        return None
    if isinstance(value, float) and value != value:
        return None
    if hasattr(value, "item"):
        return _plain(value.item())
    return value


def _text(value: Any) -> Any:
    value = _plain(value)
    return None if value is None else str(value)


def _as_bool(value: Any) -> Any:
    if isinstance(value, str):
        low = value.strip().lower()
        if low in _TRUE:
            return True
        if low in _FALSE:
            return False
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value in (0, 1):
        return bool(value)
    return value


def _as_int(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return value


def row_params(row: Dict[str, Any]) -> Dict[str, Any]:
    params: Dict[str, Any] = {}
    for column, key in PARAM_COLUMNS.items():
        value = _plain(row.get(column))
        if value is None or value == "":
            continue
        if column == "is_over":
            value = _as_bool(value)
        elif column in ("mines_count", "board_size", "rows"):
            value = _as_int(value)
        elif column in ("target", "max_multiplier") and isinstance(value, str):
            value = float(value)
        params[key] = value
    return params


def _expected(row: Dict[str, Any]) -> Any:
    value = _plain(row["expected_outcome"])
    if isinstance(value, str) and row["game_type"] != "mines":
        return float(value)
    return value


def verify_log(df: pd.DataFrame) -> pd.DataFrame:
    """Verify every bet row; malformed rows raise with their row index."""
    results = []
    for i, row in enumerate(df.to_dict(orient="records")):
        try:
            res = verify_bet(
                _text(row["server_seed"]),
                _text(row["server_seed_hash"]),
                _text(row["client_seed"]),
                _plain(row["nonce"]),
                row["game_type"],
                _expected(row),
                row_params(row),
            )
        except ValueError as e:
            raise type(e)(f"Row {i}: {e}") from e
        results.append({
            "is_valid": res.is_valid,
            "server_seed_match": res.server_seed_match,
            "outcome_match": res.outcome_match,
            "computed_outcome": res.computed_outcome,
            "details": res.details,
        })
    out = pd.concat([df.reset_index(drop=True), pd.DataFrame(results, columns=[
        "is_valid", "server_seed_match", "outcome_match", "computed_outcome", "details"])], axis=1)
    return out


def export_history(pairs: Iterable[SeedPair], out: str) -> int:
    recs = [p.to_revealed_dict() for p in pairs]
    if out.lower().endswith(".csv"):
        pd.DataFrame(recs, columns=["server_seed_hash", "client_seed", "nonce", "created_at", "server_seed",
                                    "revealed_at"]).to_csv(out, index=False)
    elif out.lower().endswith(".json"):
        with open(out, "w", encoding="utf-8") as f:
            json.dump(recs, f)
    else:
        raise ValueError("Unsupported output format; use CSV or JSON")
    return len(recs)

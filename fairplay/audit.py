"""Statistical sanity checks over long nonce ranges.

These do not prove fairness of a single bet (that is :mod:`fairplay.verify`);
they catch a derivation that is biased or a crash curve that drifts from the
advertised ``0.99 / x`` tail.
"""
import numpy as np
from scipy import stats

from .fair import sequence
from .games import HOUSE_EDGE, INSTANT_CRASH_RATE, crash_point, dice_roll


def simulate_floats(server_seed: str, client_seed: str, start_nonce: int, n: int) -> np.ndarray:
    return np.asarray(sequence(server_seed, client_seed, start_nonce, n), dtype=float)


def uniformity_test(floats, bins: int = 20) -> dict:
    x = np.asarray(floats, dtype=float)
    counts, _ = np.histogram(x, bins=bins, range=(0.0, 1.0))
    chi = stats.chisquare(counts)
    ks = stats.kstest(x, "uniform")
    return {
        "n": int(x.size),
        "min": float(x.min()),
        "max": float(x.max()),
        "mean": float(x.mean()),
        "chi2": float(chi.statistic),
        "chi2_p": float(chi.pvalue),
        "ks": float(ks.statistic),
        "ks_p": float(ks.pvalue),
    }


def dice_win_rate(server_seed: str, client_seed: str, start_nonce: int, n: int,
                  target: float = 50, is_over: bool = True) -> dict:
    wins = sum(dice_roll(server_seed, client_seed, start_nonce + k, target, is_over)["win"] for k in range(n))
    # rolls land on a 0.01 grid in [0, 99.99]
    grid = np.arange(0, 100 * 100) / 100
    theoretical = float(np.mean(grid > target) if is_over else np.mean(grid < target))
    empirical = wins / n
    return {"n": n, "wins": int(wins), "empirical": empirical, "theoretical": theoretical,
            "abs_error": abs(empirical - theoretical)}


def crash_points(server_seed: str, client_seed: str, start_nonce: int, n: int) -> np.ndarray:
    return np.array([crash_point(server_seed, client_seed, start_nonce + k)["crash_point"] for k in range(n)])


def empirical_survival(x: np.ndarray):
    x = np.asarray(x)
    x = x[~np.isnan(x)]
    x = x[x >= 1]
    x_sorted = np.sort(x)
    n = x_sorted.size
    # S(t) = P(X >= t) at the unique observed values
    uniq = np.unique(x_sorted)
    S = n - np.searchsorted(x_sorted, uniq, side="left")
    return {"t": uniq, "S": S / n, "n": n}


def theoretical_crash_survival(t):
    """P(crash point >= t) for the instant-bust rule and 0.99/(1-u) curve."""
    t = np.asarray(t, dtype=float)
    tail = np.minimum(1.0, HOUSE_EDGE / np.maximum(t, 1.0))
    return np.where(t <= 1.0, 1.0, (1 - INSTANT_CRASH_RATE) * tail)


def survival_gap(emp) -> float:
    # Skip t == 1.00, where truncation and instant busts pile up mass
    mask = emp["t"] > 1.0
    if not mask.any():
        return 0.0
    return float(np.max(np.abs(emp["S"][mask] - theoretical_crash_survival(emp["t"][mask]))))


def run_audit(server_seed: str, client_seed: str, start_nonce: int = 0, n: int = 10_000,
              target: float = 50, is_over: bool = True) -> dict:
    floats = simulate_floats(server_seed, client_seed, start_nonce, n)
    crashes = crash_points(server_seed, client_seed, start_nonce, n)
    emp = empirical_survival(crashes)
    return {
        "uniformity": uniformity_test(floats),
        "dice": dice_win_rate(server_seed, client_seed, start_nonce, n, target, is_over),
        "crash": {"n": int(crashes.size), "median": float(np.median(crashes)), "survival_gap": survival_gap(emp),
                  "survival": emp},
    }

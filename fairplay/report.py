from .verify import VerificationResult


def _mark(ok: bool) -> str:
    return "OK" if ok else "MISMATCH"


def summarize_verification(res: VerificationResult) -> str:
    lines = []
    lines.append(f"Server seed hash: {_mark(res.server_seed_match)}")
    lines.append(f"Outcome:          {_mark(res.outcome_match)}")
    lines.append(res.details)
    lines.append("")
    lines.append("VALID" if res.is_valid else "INVALID")
    return "\n".join(lines)


def summarize_audit(audit: dict) -> str:
    u = audit["uniformity"]
    d = audit["dice"]
    c = audit["crash"]
    lines = []
    lines.append(f"Derived floats (n={u['n']}):")
    lines.append(f"- range [{u['min']:.6f}, {u['max']:.6f}], mean={u['mean']:.4f}")
    lines.append(f"- chi2={u['chi2']:.2f} (p={u['chi2_p']:.4f}), KS={u['ks']:.4f} (p={u['ks_p']:.4f})")
    lines.append("")
    lines.append(f"Dice (n={d['n']}): win rate {d['empirical']:.4f} vs theoretical {d['theoretical']:.4f}")
    lines.append(f"Crash (n={c['n']}): median {c['median']:.2f}x, max survival gap {c['survival_gap']:.4f}")
    return "\n".join(lines)


def summarize_log(df) -> str:
    total = len(df)
    valid = int(df["is_valid"].sum()) if total else 0
    lines = [f"Verified {total} bets: {valid} valid, {total - valid} invalid"]
    for i, row in df[~df["is_valid"]].iterrows():
        lines.append(f"- row {i} nonce={row['nonce']} {row['game_type']}: {row['details']}")
    return "\n".join(lines)

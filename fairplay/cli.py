import argparse
import json
import sys

from .config import redirect_logs, settings
from .fair import hmac_sha256_hex, seed_material, sequence, sha256_hex
from .games import GAME_TYPES, RISK_LEVELS, InvalidBetInput, compute_outcome
from .seeds import generate_client_seed, generate_server_seed
from .verify import verify_bet
from .report import summarize_verification


def _add_game_params(p):
    p.add_argument("--target", type=float, default=None, help="Dice target (0-100)")
    p.add_argument("--under", action="store_true", help="Dice: roll under the target (default roll over)")
    p.add_argument("--mines", type=int, default=None, help="Mines: number of mines")
    p.add_argument("--board", type=int, default=None, help=f"Mines: board size (default {settings.mines_board_size})")
    p.add_argument("--rows", type=int, default=None, help=f"Plinko: rows (default {settings.plinko_default_rows})")
    p.add_argument("--risk", choices=RISK_LEVELS, default=None, help="Plinko: payout table risk level")


def _game_params(args) -> dict:
    params = {"isOver": not args.under}
    for key, value in (("target", args.target), ("minesCount", args.mines), ("boardSize", args.board),
                       ("rows", args.rows), ("risk", args.risk)):
        if value is not None:
            params[key] = value
    return params


def _parse_expected(game: str, raw: str):
    if game == "mines":
        return raw
    try:
        return float(raw)
    except ValueError:
        raise InvalidBetInput(f"Expected outcome must be a number, got {raw!r}") from None


def make_parser():
    p = argparse.ArgumentParser(
        description="Provably fair seed commitments, outcome derivation and bet verification"
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    p_seed = sub.add_parser("seed", help="Generate a fresh server seed commitment and client seed")
    p_seed.add_argument("--reveal", action="store_true", help="Also print the raw server seed")

    p_hash = sub.add_parser("hash", help="SHA-256 of a server seed (its public commitment)")
    p_hash.add_argument("--server", required=True, help="Server seed (string)")

    p_float = sub.add_parser("float", help="Derived floats in [0,1) for a nonce range")
    p_float.add_argument("--server", required=True, help="Server seed (string)")
    p_float.add_argument("--client", required=True, help="Client seed (string)")
    p_float.add_argument("--nonce", type=int, default=settings.nonce_base, help="Starting nonce")
    p_float.add_argument("--rounds", type=int, default=1, help="Number of consecutive nonces")
    p_float.add_argument("--digest", action="store_true", help="Also print the HMAC-SHA256 digest")

    p_out = sub.add_parser("outcome", help="Compute a game outcome from seeds")
    p_out.add_argument("--game", choices=GAME_TYPES, required=True)
    p_out.add_argument("--server", required=True)
    p_out.add_argument("--client", required=True)
    p_out.add_argument("--nonce", type=int, default=settings.nonce_base)
    _add_game_params(p_out)

    p_ver = sub.add_parser("verify", help="Verify a revealed bet")
    p_ver.add_argument("--game", choices=GAME_TYPES, required=True)
    p_ver.add_argument("--server", required=True, help="Revealed server seed")
    p_ver.add_argument("--hash", required=True, help="Server seed hash published before the bet")
    p_ver.add_argument("--client", required=True)
    p_ver.add_argument("--nonce", required=True, help="Bet nonce")
    p_ver.add_argument("--expected", required=True, help="Claimed outcome (mines: comma-separated cells)")
    p_ver.add_argument("--json", action="store_true", help="Print the result as JSON")
    _add_game_params(p_ver)

    p_log = sub.add_parser("verify-log", help="Verify every bet in a CSV/JSON log")
    p_log.add_argument("--data", required=True, help="Path to CSV/JSON bet log")
    p_log.add_argument("--out", default=None, help="Optional CSV/JSON path for per-bet results")

    p_audit = sub.add_parser("audit", help="Statistical sanity checks over a nonce range")
    p_audit.add_argument("--server", required=True)
    p_audit.add_argument("--client", required=True)
    p_audit.add_argument("--nonce", type=int, default=settings.nonce_base)
    p_audit.add_argument("--n", type=int, default=10_000)
    p_audit.add_argument("--target", type=float, default=50)
    p_audit.add_argument("--under", action="store_true")
    p_audit.add_argument("--plot", action="store_true", help="Show crash survival plot")

    p_serve = sub.add_parser("serve", help="Run the HTTP API")
    p_serve.add_argument("--host", default=settings.api_host)
    p_serve.add_argument("--port", type=int, default=settings.api_port)

    return p


def main(argv=None):
    parser = make_parser()
    args = parser.parse_args(argv)
    # stdout carries command output (JSON for --json); logs go to stderr
    redirect_logs(sys.stderr)

    try:
        run(args)
    except InvalidBetInput as e:
        parser.exit(2, f"error: {e}\n")


def run(args):
    if args.cmd == "seed":
        server_seed = generate_server_seed()
        print(f"server_seed_hash={sha256_hex(server_seed)}")
        print(f"client_seed={generate_client_seed()}")
        if args.reveal:
            print(f"server_seed={server_seed}")
    elif args.cmd == "hash":
        print(sha256_hex(args.server))
    elif args.cmd == "float":
        vals = sequence(args.server, args.client, args.nonce, args.rounds)
        for i, v in enumerate(vals):
            line = f"nonce={args.nonce + i}  f={v:.15f}"
            if args.digest:
                line += f"  hmac={hmac_sha256_hex(args.server, seed_material(args.client, args.nonce + i))}"
            print(line)
    elif args.cmd == "outcome":
        res = compute_outcome(args.game, args.server, args.client, args.nonce, _game_params(args))
        for k, v in res.items():
            if k != "outcome":
                print(f"{k}: {v}")
    elif args.cmd == "verify":
        res = verify_bet(args.server, args.hash, args.client, args.nonce, args.game,
                         _parse_expected(args.game, args.expected), _game_params(args))
        if args.json:
            print(json.dumps(res.to_dict()))
        else:
            print(summarize_verification(res))
    elif args.cmd == "verify-log":
        from .data import load_bets, verify_log
        from .report import summarize_log
        df = verify_log(load_bets(args.data))
        print(summarize_log(df))
        if args.out:
            if args.out.lower().endswith(".json"):
                df.to_json(args.out, orient="records")
            else:
                df.to_csv(args.out, index=False)
            print(f"Wrote {len(df)} results to {args.out}.")
    elif args.cmd == "audit":
        from .audit import run_audit
        from .report import summarize_audit
        audit = run_audit(args.server, args.client, args.nonce, args.n, args.target, not args.under)
        print(summarize_audit(audit))
        if args.plot:
            from .plotting import plot_survival
            plot_survival(audit["crash"]["survival"])
    elif args.cmd == "serve":
        import uvicorn
        from .api import app
        uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()

import argparse
import sys

from .commands import load_store, list_names, show_code, show_all, doctor
from .config import keychain_path, load_config
from .utils import KeychainError


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="2fa", description="Print two-factor authentication codes from a local keychain")
    p.add_argument("--keychain", "-k", default=None,
                   help="path to the keychain file (overrides TWOFA_KEYCHAIN and saved config; default: ~/.2fa)")
    p.add_argument("--strict", action="store_true", default=argparse.SUPPRESS,
                   help="fail on the first malformed keychain line instead of skipping it (overrides saved config)")
    sub = p.add_subparsers(dest="cmd")

    sub.add_parser("list", help="List account names in the keychain")

    s = sub.add_parser(
        "show", help="Print the current code for one account, or for every account")
    s.add_argument("name", nargs="?",
                   help="account name; omit to print `<code>\\t<name>` for all accounts")

    sub.add_parser(
        "doctor", help="Sanity-check configuration and the keychain file")

    return p


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.cmd == "doctor":
        ok = doctor(args.keychain)
        sys.exit(0 if ok else 2)
    elif args.cmd in ("list", "show"):
        # merge saved config with CLI args (CLI overrides saved config)
        cfg = load_config()
        strict = args.strict if hasattr(args, "strict") else bool(cfg.get("strict", False))
        path = keychain_path(cfg, args.keychain)

        try:
            store = load_store(path, strict=strict)
            if args.cmd == "list":
                lines = list_names(store)
            elif args.name:
                lines = [show_code(store, args.name)]
            else:
                lines = show_all(store)
        except (KeychainError, OSError) as e:
            print(f"error: {e}", file=sys.stderr)
            sys.exit(1)

        for line in lines:
            print(line)
        sys.exit(0)
    else:
        parser.print_help()
        sys.exit(2)


if __name__ == "__main__":
    main()

import stat
import sys
from pathlib import Path
from typing import List, Optional

from .config import keychain_path, load_config, read_keychain
from .keychain import KeyStore, parse_store
from .otp import SystemClock, code, decode_secret, MAX_DIGITS
from .utils import KeychainError


def load_store(path: Path, *, strict: bool = False) -> KeyStore:
    """Read and parse the keychain, printing a warning for every skipped line."""
    store = parse_store(read_keychain(path), strict=strict, source=str(path))
    for err in store.skipped:
        print(f"warning: {err}", file=sys.stderr)
    return store


def list_names(store: KeyStore) -> List[str]:
    return sorted(store)


def show_code(store: KeyStore, name: str, clock=None) -> str:
    return code(store, name, clock or SystemClock())


def show_all(store: KeyStore, clock=None) -> List[str]:
    """Return one `<code>\\t<name>` line per account, sorted by name.

    Accounts whose code cannot be generated are reported on stderr and left
    out; they do not stop the others from being shown.
    """
    clock = clock or SystemClock()
    lines = []
    for name in sorted(store):
        try:
            lines.append(f"{code(store, name, clock)}\t{name}")
        except KeychainError as e:
            print(f"warning: {name}: {e}", file=sys.stderr)
    return lines


def doctor(keychain: Optional[str] = None) -> bool:
    """Perform sanity checks on configuration and the keychain file.

    Prints a grouped, colorized summary of checks and returns True when all
    critical checks pass. Colors are emitted only when stdout is a TTY.
    """
    import os

    OK_ICON = "✅"
    FAIL_ICON = "❌"
    WARN_ICON = "⚠️"
    HEADER_ICON = "🔎"

    # enable colors only when stdout is a TTY and NO_COLOR is not set
    use_color = sys.stdout.isatty() and os.environ.get("NO_COLOR") is None

    def _color(text: str, sgr: str) -> str:
        if not use_color:
            return text
        return f"\x1b[{sgr}m{text}\x1b[0m"

    def _ok(msg: str):
        icon = _color(OK_ICON, "32")
        print(f" {icon}  {_color(msg, '0')}")

    def _err(msg: str):
        icon = _color(FAIL_ICON, "31")
        print(f" {icon}  {_color(msg, '0')}")

    def _warn(msg: str):
        icon = _color(WARN_ICON, "33")
        print(f" {icon}  {_color(msg, '0')}")

    ok = True

    print()
    title = f"{HEADER_ICON}  2fa doctor — configuration & keychain checks"
    print(_color(title, "1;36"))
    print(_color("─" * 52, "36"))

    print(_color("\nConfiguration:", "1;34"))
    cfg = load_config()
    if not cfg:
        _warn("config: not found (using defaults)")
    else:
        _ok("config loaded")
    path = keychain_path(cfg, keychain)
    _ok(f"keychain={path}")

    print(_color("\nKeychain file:", "1;34"))
    if not path.exists():
        _err(f"{path} does not exist")
        ok = False
    else:
        mode = stat.S_IMODE(path.stat().st_mode)
        if mode & 0o077:
            _warn(f"permissions {oct(mode)} allow group/other access; run: chmod 600 {path}")
        else:
            _ok(f"permissions {oct(mode)}")

    if ok:
        print(_color("\nKeys:", "1;34"))
        try:
            store = parse_store(read_keychain(path), strict=True, source=str(path))
        except OSError as e:
            _err(f"cannot read {path}: {e.strerror or e}")
            ok = False
        except KeychainError as e:
            _err(str(e))
            ok = False
        else:
            if not store:
                _warn("keychain is empty")
            for name in sorted(store):
                rec = store[name]
                if not 1 <= rec.digits <= MAX_DIGITS:
                    _err(f"{name}: invalid digit count {rec.digits}")
                    ok = False
                    continue
                try:
                    decode_secret(rec.secret)
                except KeychainError as e:
                    _err(f"{name}: {e}")
                    ok = False
                    continue
                _ok(f"{name} ({rec.digits} digits)")

    print(_color("\n" + "─" * 52, "36"))
    summary_icon = OK_ICON if ok else FAIL_ICON
    summary_color = "32" if ok else "31"
    print(
        f"doctor result: {_color(summary_icon + ' ' + ('OK' if ok else 'FAILED'), summary_color)}")
    print()
    return ok

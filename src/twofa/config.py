import json
import os
from pathlib import Path
from typing import Optional


def _config_file_path() -> Path:
    """Return path to config file (respect TWOFA_CONFIG or XDG_CONFIG_HOME).
    Uses `~/.config/2fa/config.json` by default."""
    cfg = os.environ.get("TWOFA_CONFIG")
    if cfg:
        return Path(cfg)
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / "2fa" / "config.json"


def load_config() -> dict:
    p = _config_file_path()
    if p.exists():
        try:
            with p.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            return {}
        return data if isinstance(data, dict) else {}
    return {}


def keychain_path(cfg: dict, override: Optional[str] = None) -> Path:
    """Resolve the keychain file: explicit override, then TWOFA_KEYCHAIN, then config, then ~/.2fa."""
    if override:
        return Path(override).expanduser()
    env = os.environ.get("TWOFA_KEYCHAIN")
    if env:
        return Path(env).expanduser()
    if cfg.get("keychain"):
        return Path(cfg["keychain"]).expanduser()
    return Path.home() / ".2fa"


def read_keychain(path: Path) -> bytes:
    """Return the raw keychain bytes; a file that does not exist yet is an empty keychain."""
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return b""

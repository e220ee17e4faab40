import json
from pathlib import Path

import twofa.config as config_module


def test_load_config(tmp_path, monkeypatch):
    cfg_path = tmp_path / "cfg.json"
    monkeypatch.setenv("TWOFA_CONFIG", str(cfg_path))
    cfg_path.write_text(json.dumps({"keychain": "/tmp/kc", "strict": True}))

    loaded = config_module.load_config()
    assert loaded["keychain"] == "/tmp/kc"
    assert loaded["strict"] is True


def test_load_config_missing_or_broken(tmp_path, monkeypatch):
    cfg_path = tmp_path / "cfg.json"
    monkeypatch.setenv("TWOFA_CONFIG", str(cfg_path))
    assert config_module.load_config() == {}

    cfg_path.write_text("{not json")
    assert config_module.load_config() == {}

    cfg_path.write_text("[1, 2]")
    assert config_module.load_config() == {}


def test_config_path_respects_xdg(tmp_path, monkeypatch):
    monkeypatch.delenv("TWOFA_CONFIG", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert config_module._config_file_path() == tmp_path / "2fa" / "config.json"


def test_keychain_path_precedence(tmp_path, monkeypatch):
    monkeypatch.delenv("TWOFA_KEYCHAIN", raising=False)
    monkeypatch.setattr(Path, "home", lambda: tmp_path)

    assert config_module.keychain_path({}) == tmp_path / ".2fa"
    assert config_module.keychain_path({"keychain": "/from/cfg"}) == Path("/from/cfg")

    monkeypatch.setenv("TWOFA_KEYCHAIN", "/from/env")
    assert config_module.keychain_path({"keychain": "/from/cfg"}) == Path("/from/env")
    assert config_module.keychain_path({"keychain": "/from/cfg"}, "/from/flag") == Path("/from/flag")


def test_read_keychain(tmp_path):
    p = tmp_path / ".2fa"
    assert config_module.read_keychain(p) == b""
    p.write_bytes(b"github 6 abcdef23ghijkl45\n")
    assert config_module.read_keychain(p) == b"github 6 abcdef23ghijkl45\n"

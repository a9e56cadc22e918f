"""Configuration loading, saving, defaults, and the session config record."""

import json
import os
import shlex
from dataclasses import dataclass

from netfrix.errors import ConfigError

CONFIG_PATH = os.path.expanduser("~/.netfrixrc")

DEFAULT_CONFIG = {
    # Remote video server
    "ssh_user": "",
    "ssh_host": "",
    "ssh_port": "",
    "connect_timeout": 5,
    "remote_video_path": "/mnt/videos",
    "extensions": ["mp4", "mkv", "avi"],
    # Local player (reads raw media bytes on stdin)
    "player_command": ["ffplay", "-i", "pipe:0", "-loglevel", "error"],
    # Search
    "regex_search": False,
    # Appearance
    "accent_color": "#5fd7ff",
    # Audit log file (empty disables it)
    "audit_log": "",
}


def load_config(path=CONFIG_PATH):
    if os.path.exists(path):
        with open(path, "r") as f:
            try:
                cfg = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigError(f"Cannot parse {path}: {e}") from e
        if not isinstance(cfg, dict):
            raise ConfigError(f"{path} must contain a JSON object")
        for k, v in DEFAULT_CONFIG.items():
            cfg.setdefault(k, v)
        return cfg
    save_config(DEFAULT_CONFIG, path)
    return dict(DEFAULT_CONFIG)


def save_config(cfg, path=CONFIG_PATH):
    with open(path, "w") as f:
        json.dump(cfg, f, indent=2)


def _normalize_extensions(raw):
    if isinstance(raw, str):
        raw = raw.replace(",", " ").split()
    exts = []
    for ext in raw or []:
        ext = str(ext).strip().lstrip(".")
        if ext and ext not in exts:
            exts.append(ext)
    if not exts:
        raise ConfigError("At least one video extension must be configured")
    return tuple(exts)


def _normalize_command(raw):
    if isinstance(raw, str):
        raw = shlex.split(raw)
    command = tuple(str(part) for part in raw or [])
    if not command:
        raise ConfigError("player_command must not be empty")
    return command


@dataclass(frozen=True)
class SessionConfig:
    """Everything the session controller needs, resolved once at startup."""

    user: str
    host: str
    port: int | None
    connect_timeout: int
    root_path: str
    extensions: tuple
    player_command: tuple
    regex_search: bool = False
    audit_log: str = ""

    @classmethod
    def from_dict(cls, cfg):
        host = str(cfg.get("ssh_host", "") or "").strip()
        if not host:
            raise ConfigError(f"ssh_host is not set (edit {CONFIG_PATH})")

        port = cfg.get("ssh_port", "") or None
        if port is not None:
            try:
                port = int(port)
            except (TypeError, ValueError):
                raise ConfigError(f"ssh_port must be a number, got {port!r}")

        try:
            timeout = int(cfg.get("connect_timeout", 5))
        except (TypeError, ValueError):
            raise ConfigError("connect_timeout must be a number of seconds")
        if timeout <= 0:
            raise ConfigError("connect_timeout must be positive")

        root = str(cfg.get("remote_video_path", "") or "").strip()
        if not root.startswith("/"):
            raise ConfigError("remote_video_path must be an absolute path")

        audit = cfg.get("audit_log", "") or ""
        return cls(
            user=str(cfg.get("ssh_user", "") or "").strip(),
            host=host,
            port=port,
            connect_timeout=timeout,
            root_path=root.rstrip("/") or "/",
            extensions=_normalize_extensions(cfg.get("extensions")),
            player_command=_normalize_command(cfg.get("player_command")),
            regex_search=bool(cfg.get("regex_search", False)),
            audit_log=os.path.expanduser(audit) if audit else "",
        )

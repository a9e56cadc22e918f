"""Audit log: optional timestamped record of catalog refreshes and playbacks."""

import json
import os
import time

_MAX_ENTRIES = 500

_path = ""


def set_audit_path(path):
    """Enable the audit log at ``path``; an empty path disables it."""
    global _path
    _path = os.path.expanduser(path) if path else ""


def log_action(action, detail=""):
    """Append an action to the audit log. No-op while the log is disabled."""
    if not _path:
        return
    entry = {
        "timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        "action": action,
        "detail": detail,
    }
    history = load_log()
    history.append(entry)
    if len(history) > _MAX_ENTRIES:
        history = history[-_MAX_ENTRIES:]
    _save_log(history)


def load_log():
    if _path and os.path.exists(_path):
        try:
            with open(_path, "r") as f:
                return json.load(f)
        except (json.JSONDecodeError, OSError):
            return []
    return []


def _save_log(entries):
    with open(_path, "w") as f:
        json.dump(entries, f, indent=2)

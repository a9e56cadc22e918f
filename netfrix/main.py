"""Entry point, CLI args, and signal wiring."""

import signal
import sys

from netfrix import PROGRAM_NAME, __version__
from netfrix.config import CONFIG_PATH, SessionConfig, load_config
from netfrix.errors import (
    ConfigError, MissingDependencyError, NetfrixError, RemoteConnectionError,
    RemoteExecError,
)
from netfrix.session import SessionController, help_text
from netfrix.ui import C, apply_accent, error, info, success


def _die(msg):
    print(f"Error: {msg}", file=sys.stderr)
    return 1


def _raise_exit(signum, frame):
    # Turned into SystemExit so context managers release the temp dir.
    raise SystemExit(128 + signum)


def parse_args(argv):
    """Return (mode, config_path). Raises ConfigError on unknown options."""
    mode = "interactive"
    config_path = CONFIG_PATH
    args = list(argv)
    while args:
        arg = args.pop(0)
        if arg in ("-h", "--help"):
            return "help", config_path
        if arg in ("-v", "--version"):
            return "version", config_path
        if arg in ("-u", "--update"):
            mode = "update"
        elif arg == "--config":
            if not args:
                raise ConfigError("--config requires a path")
            config_path = args.pop(0)
        elif arg.startswith("--config="):
            config_path = arg.split("=", 1)[1]
        else:
            raise ConfigError(f"Unknown option: {arg}")
    return mode, config_path


def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]
    try:
        mode, config_path = parse_args(argv)
    except ConfigError as e:
        return _die(str(e))

    if mode == "help":
        print(help_text())
        return 0
    if mode == "version":
        print(f"{PROGRAM_NAME} v{__version__}")
        return 0

    signal.signal(signal.SIGTERM, _raise_exit)
    if hasattr(signal, "SIGHUP"):
        signal.signal(signal.SIGHUP, _raise_exit)

    try:
        cfg = load_config(config_path)
        apply_accent(cfg.get("accent_color", ""))
        config = SessionConfig.from_dict(cfg)
    except (ConfigError, OSError) as e:
        return _die(str(e))

    try:
        with SessionController(config) as session:
            try:
                session.start()
            except (MissingDependencyError, RemoteConnectionError) as e:
                return _die(str(e))
            info("====> Updating video database...")
            try:
                count = session.refresh_catalog()
            except RemoteExecError as e:
                if mode == "update":
                    return _die(f"Database update failed: {e}")
                error(f"Database update failed: {e}")
            else:
                success(f"====> Database updated with {count} videos.")
            if mode == "update":
                return 0
            session.run_menu()
    except KeyboardInterrupt:
        print()
    except NetfrixError as e:
        return _die(str(e))
    print(f"\n  {C.ACCENT}Goodbye!{C.RESET}\n")
    return 0


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()

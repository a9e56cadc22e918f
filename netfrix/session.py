"""Session controller: connect, keep the catalog, search, play, clean up."""

import os
import shutil
import tempfile

from netfrix import PROGRAM_NAME, __version__
from netfrix import auditlog, catalog as catalog_mod, player, search as search_mod, transport
from netfrix.errors import (
    InvalidQueryError, InvalidSelectionError, MissingDependencyError,
    NetfrixError, NoMatchError,
)
from netfrix.ui import (
    C, check_tool, clear_screen, error, info, pause, pick_option, prompt_text,
    success, warn,
)

PLAYER_CONTROLS = [
    ("q/ESC", "Return"),
    ("f", "Full Screen"),
    ("p", "Pause"),
    ("9", "Volume Up"),
    ("0", "Volume Down"),
    ("Right Arrow", "Forward 10s"),
    ("Left Arrow", "Backward 10s"),
]

LOGO = r"""
    _   __     __  __________  _____  __
   / | / /__  / /_/ ____/ __ \/  _/ |/ /
  /  |/ / _ \/ __/ /_  / /_/ // / |   /
 / /|  /  __/ /_/ __/ / _, _// / /   |
/_/ |_/\___/\__/_/   /_/ |_/___//_/|_|
"""


def check_dependencies(tools):
    """Raise MissingDependencyError naming every tool not found on PATH."""
    missing = [t for t in tools if not check_tool(t)]
    if missing:
        raise MissingDependencyError(missing)


def help_text():
    lines = [
        f"  {C.BOLD}{PROGRAM_NAME}{C.RESET} v{__version__}",
        "",
        f"  {C.BOLD}Usage:{C.RESET}",
        "    netfrix                  Interactive mode",
        "    netfrix -u, --update     Update video database only",
        "    netfrix -v, --version    Show version information",
        "    netfrix -h, --help       Show this help",
        "    netfrix --config PATH    Use another config file",
        "",
        f"  {C.BOLD}Controls while playing:{C.RESET}",
    ]
    for key, label in PLAYER_CONTROLS:
        lines.append(f"    {key:<14} {label}")
    return "\n".join(lines)


class SessionController:
    """Owns the connection, the current catalog, and the private temp directory.

    Use as a context manager: the temp directory holding the catalog file
    is removed on every exit path, including errors and interrupts.
    """

    def __init__(self, config):
        self.config = config
        self.player_spec = player.PlayerSpec(config.player_command)
        self.connection = None
        self.catalog = catalog_mod.Catalog()
        self.temp_dir = None
        self.store = None
        auditlog.set_audit_path(config.audit_log)

    def __enter__(self):
        self.temp_dir = tempfile.mkdtemp(prefix="netfrix-")
        self.store = catalog_mod.CatalogStore(self.temp_dir)
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def close(self):
        if self.temp_dir and os.path.isdir(self.temp_dir):
            shutil.rmtree(self.temp_dir, ignore_errors=True)
        self.temp_dir = None
        self.store = None

    # ─── Core operations ──────────────────────────────────────────────────

    def start(self):
        """Check required tools and open the SSH connection. Both failures are fatal."""
        check_dependencies(["ssh", self.player_spec.executable])
        return self.connect()

    def connect(self):
        info("Testing SSH connection...")
        self.connection = transport.connect(
            self.config.user, self.config.host,
            port=self.config.port, connect_timeout=self.config.connect_timeout,
        )
        success("Successfully connected to video server")
        return self.connection

    def refresh_catalog(self):
        """Rebuild the catalog. On failure the previous catalog stays in place."""
        if self.connection is None:
            raise RuntimeError("refresh_catalog() called before connect()")
        if self.store is None:
            raise RuntimeError("SessionController must be entered before use")
        new_catalog = catalog_mod.build_catalog(
            self.connection, self.config.root_path, self.config.extensions,
        )
        self.store.save(new_catalog)
        self.catalog = new_catalog
        auditlog.log_action("Catalog Refresh", f"{len(new_catalog)} videos")
        return len(new_catalog)

    def find_videos(self, pattern):
        pattern = (pattern or "").strip()
        if not pattern:
            raise InvalidQueryError("Empty input.")
        results = search_mod.search(self.catalog, pattern, regex=self.config.regex_search)
        if not results.found:
            raise NoMatchError(pattern)
        return results

    def play(self, remote_path):
        result = player.play(self.connection, remote_path, self.player_spec)
        auditlog.log_action("Playback", f"{remote_path} ({result.outcome.value})")
        return result

    # ─── Interactive menu ─────────────────────────────────────────────────

    def _update_database(self):
        info("====> Updating video database...")
        try:
            count = self.refresh_catalog()
        except NetfrixError as e:
            error(f"Database update failed: {e}")
            warn(f"Keeping the previous database ({len(self.catalog)} videos).")
            pause()
            return
        success(f"====> Database updated with {count} videos.")
        pause()

    def _print_results(self, results):
        print(f"\n  {C.BLUE}  ID{C.RESET}\t\t{C.BLUE}NAME{C.RESET}\n")
        print(f"  [ {C.RED}0{C.RESET} ]\t\t{C.RED}Return{C.RESET}")
        for key, path in results.items():
            print(f"  [{C.CYAN} {key} {C.RESET}]\t\t{catalog_mod.display_name(path)}")

    def _choose(self, results):
        while True:
            raw = prompt_text("Enter ID to play video:")
            try:
                return results.select(raw)
            except InvalidSelectionError as e:
                warn(str(e))

    def _watch_video(self):
        pattern = prompt_text("Enter video name:")
        info("Searching database. Please wait...")
        try:
            results = self.find_videos(pattern)
        except InvalidQueryError as e:
            error(str(e))
            pause()
            return
        except NoMatchError:
            error("No matches found.")
            pause()
            return

        self._print_results(results)
        remote_path = self._choose(results)
        if remote_path is None:
            return
        self._play_with_status(remote_path)

    def _play_with_status(self, remote_path):
        print(f"\n  Now playing: {C.BLUE}{catalog_mod.display_name(remote_path)}{C.RESET}")
        print("    Controls:")
        for key, label in PLAYER_CONTROLS:
            print(f"     {C.CYAN}'{key}'{C.RESET} {label}")

        result = self.play(remote_path)
        if result.outcome is player.PlaybackOutcome.FAILED:
            error(f"Playback failed: {result.detail}")
            pause()
        elif result.outcome is player.PlaybackOutcome.INTERRUPTED:
            print()
            warn("Playback interrupted. Returning to main menu.")

    def _show_help(self):
        clear_screen()
        print(help_text())
        pause()

    def _header(self):
        return (
            f"{C.ACCENT}{C.BOLD}{LOGO}{C.RESET}"
            f"  {C.DIM}{self.connection.target}:{self.config.root_path}"
            f"  ({len(self.catalog)} videos){C.RESET}\n"
        )

    def run_menu(self):
        """Main loop. Returns when the user picks Exit."""
        options = [
            "Watch a Video",
            "Update Database",
            "Help",
            "Exit",
        ]
        actions = [self._watch_video, self._update_database, self._show_help, None]
        while True:
            idx = pick_option("Choose an option:", options, header=self._header())
            action = actions[idx]
            if action is None:
                return
            try:
                action()
            except KeyboardInterrupt:
                print()
                warn("Interrupted. Returning to main menu.")
            except NetfrixError as e:
                error(str(e))
                pause()

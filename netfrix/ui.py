"""Colors, prompt helpers, and UI utilities."""

import re
import shutil

import questionary
from prompt_toolkit.key_binding import KeyBindings, merge_key_bindings
from prompt_toolkit.keys import Keys
from questionary import Style

from netfrix.config import DEFAULT_CONFIG


def hex_to_ansi(hex_color):
    """Convert a hex color like '#5f9ea0' to a truecolor ANSI escape."""
    h = hex_color.lstrip("#")
    if len(h) != 6:
        return "\033[36m"
    try:
        r, g, b = int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)
    except ValueError:
        return "\033[36m"
    return f"\033[38;2;{r};{g};{b}m"


class C:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"
    ACCENT = hex_to_ansi(DEFAULT_CONFIG["accent_color"])


_accent = DEFAULT_CONFIG["accent_color"]


def _build_style():
    return Style([
        ("qmark", f"fg:{_accent} bold"),
        ("question", "fg:white bold"),
        ("pointer", f"fg:{_accent} bold"),
        ("highlighted", f"fg:{_accent} bold"),
        ("selected", "fg:green"),
        ("answer", "fg:green bold"),
        ("instruction", "fg:#888888"),
        ("separator", "fg:#888888"),
    ])


STYLE = _build_style()

ANSI_RE = re.compile(r"\033\[[0-9;]*m")


def apply_accent(hex_color):
    """Rebuild colors and questionary style for a configured accent color."""
    global STYLE, _accent
    if not hex_color:
        return
    _accent = hex_color
    C.ACCENT = hex_to_ansi(hex_color)
    STYLE = _build_style()


def strip_ansi(text):
    return ANSI_RE.sub("", text)


def info(msg):
    print(f"  {C.ACCENT}{msg}{C.RESET}")


def success(msg):
    print(f"  {C.GREEN}{msg}{C.RESET}")


def error(msg):
    print(f"  {C.RED}{msg}{C.RESET}")


def warn(msg):
    print(f"  {C.YELLOW}{msg}{C.RESET}")


def clear_screen():
    """Clear the terminal screen."""
    print("\033[2J\033[H", end="", flush=True)


def pause():
    input(f"\n  {C.DIM}Press Enter to continue...{C.RESET}")


def pick_option(prompt, options, header=""):
    """Arrow-key select with type-to-filter. Returns selected index."""
    clear_screen()
    if header:
        print(header)
    clean_prompt = strip_ansi(prompt).strip() if prompt else "Select:"
    clean_options = [strip_ansi(o) for o in options]
    if not clean_options:
        return 0

    question = questionary.select(
        clean_prompt,
        choices=clean_options,
        style=STYLE,
        use_shortcuts=False,
        use_indicator=True,
        use_search_filter=True,
        use_jk_keys=False,
        instruction="(↑↓ navigate, type to filter, Ctrl-G back)",
    )

    back_kb = KeyBindings()

    @back_kb.add(Keys.ControlG, eager=True)
    def _go_back(event):
        event.app.exit(exception=KeyboardInterrupt, style="class:aborting")

    app = question.application
    app.key_bindings = merge_key_bindings([app.key_bindings, back_kb])

    try:
        result = question.unsafe_ask()
    except KeyboardInterrupt:
        return len(options) - 1

    if result is None:
        return len(options) - 1
    return clean_options.index(result)


def prompt_text(msg, default=""):
    clean = strip_ansi(msg)
    result = questionary.text(clean, default=default, style=STYLE).ask()
    if result is None:
        return ""
    return result.strip()


def check_tool(tool_name):
    return shutil.which(tool_name) is not None

# devcap/utils/color_support.py

import os
import sys
from functools import lru_cache
from typing import Dict, Optional

from colorama import Fore, Style
from colorama import init as colorama_init

# Terminal colours for conventional commit types; unknown types stay uncoloured
COMMIT_TYPE_COLORS: Dict[str, str] = {
    "feat": Fore.GREEN,
    "fix": Fore.RED,
    "refactor": Fore.CYAN,
    "docs": Fore.BLUE,
    "test": Fore.YELLOW,
    "style": Fore.YELLOW,
}
MUTED_COMMIT_TYPES = frozenset({"chore", "ci", "perf", "build"})


class ColorSupport:
    """Decides whether ANSI colours are emitted and applies them."""

    def __init__(self) -> None:
        self._force_color: Optional[bool] = self._env_force_color()
        self._apply()

    @staticmethod
    def _env_force_color() -> Optional[bool]:
        if os.environ.get("NO_COLOR") is not None:
            return False
        if os.environ.get("FORCE_COLOR", "").lower() in ("1", "true", "yes"):
            return True
        return None

    def _apply(self) -> None:
        colorama_init(strip=not self.supports_color(), convert=True, wrap=True, autoreset=True)

    def set_force_color(self, force: Optional[bool]) -> None:
        """Force colours on/off, or ``None`` to fall back to detection."""
        if force not in (True, False, None):
            raise ValueError("force must be True, False or None")

        target = self._env_force_color() if force is None else force
        if target == self._force_color:
            return
        self._force_color = target
        self.supports_color.cache_clear()
        self._apply()

    @lru_cache(maxsize=1)
    def supports_color(self) -> bool:
        if self._force_color is not None:
            return self._force_color

        term = os.environ.get("TERM", "").lower()
        if "dumb" in term:
            return False
        if sys.platform == "win32":
            return (
                "WT_SESSION" in os.environ
                or "ANSICON" in os.environ
                or os.environ.get("TERM_PROGRAM", "") == "vscode"
            )
        if hasattr(sys.stdout, "isatty") and sys.stdout.isatty():
            return True
        return bool(os.environ.get("COLORTERM"))

    def colored(self, text: str, color: Optional[str] = None, bright: bool = False, dim: bool = False) -> str:
        if not text or not self.supports_color():
            return text
        prefix = ""
        if bright:
            prefix += Style.BRIGHT
        if dim:
            prefix += Style.DIM
        if color:
            prefix += color
        return f"{prefix}{text}{Style.RESET_ALL}"

    def commit_type(self, commit_type: str) -> str:
        if commit_type in MUTED_COMMIT_TYPES:
            return self.colored(commit_type, dim=True)
        return self.colored(commit_type, COMMIT_TYPE_COLORS.get(commit_type))

    def error(self, text: str) -> str:
        return self.colored(text, Fore.RED)

    def warning(self, text: str) -> str:
        return self.colored(text, Fore.YELLOW)

    def success(self, text: str) -> str:
        return self.colored(text, Fore.GREEN)

    def info(self, text: str) -> str:
        return self.colored(text, Fore.CYAN)

    def muted(self, text: str) -> str:
        return self.colored(text, dim=True)


color_support = ColorSupport()

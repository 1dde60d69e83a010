"""Non-blocking single-key input for the interactive timer."""

from __future__ import annotations

import sys
from typing import Optional


class KeyboardHandler:
    """Reads keys from a POSIX terminal in cbreak mode."""

    def __init__(self):
        import termios

        self._termios = termios
        self.fd = sys.stdin.fileno()
        self.old_settings = None
        self._setup()

    def _setup(self) -> None:
        import tty

        try:
            self.old_settings = self._termios.tcgetattr(self.fd)
            tty.setcbreak(self.fd)
        except self._termios.error:
            # stdin is not a terminal (piped input)
            self.old_settings = None

    def get_key(self) -> Optional[str]:
        """Return the pressed key, lower-cased, or None without blocking."""
        import select

        if select.select([sys.stdin], [], [], 0)[0]:
            key = sys.stdin.read(1)
            return key.lower() or None
        return None

    def stop(self) -> None:
        """Restore terminal settings."""
        if self.old_settings:
            self._termios.tcsetattr(self.fd, self._termios.TCSADRAIN, self.old_settings)
            self.old_settings = None


class WindowsKeyboardHandler:
    """Keyboard handler for Windows using msvcrt."""

    def __init__(self):
        import msvcrt

        self.msvcrt = msvcrt

    def get_key(self) -> Optional[str]:
        if self.msvcrt.kbhit():
            key = self.msvcrt.getch()
            if isinstance(key, bytes):
                key = key.decode("utf-8", errors="ignore")
            return key.lower()
        return None

    def stop(self) -> None:
        pass


def get_keyboard_handler():
    """Keyboard handler for the current platform."""
    if sys.platform == "win32":
        return WindowsKeyboardHandler()
    return KeyboardHandler()

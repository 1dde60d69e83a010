"""FocusFlow - Pomodoro session timer engine and command-line client."""

__version__ = "0.4.0"

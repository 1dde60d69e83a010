"""Full-screen timer UI for focus mode."""

from __future__ import annotations

import time

from rich.align import Align
from rich.console import Console, Group
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from focusflow.models.session import PhaseType

from .analytics import FocusStats
from .cycling import (
    DEFAULT_LONG_BREAK_INTERVAL,
    cycle_position,
    effective_interval,
    progress_dots,
)
from .state import EngineSnapshot, EngineStatus

PHASE_COLORS = {
    PhaseType.FOCUS: "cyan",
    PhaseType.SHORT_BREAK: "green",
    PhaseType.LONG_BREAK: "magenta",
}

PHASE_EMOJI = {
    PhaseType.FOCUS: "🍅",
    PhaseType.SHORT_BREAK: "☕",
    PhaseType.LONG_BREAK: "🌴",
}

START_KEYS = ("\n", "\r", " ")


class TimerDisplay:
    """Renders engine snapshots and maps key presses to engine commands."""

    def __init__(
        self,
        console: Console | None = None,
        long_break_interval: int = DEFAULT_LONG_BREAK_INTERVAL,
    ):
        self.console = console or Console()
        self.long_break_interval = effective_interval(long_break_interval)

    def create_layout(
        self,
        snapshot: EngineSnapshot,
        task_title: str | None = None,
        error: str | None = None,
    ) -> Layout:
        """Create the timer layout with all components."""
        layout = Layout()
        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=3),
        )

        phase = snapshot.current_phase
        color = PHASE_COLORS[phase]
        if snapshot.is_paused:
            title = f"⏸  PAUSED - {phase.display_name}"
            color = "yellow"
        elif snapshot.is_idle:
            title = f"Up next: {phase.display_name}"
        else:
            title = f"{PHASE_EMOJI[phase]}  {phase.display_name}"

        header_text = Text(title, style=f"bold {color}", justify="center")
        layout["header"].update(Align.center(header_text, vertical="middle"))

        body_content = self._create_body_content(snapshot, task_title)
        layout["body"].update(Align.center(body_content, vertical="middle"))

        layout["footer"].update(
            Align.center(self._create_footer_text(snapshot, error), vertical="middle")
        )
        return layout

    def _create_body_content(self, snapshot: EngineSnapshot, task_title: str | None) -> Group:
        components = []

        if task_title and snapshot.current_phase is PhaseType.FOCUS:
            components.append(Text(task_title[:50], style="bold white", justify="center"))
            components.append(Text(""))

        remaining = snapshot.whole_seconds_remaining
        if snapshot.is_paused:
            timer_color = "yellow"
        elif snapshot.is_idle:
            timer_color = "dim"
        elif remaining < 60:
            timer_color = "red"
        else:
            timer_color = PHASE_COLORS[snapshot.current_phase]

        components.append(Text(snapshot.time_string, style=f"bold {timer_color}", justify="center"))
        components.append(Text(""))

        components.append(Text(progress_bar(snapshot.progress_fraction), style="dim", justify="center"))
        components.append(Text(""))

        dots = progress_dots(
            snapshot.completed_focus_count, snapshot.current_phase, self.long_break_interval
        )
        slot = cycle_position(snapshot.completed_focus_count, self.long_break_interval)
        components.append(
            Text(
                f"{dots}   Pomodoro {slot}/{self.long_break_interval}"
                f"   {snapshot.completed_focus_count} focus completed",
                style="dim",
                justify="center",
            )
        )

        return Group(*components)

    def _create_footer_text(self, snapshot: EngineSnapshot, error: str | None) -> Text:
        if error:
            return Text(f"⚠ {error}", style="red", justify="center")
        if snapshot.status is EngineStatus.IDLE:
            hints = "Press Enter to start  •  'q' to quit"
        elif snapshot.is_paused:
            hints = "'r' resume  •  's' skip  •  'x' reset  •  'q' quit"
        else:
            hints = "'p' pause  •  's' skip  •  'x' reset  •  'q' quit"
        return Text(hints, style="dim", justify="center")

    def handle_key(self, engine, key: str | None) -> bool:
        """Apply ``key`` to ``engine``. Returns False when the user quits."""
        if key is None:
            return True
        if key == "q":
            return False
        if key == "p":
            engine.pause()
        elif key == "r":
            engine.resume()
        elif key == "s":
            engine.skip()
        elif key == "x":
            engine.reset()
        elif key in START_KEYS:
            engine.start()
        return True

    def run(
        self,
        engine,
        keyboard,
        task_title: str | None = None,
        poll_interval: float = 0.25,
    ) -> str:
        """Run the fullscreen timer until the user quits.

        Returns 'quit' or 'interrupted'. The engine keeps its own ticks; this
        loop only polls the keyboard and redraws.
        """

        def render():
            error = engine.last_error
            return self.create_layout(
                engine.snapshot(), task_title, str(error) if error else None
            )

        try:
            with Live(render(), console=self.console, refresh_per_second=4, screen=True) as live:
                while True:
                    if not self.handle_key(engine, keyboard.get_key()):
                        return "quit"
                    live.update(render())
                    time.sleep(poll_interval)
        except KeyboardInterrupt:
            return "interrupted"
        finally:
            keyboard.stop()


def progress_bar(fraction: float, width: int = 40) -> str:
    """Text progress bar with a trailing percentage."""
    fraction = max(0.0, min(1.0, fraction))
    filled = int(width * fraction)
    return "▓" * filled + "░" * (width - filled) + f"  {int(fraction * 100)}%"


def summary_panel(stats: FocusStats) -> Panel:
    """Panel summarizing what an interactive run completed."""
    if not stats.total_completed:
        body = "[dim]No phases completed this run.[/dim]"
        border = "yellow"
    else:
        body = (
            f"[bold green]Focus phases completed: {stats.focus_completed}[/bold green]\n"
            f"Focus minutes: {stats.focus_minutes}\n"
            f"Phases finished: {stats.total_completed} ({stats.skipped} skipped)"
        )
        border = "green"

    return Panel(body, title="Session Summary", border_style=border, padding=(1, 2))

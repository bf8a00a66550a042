"""Result list and hint bar widgets.

Rendering is a pure function of (view, selected_index); the widgets only
hold the last rendered Text.

// [LAW:single-enforcer] update_display() is the sole render entry for each widget.
"""

from __future__ import annotations

from collections.abc import Sequence

from rich.text import Text
from textual.widgets import Static

from runbox.app.input_modes import FOOTER_KEYS, InputPhase
from runbox.core.candidates import Candidate

EMPTY_MESSAGE = "No results"
MAX_VISIBLE = 200


def _badge(candidate: Candidate) -> str:
    # Icons are not resolved here; the first letter stands in.
    return (candidate.name[:1] or "?").upper()


def render_results(view: Sequence[Candidate], selected_index: int) -> Text:
    """Build the result list as one Text, one candidate per line."""
    if not view:
        return Text(EMPTY_MESSAGE, style="dim")

    text = Text()
    for i, candidate in enumerate(view[:MAX_VISIBLE]):
        selected = i == selected_index
        row_style = "bold reverse" if selected else ""
        if i:
            text.append("\n")
        text.append(f" {_badge(candidate)} ", style="bold on grey23")
        text.append(" ")
        text.append(candidate.name, style=row_style)
        secondary = candidate.subtitle or candidate.category
        if secondary:
            text.append(f"  {secondary}", style="dim")
    if len(view) > MAX_VISIBLE:
        text.append(f"\n… {len(view) - MAX_VISIBLE} more", style="dim")
    return text


def render_hints(phase: InputPhase) -> Text:
    text = Text()
    for i, (key, desc) in enumerate(FOOTER_KEYS.get(phase, [])):
        if i:
            text.append("  ")
        text.append(key, style="bold")
        text.append(f" {desc}", style="dim")
    return text


class ResultsView(Static):
    """Scrollable list of the current view with the selection highlighted."""

    DEFAULT_CSS = """
    ResultsView {
        height: auto;
        max-height: 20;
        padding: 0 1;
    }
    """

    def __init__(self, **kwargs):
        super().__init__("", **kwargs)
        self.rendered_count = 0
        self.rendered_index = 0

    def update_display(self, view: Sequence[Candidate], selected_index: int) -> None:
        self.rendered_count = len(view)
        self.rendered_index = selected_index
        self.update(render_results(view, selected_index))


class HintBar(Static):
    DEFAULT_CSS = """
    HintBar {
        dock: bottom;
        height: 1;
        padding: 0 1;
    }
    """

    def __init__(self, **kwargs):
        super().__init__("", **kwargs)

    def update_display(self, phase: InputPhase) -> None:
        self.update(render_hints(phase))

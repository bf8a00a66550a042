"""Pure key routing tables for the launcher input.

The query box owns all text editing. Exactly four keys are intercepted
before the text field sees them; everything else falls through.

Pure data, no project imports.
"""

from enum import Enum, auto


class InputPhase(Enum):
    """Controller phase, orthogonal to the selection cursor."""

    IDLE = auto()
    TYPING = auto()
    IN_FLIGHT = auto()


# [LAW:one-source-of-truth] Key→controller action mapping.
# Textual key names plus the DOM-style aliases some drivers report.
KEYMAP: dict[str, str] = {
    "down": "move_down",
    "arrowdown": "move_down",
    "up": "move_up",
    "arrowup": "move_up",
    "enter": "activate",
    "escape": "escape",
}

INTERCEPTED_KEYS: frozenset[str] = frozenset(KEYMAP)


def action_for_key(key: str) -> str | None:
    """Resolve a key name to a controller action, or None to fall through."""
    if not key:
        return None
    return KEYMAP.get(key) or KEYMAP.get(key.lower())


# [LAW:one-source-of-truth] Footer hints per phase.
FOOTER_KEYS: dict[InputPhase, list[tuple[str, str]]] = {
    InputPhase.IDLE: [
        ("↑/↓", "select"),
        ("enter", "launch"),
        ("esc", "close"),
    ],
    InputPhase.TYPING: [
        ("↑/↓", "select"),
        ("enter", "launch"),
        ("esc", "close"),
    ],
    InputPhase.IN_FLIGHT: [
        ("↑/↓", "select"),
        ("enter", "launch"),
        ("esc", "close"),
        ("…", "searching"),
    ],
}

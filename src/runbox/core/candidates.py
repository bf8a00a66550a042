"""Candidate data model and the local view filter.

// [LAW:one-source-of-truth] Candidate is the only shape the controller sees.
// [LAW:single-enforcer] Candidate.from_payload is the sole payload normalizer.
// [LAW:dataflow-not-control-flow] compute_view is pure; views are derived on read, never stored.

This module is STABLE. Safe for `from` imports everywhere.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field


CATEGORY_APP = "app"
CATEGORY_FILE = "file"
CATEGORY_FOLDER = "folder"
CATEGORY_COMMAND = "command"
CATEGORY_URL = "url"


@dataclass(frozen=True)
class Candidate:
    """One launchable item. Immutable once received."""

    name: str
    reference: str
    category: str
    rank: float = 0.0
    icon: str | None = None
    subtitle: str = ""

    @classmethod
    def from_payload(cls, payload: Mapping[str, object]) -> "Candidate":
        """Build a Candidate from any of the payload shapes locators emit.

        Accepted shapes:
            {name, reference, category, rank, icon?}   canonical
            {name, path, kind, score, icon?}           path/app locators
            {title, subtitle, exec?}                   static command lists
        """
        if isinstance(payload, Candidate):
            return payload

        name = _text(payload.get("name")) or _text(payload.get("title"))
        is_command_shape = "title" in payload and "name" not in payload
        reference = (
            _text(payload.get("reference"))
            or _text(payload.get("path"))
            or _text(payload.get("exec"))
            or (name if is_command_shape else "")
        )
        if not name or not reference:
            raise ValueError(f"candidate payload needs a name and a reference: {payload!r}")

        category = (
            _text(payload.get("category"))
            or _text(payload.get("kind"))
            or (CATEGORY_COMMAND if is_command_shape else CATEGORY_APP)
        )
        rank_raw = payload.get("rank", payload.get("score", 0.0))
        try:
            rank = float(rank_raw)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            rank = 0.0
        icon = _text(payload.get("icon")) or None
        return cls(
            name=name,
            reference=reference,
            category=category,
            rank=rank,
            icon=icon,
            subtitle=_text(payload.get("subtitle")),
        )


def _text(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


def to_candidates(items: Iterable[object]) -> tuple[Candidate, ...]:
    """Normalize a locator response into a tuple of Candidates, keeping order."""
    return tuple(Candidate.from_payload(item) for item in items)  # type: ignore[arg-type]


@dataclass(frozen=True)
class ResultSet:
    """Candidates accepted for one generation, in the locator's order."""

    generation: int
    candidates: tuple[Candidate, ...] = field(default_factory=tuple)
    query: str = ""

    def __len__(self) -> int:
        return len(self.candidates)

    def __iter__(self):
        return iter(self.candidates)


EMPTY_RESULT_SET = ResultSet(generation=0)


def matches(candidate: Candidate, needle: str) -> bool:
    """Case-insensitive substring test against name, category and subtitle.

    needle must already be lower-cased.
    """
    return (
        needle in candidate.name.lower()
        or needle in candidate.category.lower()
        or needle in candidate.subtitle.lower()
    )


def compute_view(candidates: Iterable[Candidate], query: str) -> tuple[Candidate, ...]:
    """Filter candidates against query, preserving the incoming order.

    The locator's ranking is authoritative, so nothing is re-sorted here.
    A blank query keeps every candidate.
    """
    items = tuple(candidates)
    needle = (query or "").strip().lower()
    if not needle:
        return items
    return tuple(c for c in items if matches(c, needle))

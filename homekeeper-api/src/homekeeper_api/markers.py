"""Per-date dot markers for a month calendar widget."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date

from .const import COLOR_HEX, DEFAULT_EVENT_COLOR, FALLBACK_COLOR_HEX, SELECTED_ALPHA_SUFFIX
from .recurrence import Occurrence


@dataclass(frozen=True)
class Marker:
    """Rendering hints for one calendar date.

    ``primary_color`` comes from the first occurrence recorded for the
    date. ``selected_color`` is the same color at 25% opacity.
    """

    dot_colors: tuple[str, ...]
    primary_color: str
    selected_color: str


def color_hex(name: str | None) -> str:
    """Resolve a named color to its hex code; unknown names map to gray."""
    return COLOR_HEX.get(name or DEFAULT_EVENT_COLOR, FALLBACK_COLOR_HEX)


def group_by_date(occurrences: Iterable[Occurrence]) -> dict[date, list[Occurrence]]:
    """Group occurrences by date, preserving the order they arrive in."""
    grouped: dict[date, list[Occurrence]] = {}
    for occurrence in occurrences:
        grouped.setdefault(occurrence.date, []).append(occurrence)
    return grouped


def build_markers(
    occurrences_by_date: Mapping[date, Sequence[Occurrence]],
) -> dict[date, Marker]:
    """Fold occurrences into one marker per date that has any."""
    markers: dict[date, Marker] = {}
    for day, occurrences in occurrences_by_date.items():
        if not occurrences:
            continue
        dots = tuple(color_hex(occ.color) for occ in occurrences)
        markers[day] = Marker(
            dot_colors=dots,
            primary_color=dots[0],
            selected_color=dots[0] + SELECTED_ALPHA_SUFFIX,
        )
    return markers

"""Validation rules over a selection.

Each rule returns a list with zero or one message; an empty list means the
selection is valid. Rules never mutate the engine.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from typing import TYPE_CHECKING

from .value_objects import Sector

if TYPE_CHECKING:
    from .engine import SelectionEngine
    from .indicator import SectorIndicator


def at_least_one_selected_per_sector(
    engine: SelectionEngine, sectors: Sequence[Sector]
) -> list[str]:
    """Fail listing every sector without selected indicators."""
    sector_ids_with_selection = {si.sector.id for si in engine.get(only_selected=True)}
    missing = [s.name for s in sectors if s.id not in sector_ids_with_selection]
    if not missing:
        return []
    return [f"The following sectors have no indicators selected: {', '.join(missing)}"]


def total_selected_count(
    engine: SelectionEngine,
    sectors: Sequence[Sector],
    *,
    min: int,  # pylint: disable=redefined-builtin
    max: int,  # pylint: disable=redefined-builtin
) -> list[str]:
    """Fail if the selected count across the sectors is outside [min, max]."""
    count = len(_selected_in(engine, sectors))
    if count < min:
        return [f"Select at least a total of {min} indicators"]
    if count > max:
        return [f"Select at most a total of {max} indicators"]
    return []


def max_selected_per_sector(
    engine: SelectionEngine, sectors: Sequence[Sector], max_count: int
) -> list[str]:
    """Fail naming the sectors with more than `max_count` selected indicators."""
    counts = Counter(si.sector.name for si in _selected_in(engine, sectors))
    offending = [name for name, count in counts.items() if count > max_count]
    if not offending:
        return []
    return [
        f"A maximum of {max_count} indicators can be selected per sector; "
        f"too many selected for {', '.join(offending)}"
    ]


def max_sectors_with_selections(
    engine: SelectionEngine, sectors: Sequence[Sector], max_count: int
) -> list[str]:
    """Fail if more than `max_count` sectors have any selected indicator."""
    sectors_count = len({si.sector.id for si in _selected_in(engine, sectors)})
    if sectors_count <= max_count:
        return []
    return [
        f"A maximum of {max_count} sectors can have indicators selected, "
        f"but there are {sectors_count} sectors with indicators"
    ]


def _selected_in(
    engine: SelectionEngine, sectors: Sequence[Sector]
) -> list[SectorIndicator]:
    sector_ids = {s.id for s in sectors}
    return [si for si in engine.get(only_selected=True) if si.sector.id in sector_ids]

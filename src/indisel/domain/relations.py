"""Relationship resolution between indicators.

Selecting any non-global indicator of a series implies selecting the global
indicator of that series, in the global indicator's own main sector. The
resolver computes, for a proposed selection of one sector:

* the global indicators that must be selected automatically,
* the global indicators that cannot be unselected because some of their
  sub-indicators remain selected,
* human-readable messages describing both.

Everything here is a pure function of the catalog and the current selection.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from .catalog import SERIES_ROOT_SUFFIX, CatalogIndex
from .errors import RelationNotFoundError
from .indicator import SectorIndicator
from .selection import SelectionState
from .value_objects import HierarchyLevel

logger = logging.getLogger(__name__)

AUTOSELECTION_MESSAGE = (
    "These related global indicators have been automatically selected:"
)
UNSELECTION_WARNING = (
    "Global indicators with selected sub-indicators cannot be unselected"
)


@dataclass(frozen=True, slots=True)
class SelectionMessages:
    """Texts used to report the outcome of a relation resolution."""

    autoselection: str = AUTOSELECTION_MESSAGE
    unselection_warning: str = UNSELECTION_WARNING


@dataclass(frozen=True, slots=True)
class SelectionInfo:
    """Result of a relation resolution.

    Attributes:
        selected: Global indicators selected automatically (each one in its
            main sector).
        unselectable: Previously selected global indicators of the edited
            sector that cannot be removed.
        messages: Advisory messages for the user.
    """

    selected: tuple[SectorIndicator, ...] = ()
    unselectable: tuple[SectorIndicator, ...] = ()
    messages: tuple[str, ...] = ()


class RelationResolver:
    """Resolve the relationship closure of a selection change."""

    def __init__(self, catalog: CatalogIndex, selection: SelectionState) -> None:
        self._catalog = catalog
        self._selection = selection

    def get_related(
        self, sector_id: str, indicator_ids: Iterable[str]
    ) -> list[SectorIndicator]:
        """Return the global indicators implied by selecting ids in a sector.

        Each id is expanded with its paired indicators. Indicators whose global
        counterpart is missing from the catalog are logged and skipped.
        """
        sources: dict[str, SectorIndicator] = {}
        for indicator_id in indicator_ids:
            if (si := self._catalog.find(sector_id, indicator_id)) is None:
                continue
            for member in si.expand_paired():
                sources.setdefault(member.id, member)

        related: dict[str, SectorIndicator] = {}
        for si in sources.values():
            if not requires_global(si):
                continue
            try:
                global_indicator = self._catalog.get_global(
                    si.main_sector_id, si.main_series  # type: ignore[arg-type]
                )
            except RelationNotFoundError as error:
                logger.info("Indicator %s has no related global: %s", si.code, error)
                continue
            related.setdefault(global_indicator.id, global_indicator)
        return list(related.values())

    def get_selection_info(
        self,
        candidate_ids: Sequence[str],
        sector_id: str,
        *,
        filter: Callable[[str], bool] | None = None,  # pylint: disable=redefined-builtin
        messages: SelectionMessages | None = None,
    ) -> SelectionInfo:
        """Compute the effects of replacing a sector's selection by `candidate_ids`.

        Args:
            candidate_ids: Proposed new selection of the sector.
            sector_id: The edited sector.
            filter: Optional predicate restricting the previously selected ids
                taken into account.
            messages: Message texts (defaults to `SelectionMessages()`).

        Returns:
            The auto-selected and pinned indicators, and the messages.
        """
        accept = filter or (lambda _indicator_id: True)
        texts = messages or SelectionMessages()
        candidates = list(dict.fromkeys(candidate_ids))
        candidate_set = set(candidates)

        previous_all = {i for i in self._selection.all_ids() if accept(i)}
        # Selected elsewhere, filtered or not: never auto-selected a second time.
        kept_elsewhere = {
            i
            for sid in self._selection.sector_ids
            if sid != sector_id
            for i in self._selection.get(sid)
        }
        previous_in_sector = {i for i in self._selection.get(sector_id) if accept(i)}

        related: dict[str, SectorIndicator] = {}
        for sid in dict.fromkeys([*self._selection.sector_ids, sector_id]):
            ids = (
                candidates
                if sid == sector_id
                else [i for i in sorted(self._selection.get(sid)) if accept(i)]
            )
            for global_indicator in self.get_related(sid, ids):
                related.setdefault(global_indicator.id, global_indicator)

        unselectable = tuple(
            si
            for si in related.values()
            if si.sector.id == sector_id
            and si.id in previous_in_sector
            and si.id not in candidate_set
        )
        selected = tuple(
            si
            for si in related.values()
            if si.id not in previous_all
            and si.id not in kept_elsewhere
            and si.id not in candidate_set
        )
        info_messages = [
            *selection_messages(selected, texts.autoselection),
            *([texts.unselection_warning] if unselectable else []),
        ]
        return SelectionInfo(selected, unselectable, tuple(info_messages))


def requires_global(si: SectorIndicator) -> bool:
    """True if selecting the indicator implies selecting its series' global."""
    series = si.main_series
    return (
        si.hierarchy_level is not HierarchyLevel.GLOBAL
        and bool(series)
        and not series.endswith(SERIES_ROOT_SUFFIX)  # type: ignore[union-attr]
    )


def selection_messages(indicators: Sequence[SectorIndicator], header: str) -> list[str]:
    """Header followed by one "sector: [code] name (level)" line per indicator."""
    lines = [
        f"{si.sector.name}: [{si.code}] {si.name} ({si.hierarchy_level.value})"
        for si in indicators
    ]
    return [header, *lines] if lines else []

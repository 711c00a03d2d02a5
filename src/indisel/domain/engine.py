"""Selection engine: the public API to query and evolve a selection.

A `SelectionEngine` pairs an immutable `CatalogIndex` with an immutable
`SelectionState`. Every mutation returns a new engine, so holders of a
previous instance keep observing a consistent snapshot. The messages produced
by the mutation that created an engine are available in `messages`.

Examples:
    ```py
    engine = SelectionEngine.build(indicators, sectors, group_paired=True)
    engine = engine.update_selected_with_relations("AGRI", ["B05002"])
    engine.messages
    engine.get(only_selected=True)
    ```
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from .catalog import CatalogIndex
from .indicator import Indicator, SectorIndicator
from .query import QueryOptions, query, query_sorted
from .relations import RelationResolver, SelectionInfo, SelectionMessages
from .selection import SelectionState
from .value_objects import Sector

logger = logging.getLogger(__name__)

CONFLICT_MESSAGE = (
    "Indicator {code} cannot be selected because it is selected in another "
    "sector ({sector}); it has been unselected there"
)


class SelectionEngine:
    """Immutable catalog + selection pair with relation-aware mutations."""

    def __init__(
        self,
        catalog: CatalogIndex,
        selection: SelectionState | None = None,
        messages: Sequence[str] = (),
    ) -> None:
        self._catalog = catalog
        self._selection = selection if selection is not None else SelectionState()
        self._messages = tuple(messages)

    @classmethod
    def build(
        cls,
        indicators: Iterable[Indicator],
        sectors: Iterable[Sector],
        *,
        group_paired: bool,
        super_set: SelectionEngine | None = None,
        selection: SelectionState | None = None,
    ) -> SelectionEngine:
        """Build an engine over a new catalog index.

        Args:
            indicators: Normalized base indicators.
            sectors: Configured sectors.
            group_paired: Group paired indicators under their main indicator.
            super_set: Broader engine whose current selection restricts the
                indicators this engine exposes.
            selection: Initial selection (empty by default).

        Raises:
            CatalogIntegrityError: If the catalog has ambiguous relation keys.
        """
        catalog = CatalogIndex.build(
            indicators, sectors, group_paired=group_paired, super_set=super_set
        )
        return cls(catalog, selection)

    # --- State ---

    @property
    def catalog(self) -> CatalogIndex:
        """The catalog index."""
        return self._catalog

    @property
    def selection(self) -> SelectionState:
        """The current selection state."""
        return self._selection

    @property
    def messages(self) -> tuple[str, ...]:
        """Messages produced by the mutation that created this engine."""
        return self._messages

    @property
    def are_paired_grouped(self) -> bool:
        """True if paired indicators are grouped under their main indicator."""
        return self._catalog.group_paired

    # --- Reads ---

    def get(self, **options: Any) -> list[SectorIndicator]:
        """Query indicators; see `QueryOptions` for the accepted keywords.

        Results are ordered by code within each sector.
        """
        return query(self._catalog, self._selection, QueryOptions(**options))

    def get_sorted(self, **options: Any) -> list[SectorIndicator]:
        """Like `get`, ordered by each indicator's `sort_key`."""
        return query_sorted(self._catalog, self._selection, QueryOptions(**options))

    def get_all_selected(self) -> list[SectorIndicator]:
        """Selected indicators of every sector, paired indicators included."""
        return self.get(only_selected=True, include_paired=True)

    def selected_ids_by_sector(
        self, include_paired: bool = True
    ) -> dict[str, frozenset[str]]:
        """Ids of the selected indicators (as exposed by `get`) per sector."""
        return {
            sector_id: frozenset(
                si.id
                for si in self.get(
                    sector_id=sector_id,
                    only_selected=True,
                    include_paired=include_paired,
                )
            )
            for sector_id in self._catalog.by_sector
        }

    def get_selection_info(
        self,
        candidate_ids: Sequence[str],
        sector_id: str,
        *,
        filter: Callable[[str], bool] | None = None,  # pylint: disable=redefined-builtin
        messages: SelectionMessages | None = None,
    ) -> SelectionInfo:
        """Relation closure of a proposed selection (see `RelationResolver`)."""
        resolver = RelationResolver(self._catalog, self._selection)
        return resolver.get_selection_info(
            candidate_ids, sector_id, filter=filter, messages=messages
        )

    # --- Mutations ---

    def update_selected(self, patch: Mapping[str, Iterable[str]]) -> SelectionEngine:
        """Shallow-merge a sector -> ids patch, without relation resolution."""
        logger.debug("Updating selection of sectors %s", list(patch))
        return SelectionEngine(self._catalog, self._selection.merge(patch))

    def update_selected_with_relations(  # pylint: disable=too-many-locals
        self,
        sector_id: str | None = None,
        candidate_ids: Sequence[str] | None = None,
        *,
        exclusive: bool = True,
        filter: Callable[[str], bool] | None = None,  # pylint: disable=redefined-builtin
        messages: SelectionMessages | None = None,
    ) -> SelectionEngine:
        """Replace a sector's selection, applying the relationship rules.

        Related global indicators are selected automatically, globals with
        selected sub-indicators stay selected and, unless `exclusive` is
        False, candidates selected in another sector are removed from it.
        Without arguments, the rules are re-applied to the first sector of the
        current selection.

        Args:
            sector_id: The edited sector.
            candidate_ids: Proposed new selection of the sector (defaults to its
                current selection).
            exclusive: Enforce that an indicator is selected in one sector only.
            filter: Optional predicate passed to the relation resolver.
            messages: Optional message texts for the relation resolver.

        Returns:
            A new engine with the resulting selection and messages.
        """
        if sector_id is None:
            if not self._selection.sector_ids:
                return self
            sector_id = self._selection.sector_ids[0]
        if candidate_ids is None:
            candidate_ids = sorted(self._selection.get(sector_id))
        candidates = list(dict.fromkeys(candidate_ids))

        info = self.get_selection_info(
            candidates, sector_id, filter=filter, messages=messages
        )

        new_selected: dict[str, set[str]] = {
            sid: set() if sid == sector_id else set(ids)
            for sid, ids in self._selection.selected.items()
        }
        conflict_messages: list[str] = []
        if exclusive:
            for indicator_id in candidates:
                for other_id in self._selection.sectors_of(indicator_id):
                    if other_id == sector_id:
                        continue
                    new_selected[other_id].discard(indicator_id)
                    conflict_messages.append(
                        self._conflict_message(indicator_id, other_id)
                    )

        sector_selection = new_selected.setdefault(sector_id, set())
        sector_selection.update(candidates)
        sector_selection.update(si.id for si in info.unselectable)
        for si in info.selected:
            new_selected.setdefault(si.sector.id, set()).add(si.id)

        logger.debug(
            "Selection of sector %s updated: candidates=%d, auto-selected=%d, "
            "pinned=%d, moved from other sectors=%d",
            sector_id,
            len(candidates),
            len(info.selected),
            len(info.unselectable),
            len(conflict_messages),
        )
        return SelectionEngine(
            self._catalog,
            SelectionState(new_selected),
            [*info.messages, *conflict_messages],
        )

    def keep_selection_in_sectors(
        self, sectors: Iterable[Sector | str]
    ) -> SelectionEngine:
        """Drop the selection of every sector not in `sectors`."""
        sector_ids = [s.id if isinstance(s, Sector) else s for s in sectors]
        logger.debug("Keeping selection in sectors %s", sector_ids)
        return SelectionEngine(self._catalog, self._selection.keep_sectors(sector_ids))

    def update_super_set(self, super_set: SelectionEngine) -> SelectionEngine:
        """Restrict the exposed indicators to a new superset selection.

        The selection state is kept as-is: ids no longer reachable simply stop
        appearing in query results.
        """
        catalog = self._catalog.restricted_to(super_set.selected_ids_by_sector())
        return SelectionEngine(catalog, self._selection)

    # --- Helpers ---

    def _conflict_message(self, indicator_id: str, sector_id: str) -> str:
        si = self._catalog.find(sector_id, indicator_id)
        indicator = si.indicator if si else self._catalog.get_indicator(indicator_id)
        code = indicator.code if indicator else indicator_id
        return CONFLICT_MESSAGE.format(
            code=code, sector=self._catalog.sector_name(sector_id)
        )

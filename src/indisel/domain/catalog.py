"""Catalog index of indicators by sector.

The index is built once per configuration load and is immutable afterwards.
It holds:

* `all_by_sector`: the per-sector indicator projections (paired indicators
  grouped under their main indicator when `group_paired` is set).
* `by_sector`: the same lists restricted to a superset's current selection
  (identical to `all_by_sector` when the catalog has no superset).
* `by_relation_key`: projections keyed by (sector id, hierarchy level,
  series), used to resolve the global indicator of a series.

Restricting a catalog to a superset is an explicit, pure operation
(`restrict`), applied when the catalog is built and whenever the owner
synchronizes it with a new superset selection.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping, Set
from dataclasses import dataclass, replace
from functools import cached_property
from types import MappingProxyType
from typing import Protocol, TypeAlias

from .errors import CatalogIntegrityError, RelationNotFoundError
from .indicator import Indicator, SectorIndicator, build_search_text
from .value_objects import HierarchyLevel, Sector, SectorRef

logger = logging.getLogger(__name__)

RelationKey: TypeAlias = tuple[str, HierarchyLevel, str]
BySector: TypeAlias = Mapping[str, tuple[SectorIndicator, ...]]

SERIES_ROOT_SUFFIX = "00"


class SupersetSelection(Protocol):  # pylint: disable=too-few-public-methods
    """Anything exposing a per-sector selection that can restrict a catalog."""

    def selected_ids_by_sector(
        self, include_paired: bool = True
    ) -> Mapping[str, frozenset[str]]:
        """Selected indicator ids per sector."""


@dataclass(frozen=True, eq=False)
class CatalogIndex:
    """Immutable index of the indicators of each sector."""

    sectors: tuple[Sector, ...]
    indicators: tuple[Indicator, ...]
    all_by_sector: BySector
    by_sector: BySector
    by_relation_key: Mapping[RelationKey, SectorIndicator]
    group_paired: bool

    # --- Construction ---

    @classmethod
    def build(
        cls,
        indicators: Iterable[Indicator],
        sectors: Iterable[Sector],
        *,
        group_paired: bool,
        super_set: SupersetSelection | None = None,
    ) -> CatalogIndex:
        """Build the index from base indicators and the configured sectors.

        Args:
            indicators: Normalized base indicators.
            sectors: Configured sectors, in display order.
            group_paired: Group paired indicators under their main indicator.
            super_set: Optional broader selection restricting `by_sector`.

        Returns:
            The catalog index.

        Raises:
            CatalogIntegrityError: If two projections share a relation key.
        """
        indicators = tuple(indicators)
        sectors = tuple(sectors)
        all_by_sector: BySector = MappingProxyType(
            {
                sector.id: _project_sector(sector, indicators, group_paired)
                for sector in sectors
            }
        )
        catalog = cls(
            sectors=sectors,
            indicators=indicators,
            all_by_sector=all_by_sector,
            by_sector=all_by_sector,
            by_relation_key=_index_by_relation_key(all_by_sector),
            group_paired=group_paired,
        )
        logger.debug(
            "Built catalog index: sectors=%d, indicators=%d, group_paired=%s",
            len(sectors),
            len(indicators),
            group_paired,
        )
        if super_set is not None:
            catalog = catalog.restricted_to(super_set.selected_ids_by_sector())
        return catalog

    def restricted_to(
        self, allowed_by_sector: Mapping[str, Set[str]]
    ) -> CatalogIndex:
        """Return a copy whose `by_sector` only keeps the allowed ids."""
        return replace(self, by_sector=restrict(self.all_by_sector, allowed_by_sector))

    # --- Lookups ---

    @cached_property
    def _by_id_in_sector(self) -> dict[str, dict[str, SectorIndicator]]:
        return {
            sector_id: {si.id: si for si in indicators}
            for sector_id, indicators in self.all_by_sector.items()
        }

    @cached_property
    def _indicators_by_id(self) -> dict[str, Indicator]:
        return {indicator.id: indicator for indicator in self.indicators}

    def sector_name(self, sector_id: str) -> str:
        """Name of a configured sector ("" if unknown)."""
        return next((s.name for s in self.sectors if s.id == sector_id), "")

    def get_indicator(self, indicator_id: str) -> Indicator | None:
        """Base indicator by id, or None."""
        return self._indicators_by_id.get(indicator_id)

    def find(self, sector_id: str, indicator_id: str) -> SectorIndicator | None:
        """Top-level projection of an indicator in a sector (unrestricted), or None."""
        return self._by_id_in_sector.get(sector_id, {}).get(indicator_id)

    def get_global(self, sector_id: str, series: str) -> SectorIndicator:
        """Return the global indicator of a series in a sector.

        The global sharing the series is preferred; otherwise the global of
        the series root (last two digits replaced by "00") is used.

        Raises:
            RelationNotFoundError: If neither global exists in the sector.
        """
        for candidate in dict.fromkeys((series, series_root(series))):
            key = (sector_id, HierarchyLevel.GLOBAL, candidate)
            if (global_indicator := self.by_relation_key.get(key)) is not None:
                return global_indicator
        raise RelationNotFoundError(sector_id, series)

    def global_of(self, indicator_id: str) -> Indicator | None:
        """Global indicator of a sub indicator, matched by code.

        The global code is the sub's code with its last two digits replaced by
        "00". Returns None for unknown or non-sub indicators.
        """
        indicator = self.get_indicator(indicator_id)
        if indicator is None or not indicator.hierarchy_level.is_sub:
            return None
        code = global_code(indicator.code)
        return next(
            (
                other
                for other in self.indicators
                if other.hierarchy_level is HierarchyLevel.GLOBAL and other.code == code
            ),
            None,
        )

    def subs_of(self, indicator_id: str) -> list[Indicator]:
        """Sub indicators of a global (or custom) indicator, matched by code."""
        indicator = self.get_indicator(indicator_id)
        if indicator is None or indicator.hierarchy_level not in (
            HierarchyLevel.GLOBAL,
            HierarchyLevel.CUSTOM,
        ):
            return []
        return [
            other
            for other in self.indicators
            if other.hierarchy_level.is_sub and global_code(other.code) == indicator.code
        ]


# --- Pure helpers ---


def restrict(
    all_by_sector: BySector, allowed_by_sector: Mapping[str, Set[str]]
) -> BySector:
    """Keep, for each sector, only the projections whose id is allowed."""
    return MappingProxyType(
        {
            sector_id: tuple(
                si for si in indicators if si.id in allowed_by_sector.get(sector_id, ())
            )
            for sector_id, indicators in all_by_sector.items()
        }
    )


def series_root(series: str) -> str:
    """Root of a series: "5002" -> "5000"."""
    return series[:-2] + SERIES_ROOT_SUFFIX if len(series) >= 2 else series


def global_code(code: str) -> str:
    """Code of the global indicator of a sub code: "B05002" -> "B05000"."""
    return re.sub(r"\d\d$", SERIES_ROOT_SUFFIX, code)


def _project_sector(
    sector: Sector, indicators: tuple[Indicator, ...], group_paired: bool
) -> tuple[SectorIndicator, ...]:
    sector_ref = SectorRef(id=sector.id, name=sector.name)
    projected = [
        SectorIndicator(indicator=indicator, sector=sector_ref, series=membership.series)
        for indicator in indicators
        if (membership := indicator.membership(sector.id)) is not None
    ]

    if not group_paired:
        return tuple(
            replace(si, search_text=build_search_text([si.indicator]))
            for si in projected
        )

    by_id = {si.id: si for si in projected}

    def paired_ids(si: SectorIndicator) -> list[str]:
        return [
            ref.id
            for ref in si.indicator.paired_indicator_refs
            if ref.id in by_id and ref.id != si.id
        ]

    referenced = {ref_id for si in projected for ref_id in paired_ids(si)}
    main_ids = {si.id for si in projected if si.id not in referenced}
    absorbed = {ref_id for si in projected if si.id in main_ids for ref_id in paired_ids(si)}
    # cyclic pairings: the first indicator of the cycle becomes the main one
    for si in projected:
        if si.id not in main_ids and si.id not in absorbed:
            main_ids.add(si.id)
            absorbed.update(paired_ids(si))

    grouped = []
    for si in projected:
        if si.id not in main_ids:
            continue
        paired = tuple(
            by_id[ref_id] for ref_id in paired_ids(si) if ref_id not in main_ids
        )
        search_text = build_search_text([si.indicator, *(p.indicator for p in paired)])
        grouped.append(replace(si, paired_indicators=paired, search_text=search_text))
    return tuple(grouped)


def _index_by_relation_key(
    all_by_sector: BySector,
) -> Mapping[RelationKey, SectorIndicator]:
    index: dict[RelationKey, SectorIndicator] = {}
    for indicators in all_by_sector.values():
        for si in indicators:
            if si.series is None:
                continue
            key = (si.sector.id, si.hierarchy_level, si.series)
            if (existing := index.get(key)) is not None:
                raise CatalogIntegrityError(
                    (si.sector.id, si.hierarchy_level.value, si.series),
                    existing.code,
                    si.code,
                )
            index[key] = si
    return MappingProxyType(index)

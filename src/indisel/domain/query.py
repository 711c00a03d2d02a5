"""Read queries over a catalog and a selection state."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .catalog import CatalogIndex
from .indicator import SectorIndicator
from .selection import SelectionState
from .value_objects import INTERNAL, HierarchyLevel, PeopleOrBenefit


@dataclass(frozen=True, slots=True)
class QueryOptions:
    """Filters of a catalog query. All are optional and combine with AND.

    Attributes:
        sector_id: Restrict to one sector (default: every sector of the catalog).
        series: Series of the indicator in the sector.
        hierarchy_level: Hierarchy level of the indicator.
        people_or_benefit: Counting axis of the indicator.
        external_tag: A funder key, or `INTERNAL` for indicators without tags.
            The indicator's paired indicators are considered too.
        only_selected: Only indicators selected in their sector.
        include_paired: Expand each indicator with its paired indicators.
    """

    sector_id: str | None = None
    series: str | None = None
    hierarchy_level: HierarchyLevel | None = None
    people_or_benefit: PeopleOrBenefit | None = None
    external_tag: str | None = None
    only_selected: bool = False
    include_paired: bool = False

    def __post_init__(self) -> None:
        if self.hierarchy_level is not None:
            object.__setattr__(
                self, "hierarchy_level", HierarchyLevel(self.hierarchy_level)
            )
        if self.people_or_benefit is not None:
            object.__setattr__(
                self, "people_or_benefit", PeopleOrBenefit(self.people_or_benefit)
            )

    def matches(self, si: SectorIndicator) -> bool:
        """True if the indicator passes the field filters."""
        return (
            (self.series is None or si.series == self.series)
            and (self.hierarchy_level is None or si.hierarchy_level is self.hierarchy_level)
            and (
                self.people_or_benefit is None
                or si.people_or_benefit is self.people_or_benefit
            )
            and has_external_tag(si, self.external_tag)
        )


def query(
    catalog: CatalogIndex, selection: SelectionState, options: QueryOptions
) -> list[SectorIndicator]:
    """Return the indicators matching the options.

    Indicators are ordered by code within each sector; sectors follow the
    catalog order.
    """
    return _run(catalog, selection, options, key=lambda si: si.code)


def query_sorted(
    catalog: CatalogIndex, selection: SelectionState, options: QueryOptions
) -> list[SectorIndicator]:
    """Like `query`, ordered by `sort_key` (then code) within each sector."""
    return _run(catalog, selection, options, key=lambda si: (si.sort_key, si.code))


def has_external_tag(si: SectorIndicator, external_tag: str | None) -> bool:
    """External filter over an indicator and its paired indicators."""
    if external_tag is None:
        return True
    group = si.expand_paired()
    if external_tag == INTERNAL:
        return any(not member.external_tags for member in group)
    return any(external_tag in member.external_tags for member in group)


def _run(
    catalog: CatalogIndex,
    selection: SelectionState,
    options: QueryOptions,
    key: Callable[[SectorIndicator], object],
) -> list[SectorIndicator]:
    sector_ids = (
        [options.sector_id] if options.sector_id is not None else list(catalog.by_sector)
    )
    result: list[SectorIndicator] = []
    for sector_id in sector_ids:
        indicators = catalog.by_sector.get(sector_id, ())

        if options.only_selected:
            selected_ids = selection.get(sector_id)
            indicators = tuple(si for si in indicators if si.id in selected_ids)

        if options.include_paired:
            expanded: dict[str, SectorIndicator] = {}
            for si in indicators:
                for member in si.expand_paired():
                    expanded.setdefault(member.id, member)
            indicators = tuple(expanded.values())

        matching = [si for si in indicators if options.matches(si)]
        result.extend(sorted(matching, key=key))  # type: ignore[arg-type]
    return result

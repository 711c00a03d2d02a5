"""Indicator read models.

Two records describe an indicator:

* `Indicator` is the sector-independent base record, as normalized from the
  metadata store.
* `SectorIndicator` is the projection of an indicator into one sector. It is
  the row type returned by catalog queries and carries the sector context,
  the series in that sector, the grouped paired indicators and the derived
  search/sort fields.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .errors import InvalidIndicatorError
from .utils import dict_to_dataclass
from .value_objects import (
    ExternalInfo,
    HierarchyLevel,
    IndicatorRef,
    PeopleOrBenefit,
    SectorMembership,
    SectorRef,
)

# pylint: disable=too-many-instance-attributes

SERIES_WIDTH = 6


@dataclass(frozen=True, slots=True)
class Indicator:
    """Immutable base record of an indicator.

    Conventions:
      - `sector_memberships` lists every sector the indicator belongs to, with
        the indicator's series in that sector (None if it has no series there).
      - exactly one membership is the main sector (`main_sector_id`).
      - `external_tags` maps funder keys to funder-specific info; an indicator
        without tags is an "internal" indicator.
      - `selectable` is False for restricted indicators only visible to
        privileged users.
    """

    id: str
    code: str
    name: str
    hierarchy_level: HierarchyLevel
    people_or_benefit: PeopleOrBenefit
    main_sector_id: str
    sector_memberships: tuple[SectorMembership, ...]
    paired_indicator_refs: tuple[IndicatorRef, ...] = ()
    external_tags: Mapping[str, ExternalInfo] = field(default_factory=dict, hash=False)
    selectable: bool = True
    description: str = ""

    def __post_init__(self) -> None:
        try:
            object.__setattr__(
                self, "hierarchy_level", HierarchyLevel(self.hierarchy_level)
            )
            object.__setattr__(
                self, "people_or_benefit", PeopleOrBenefit(self.people_or_benefit)
            )
        except ValueError as error:
            raise InvalidIndicatorError(self.code, str(error)) from error
        object.__setattr__(self, "sector_memberships", tuple(self.sector_memberships))
        object.__setattr__(
            self, "paired_indicator_refs", tuple(self.paired_indicator_refs)
        )
        object.__setattr__(
            self, "external_tags", MappingProxyType(dict(self.external_tags))
        )

        if not self.sector_memberships:
            raise InvalidIndicatorError(self.code, "sector_memberships is empty")
        main_count = sum(
            1 for ms in self.sector_memberships if ms.sector_id == self.main_sector_id
        )
        if main_count != 1:
            raise InvalidIndicatorError(
                self.code,
                f"expected exactly one membership in main sector {self.main_sector_id}, "
                f"found {main_count}",
            )

    @classmethod
    def from_dict(cls, record: Mapping[str, Any]) -> Indicator:
        """Build an indicator from a normalized plain record (nested dicts/lists)."""
        return dict_to_dataclass(cls, record)

    @property
    def series(self) -> str | None:
        """Series of the indicator in its main sector."""
        return next(
            ms.series
            for ms in self.sector_memberships
            if ms.sector_id == self.main_sector_id
        )

    @property
    def is_cross_sectoral(self) -> bool:
        """True if the indicator belongs to more than one sector."""
        return len(self.sector_memberships) > 1

    @property
    def display_name(self) -> str:
        """Human-readable "[code] name" label."""
        return f"[{self.code}] {self.name}"

    def membership(self, sector_id: str) -> SectorMembership | None:
        """Return the membership for a sector, or None if not a member."""
        for membership in self.sector_memberships:
            if membership.sector_id == sector_id:
                return membership
        return None


@dataclass(frozen=True, slots=True)
class SectorIndicator:
    """Projection of an indicator into the context of one sector.

    `paired_indicators` is only populated when the catalog groups paired
    indicators; the paired projections have no nested pairing themselves.
    """

    indicator: Indicator
    sector: SectorRef
    series: str | None = None
    paired_indicators: tuple[SectorIndicator, ...] = ()
    search_text: str = ""

    @property
    def id(self) -> str:
        return self.indicator.id

    @property
    def code(self) -> str:
        return self.indicator.code

    @property
    def name(self) -> str:
        return self.indicator.name

    @property
    def hierarchy_level(self) -> HierarchyLevel:
        return self.indicator.hierarchy_level

    @property
    def people_or_benefit(self) -> PeopleOrBenefit:
        return self.indicator.people_or_benefit

    @property
    def external_tags(self) -> Mapping[str, ExternalInfo]:
        return self.indicator.external_tags

    @property
    def selectable(self) -> bool:
        return self.indicator.selectable

    @property
    def is_cross_sectoral(self) -> bool:
        return self.indicator.is_cross_sectoral

    @property
    def main_sector_id(self) -> str:
        return self.indicator.main_sector_id

    @property
    def main_series(self) -> str | None:
        """Series of the indicator in its main sector."""
        return self.indicator.series

    @property
    def is_main_sector(self) -> bool:
        """True if this projection is in the indicator's main sector."""
        return self.sector.id == self.indicator.main_sector_id

    @property
    def sort_key(self) -> tuple[str, str, str]:
        """Lexicographically sortable (cross-sectoral, custom, series) row key."""
        return (
            "1" if self.is_cross_sectoral else "0",
            "1" if self.hierarchy_level is HierarchyLevel.CUSTOM else "0",
            (self.series or "").rjust(SERIES_WIDTH, "0"),
        )

    @property
    def display_name(self) -> str:
        return self.indicator.display_name

    def expand_paired(self) -> list[SectorIndicator]:
        """Return this indicator followed by its paired indicators."""
        return [self, *self.paired_indicators]


def build_search_text(indicators: Iterable[Indicator]) -> str:
    """Concatenate names, codes and external names for text search."""
    return "\n".join(
        "\n".join(
            [
                indicator.name,
                indicator.code,
                " ".join(info.name or "" for info in indicator.external_tags.values()),
            ]
        )
        for indicator in indicators
    )

"""Module including value objects used across the domain layer."""

from dataclasses import dataclass
from enum import Enum

INTERNAL = "internal"
"""External-tag sentinel matching indicators without any external tags."""


class HierarchyLevel(Enum):
    """Enumeration of indicator hierarchy levels"""

    GLOBAL = "global"
    SUB = "sub"
    REPORTABLE_SUB = "reportableSub"
    CUSTOM = "custom"

    @property
    def is_sub(self) -> bool:
        """True for sub and reportable sub indicators."""
        return self in (HierarchyLevel.SUB, HierarchyLevel.REPORTABLE_SUB)


class PeopleOrBenefit(Enum):
    """Enumeration of the counting axis of an indicator"""

    PEOPLE = "people"
    BENEFIT = "benefit"


@dataclass(frozen=True, slots=True)
class Sector:
    """A thematic sector of the catalog (e.g. "Agriculture")."""

    id: str
    code: str
    name: str


@dataclass(frozen=True, slots=True)
class SectorRef:
    """Sector context attached to an indicator projection."""

    id: str
    name: str


@dataclass(frozen=True, slots=True)
class SectorMembership:
    """Membership of an indicator in a sector, with its series in that sector."""

    sector_id: str
    series: str | None = None


@dataclass(frozen=True, slots=True)
class IndicatorRef:
    """Lightweight reference to another indicator (used for pairing)."""

    id: str
    code: str
    name: str


@dataclass(frozen=True, slots=True)
class ExternalInfo:
    """Funder-specific information about an indicator."""

    name: str | None = None

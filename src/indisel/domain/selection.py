"""Immutable per-sector selection state."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


@dataclass(frozen=True, slots=True)
class SelectionState:
    """Mapping from sector id to the set of selected indicator ids.

    The state is a value: every operation returns a new instance and never
    modifies the receiver. Sector keys keep their insertion order.
    """

    selected: Mapping[str, frozenset[str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "selected",
            MappingProxyType(
                {
                    sector_id: frozenset(ids)
                    for sector_id, ids in self.selected.items()
                }
            ),
        )

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Iterable[str]]) -> SelectionState:
        """Build a state from any sector -> iterable-of-ids mapping."""
        return cls({sector_id: frozenset(ids) for sector_id, ids in mapping.items()})

    def __iter__(self) -> Iterator[str]:
        return iter(self.selected)

    def __len__(self) -> int:
        return len(self.selected)

    def __contains__(self, sector_id: object) -> bool:
        return sector_id in self.selected

    @property
    def sector_ids(self) -> list[str]:
        """Sector ids present in the state, in insertion order."""
        return list(self.selected)

    def get(self, sector_id: str) -> frozenset[str]:
        """Selected ids of a sector (empty if the sector has no entry)."""
        return self.selected.get(sector_id, frozenset())

    def all_ids(self) -> frozenset[str]:
        """Selected ids across all sectors."""
        return frozenset().union(*self.selected.values())

    def sectors_of(self, indicator_id: str) -> list[str]:
        """Sector ids whose selection contains the indicator."""
        return [
            sector_id for sector_id, ids in self.selected.items() if indicator_id in ids
        ]

    def merge(self, patch: Mapping[str, Iterable[str]]) -> SelectionState:
        """Shallow-merge a sector -> ids patch (patched sectors are replaced)."""
        merged = dict(self.selected)
        merged.update({sector_id: frozenset(ids) for sector_id, ids in patch.items()})
        return SelectionState(merged)

    def keep_sectors(self, sector_ids: Iterable[str]) -> SelectionState:
        """Return a state restricted to the given sectors, in the given order."""
        return SelectionState(
            {sector_id: self.get(sector_id) for sector_id in sector_ids}
        )

    def to_dict(self) -> dict[str, list[str]]:
        """Plain {sector_id: sorted ids} representation, for persistence."""
        return {sector_id: sorted(ids) for sector_id, ids in self.selected.items()}

"""Layered indicator selections of a project.

A project tracks three selections over the same catalog:

* `selection`: the project-wide selection, with paired indicators grouped and
  relationship rules applied on every change.
* `mer`: the indicators reported in the MER (reporting) document.
* `unique_indicators`: the indicators used to count unique beneficiaries.

The two narrower selections list paired indicators individually and only
expose indicators selected in `selection`. They are re-synchronized with it
whenever the project-wide selection or the project sectors change.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace

from indisel import config
from indisel.domain.catalog import CatalogIndex
from indisel.domain.engine import SelectionEngine
from indisel.domain.errors import UnknownSectorError
from indisel.domain.indicator import Indicator
from indisel.domain.selection import SelectionState
from indisel.domain.validation import (
    at_least_one_selected_per_sector,
    total_selected_count,
)
from indisel.domain.value_objects import Sector
from indisel.interfaces.selection_repository import SelectionRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectSelection:
    """Immutable bundle of the layered selections of a project."""

    configured_sectors: tuple[Sector, ...]
    sectors: tuple[Sector, ...]
    selection: SelectionEngine
    mer: SelectionEngine
    unique_indicators: SelectionEngine

    # --- Construction ---

    @classmethod
    def build(  # pylint: disable=too-many-arguments
        cls,
        indicators: Iterable[Indicator],
        sectors: Iterable[Sector],
        project_sectors: Iterable[Sector] = (),
        *,
        selection: SelectionState | None = None,
        mer: SelectionState | None = None,
        unique_indicators: SelectionState | None = None,
    ) -> ProjectSelection:
        """Build the project's engines from the catalog definition.

        Args:
            indicators: Normalized base indicators.
            sectors: All configured sectors.
            project_sectors: Sectors of the project.
            selection: Initial project-wide selection.
            mer: Initial MER selection.
            unique_indicators: Initial unique-beneficiary selection.
        """
        indicators = tuple(indicators)
        sectors = tuple(sectors)
        selection_engine = SelectionEngine.build(
            indicators, sectors, group_paired=True, selection=selection
        )
        ungrouped = CatalogIndex.build(indicators, sectors, group_paired=False)
        allowed = selection_engine.selected_ids_by_sector()
        return cls(
            configured_sectors=sectors,
            sectors=tuple(project_sectors),
            selection=selection_engine,
            mer=SelectionEngine(ungrouped.restricted_to(allowed), mer),
            unique_indicators=SelectionEngine(
                ungrouped.restricted_to(allowed), unique_indicators
            ),
        )

    @classmethod
    def load(  # pylint: disable=too-many-arguments
        cls,
        repository: SelectionRepository,
        project_id: str,
        indicators: Iterable[Indicator],
        sectors: Iterable[Sector],
        project_sectors: Iterable[Sector] = (),
    ) -> ProjectSelection:
        """Build the project's engines from the selections stored in a repository."""
        return cls.build(
            indicators,
            sectors,
            project_sectors,
            selection=repository.get(project_id, "selection"),
            mer=repository.get(project_id, "mer"),
            unique_indicators=repository.get(project_id, "unique_indicators"),
        )

    def save(self, repository: SelectionRepository, project_id: str) -> None:
        """Store the three selections of the project in a repository."""
        repository.add(project_id, "selection", self.selection.selection)
        repository.add(project_id, "mer", self.mer.selection)
        repository.add(project_id, "unique_indicators", self.unique_indicators.selection)

    # --- Mutations ---

    def update_selection(
        self, sector_id: str, indicator_ids: Sequence[str]
    ) -> tuple[ProjectSelection, tuple[str, ...]]:
        """Change the project-wide selection of a sector.

        Relationship rules are applied, sectors that gained selected
        indicators are added to the project, and the narrower selections are
        re-synchronized.

        Returns:
            The new project selection and the messages for the user.

        Raises:
            UnknownSectorError: If the sector is not a configured sector.
        """
        self._check_sector(sector_id)
        updated = self.selection.update_selected_with_relations(sector_id, indicator_ids)

        current_ids = {sector.id for sector in self.sectors}
        ids_with_selection = {si.sector.id for si in updated.get(only_selected=True)}
        new_sectors = tuple(
            sector
            for sector in self.configured_sectors
            if sector.id in ids_with_selection and sector.id not in current_ids
        )
        if new_sectors:
            logger.debug(
                "Sectors added by selection: %s", [sector.code for sector in new_sectors]
            )

        project = replace(
            self,
            sectors=self.sectors + new_sectors,
            selection=updated,
            mer=self.mer.update_super_set(updated),
            unique_indicators=self.unique_indicators.update_super_set(updated),
        )
        return project, updated.messages

    def update_mer_selection(
        self, sector_id: str, indicator_ids: Sequence[str]
    ) -> ProjectSelection:
        """Replace the MER selection of a sector."""
        self._check_sector(sector_id)
        return replace(self, mer=self.mer.update_selected({sector_id: indicator_ids}))

    def update_unique_indicators_selection(
        self, sector_id: str, indicator_ids: Sequence[str]
    ) -> ProjectSelection:
        """Replace the unique-beneficiary selection of a sector."""
        self._check_sector(sector_id)
        return replace(
            self,
            unique_indicators=self.unique_indicators.update_selected(
                {sector_id: indicator_ids}
            ),
        )

    def set_sectors(self, sectors: Iterable[Sector]) -> ProjectSelection:
        """Replace the project sectors, dropping selections of removed sectors."""
        sectors = tuple(sectors)
        selection = self.selection.keep_selection_in_sectors(sectors)
        return replace(
            self,
            sectors=sectors,
            selection=selection,
            mer=self.mer.update_super_set(selection),
            unique_indicators=self.unique_indicators.update_super_set(selection),
        )

    # --- Validation ---

    def validate_selection(self) -> list[str]:
        """At least one indicator must be selected in every project sector."""
        return at_least_one_selected_per_sector(self.selection, self.sectors)

    def validate_mer(self, limits: config.SelectionLimits | None = None) -> list[str]:
        """The MER selection must hold between min and max indicators.

        The minimum is lowered to the number of indicators selected in the
        project when fewer are available.
        """
        limits = limits or config.get_selection_limits()
        available = len(self.selection.get_all_selected())
        return total_selected_count(
            self.mer,
            self.sectors,
            min=min(available, limits.min_total),
            max=limits.max_total,
        )

    def validate(
        self, limits: config.SelectionLimits | None = None
    ) -> dict[str, list[str]]:
        """Messages of every selection rule, keyed by selection kind."""
        return {
            "selection": self.validate_selection(),
            "mer": self.validate_mer(limits),
        }

    def _check_sector(self, sector_id: str) -> None:
        if all(sector.id != sector_id for sector in self.configured_sectors):
            raise UnknownSectorError(sector_id)

"""Unit tests for the selection engine."""

from collections.abc import Callable

import pytest

from indisel.domain.engine import CONFLICT_MESSAGE, SelectionEngine
from indisel.domain.relations import (
    AUTOSELECTION_MESSAGE,
    UNSELECTION_WARNING,
    SelectionMessages,
)
from indisel.domain.selection import SelectionState
from indisel.domain.value_objects import HierarchyLevel
from tests.fixtures.catalog import AGRI, FOOD, SECTORS, ids, sample_indicators

# pylint: disable=magic-value-comparison


class TestBuild:
    """Tests for building engines."""

    @staticmethod
    def test_defaults(engine: SelectionEngine) -> None:
        """A new engine has an empty selection and no messages."""
        assert engine.selection == SelectionState()
        assert engine.messages == ()
        assert engine.are_paired_grouped
        assert engine.get(only_selected=True) == []

    @staticmethod
    def test_initial_selection(make_engine: Callable[..., SelectionEngine]) -> None:
        """An initial selection is exposed as-is, without relation resolution."""
        engine = make_engine(selection=SelectionState.from_mapping({"AGRI": ["agri-s1"]}))
        assert ids(engine.get(only_selected=True)) == ["agri-s1"]

    @staticmethod
    def test_super_set(make_engine: Callable[..., SelectionEngine]) -> None:
        """A superset engine restricts the exposed indicators."""
        super_set = make_engine().update_selected({"AGRI": ["agri-people"]})
        engine = make_engine(group_paired=False, super_set=super_set)

        assert not engine.are_paired_grouped
        assert ids(engine.get()) == ["agri-people", "agri-benefit"]


class TestReads:
    """Tests for the engine read helpers."""

    @staticmethod
    def test_get_all_selected(engine: SelectionEngine) -> None:
        """Every selected indicator is returned with its paired indicators."""
        engine = engine.update_selected({"AGRI": ["agri-people"], "FOOD": ["food-g"]})
        assert ids(engine.get_all_selected()) == ["agri-people", "agri-benefit", "food-g"]

    @staticmethod
    def test_selected_ids_by_sector(engine: SelectionEngine) -> None:
        """Selected ids are grouped by sector, for every catalog sector."""
        engine = engine.update_selected({"AGRI": ["agri-people", "missing"]})

        assert engine.selected_ids_by_sector() == {
            "AGRI": frozenset({"agri-people", "agri-benefit"}),
            "HEALTH": frozenset(),
            "FOOD": frozenset(),
        }
        assert engine.selected_ids_by_sector(include_paired=False)["AGRI"] == frozenset(
            {"agri-people"}
        )

    @staticmethod
    def test_get_selection_info_does_not_mutate(engine: SelectionEngine) -> None:
        """Selection info is a preview; the engine selection is unchanged."""
        info = engine.get_selection_info(["agri-s1"], "AGRI")
        assert ids(info.selected) == ["agri-g"]
        assert engine.selection == SelectionState()


class TestUpdateSelected:
    """Tests for the raw selection patch."""

    @staticmethod
    def test_shallow_merge(engine: SelectionEngine) -> None:
        """Patched sectors are replaced without relation resolution."""
        first = engine.update_selected({"AGRI": ["agri-s1"], "FOOD": ["food-s"]})
        second = first.update_selected({"AGRI": ["agri-s2"]})

        assert second.selection.to_dict() == {"AGRI": ["agri-s2"], "FOOD": ["food-s"]}
        assert first.selection.to_dict() == {"AGRI": ["agri-s1"], "FOOD": ["food-s"]}
        assert engine.selection == SelectionState()
        assert second.messages == ()


class TestUpdateSelectedWithRelations:
    """Tests for relation-aware selection changes."""

    @staticmethod
    def test_autoselects_global(engine: SelectionEngine) -> None:
        """Selecting a sub selects its global and reports it."""
        updated = engine.update_selected_with_relations("AGRI", ["agri-s2"])

        assert updated.selection.to_dict() == {"AGRI": ["agri-g", "agri-s2"]}
        assert updated.messages == (
            AUTOSELECTION_MESSAGE,
            "Agriculture: [B05000] Farmers trained (global)",
        )
        assert engine.selection == SelectionState()

    @staticmethod
    def test_autoselects_in_main_sector(engine: SelectionEngine) -> None:
        """A cross-sectoral sub selects the global of its main sector."""
        updated = engine.update_selected_with_relations("AGRI", ["cross"])
        assert updated.selection.to_dict() == {"AGRI": ["cross"], "HEALTH": ["health-g9"]}
        assert updated.messages[1] == (
            "Health: [P09000] People reached with nutrition services (global)"
        )

    @staticmethod
    def test_paired_indicator_globals(engine: SelectionEngine) -> None:
        """A grouped indicator brings in the global of its group."""
        updated = engine.update_selected_with_relations("AGRI", ["agri-people"])
        assert updated.selection.to_dict() == {"AGRI": ["agri-g", "agri-people"]}

    @staticmethod
    def test_missing_global_is_not_an_error(engine: SelectionEngine) -> None:
        """A sub without global is selected alone."""
        updated = engine.update_selected_with_relations("AGRI", ["agri-orphan", "custom"])
        assert updated.selection.to_dict() == {"AGRI": ["agri-orphan", "custom"]}
        assert updated.messages == ()

    @staticmethod
    def test_global_stays_pinned(engine: SelectionEngine) -> None:
        """A global cannot be unselected while one of its subs is selected."""
        selected = engine.update_selected_with_relations("AGRI", ["agri-s1", "agri-s2"])
        updated = selected.update_selected_with_relations("AGRI", ["agri-s1"])

        assert updated.selection.to_dict() == {"AGRI": ["agri-g", "agri-s1"]}
        assert updated.messages == (UNSELECTION_WARNING,)

    @staticmethod
    def test_removing_all_subs_releases_global(engine: SelectionEngine) -> None:
        """Removing the last sub and the global in one change unselects both."""
        selected = engine.update_selected_with_relations("AGRI", ["agri-s1"])
        updated = selected.update_selected_with_relations("AGRI", [])

        assert updated.selection.to_dict() == {"AGRI": []}
        assert updated.messages == ()

    @staticmethod
    def test_duplicates_are_ignored(engine: SelectionEngine) -> None:
        """Duplicated candidates are selected once."""
        updated = engine.update_selected_with_relations("FOOD", ["food-g", "food-g"])
        assert updated.selection.to_dict() == {"FOOD": ["food-g"]}

    @staticmethod
    def test_other_sectors_are_preserved(engine: SelectionEngine) -> None:
        """Editing a sector keeps the selections of other sectors."""
        selected = engine.update_selected_with_relations("FOOD", ["food-s"])
        updated = selected.update_selected_with_relations("AGRI", ["agri-s1"])

        assert updated.selection.to_dict() == {
            "FOOD": ["food-g", "food-s"],
            "AGRI": ["agri-g", "agri-s1"],
        }

    @staticmethod
    def test_selected_elsewhere_is_moved(engine: SelectionEngine) -> None:
        """Selecting an indicator already selected in another sector moves it."""
        selected = engine.update_selected_with_relations("AGRI", ["cross"])
        updated = selected.update_selected_with_relations("HEALTH", ["cross", "health-g9"])

        assert updated.selection.to_dict() == {
            "AGRI": [],
            "HEALTH": ["cross", "health-g9"],
        }
        assert updated.messages == (
            CONFLICT_MESSAGE.format(code="P09001", sector="Agriculture"),
        )

    @staticmethod
    def test_non_exclusive(engine: SelectionEngine) -> None:
        """With `exclusive=False` an indicator may be selected in several sectors."""
        selected = engine.update_selected_with_relations("AGRI", ["cross"])
        updated = selected.update_selected_with_relations(
            "HEALTH", ["cross", "health-g9"], exclusive=False
        )

        assert updated.selection.to_dict() == {
            "AGRI": ["cross"],
            "HEALTH": ["cross", "health-g9"],
        }
        assert updated.messages == ()

    @staticmethod
    def test_without_arguments_reapplies_rules(engine: SelectionEngine) -> None:
        """Without arguments the rules are applied to the first selected sector."""
        raw = engine.update_selected({"AGRI": ["agri-s1"]})
        updated = raw.update_selected_with_relations()

        assert updated.selection.to_dict() == {"AGRI": ["agri-g", "agri-s1"]}

    @staticmethod
    def test_without_arguments_on_empty_selection(engine: SelectionEngine) -> None:
        """Without arguments and nothing selected, the engine is returned unchanged."""
        assert engine.update_selected_with_relations() is engine

    @staticmethod
    def test_candidates_default_to_current_selection(engine: SelectionEngine) -> None:
        """Only a sector id re-applies the rules to that sector's selection."""
        raw = engine.update_selected({"AGRI": ["agri-s1"], "FOOD": ["food-s"]})
        updated = raw.update_selected_with_relations("FOOD")

        assert updated.selection.to_dict() == {
            "AGRI": ["agri-g", "agri-s1"],
            "FOOD": ["food-g", "food-s"],
        }

    @staticmethod
    def test_filter(engine: SelectionEngine) -> None:
        """Previously selected ids rejected by the filter trigger nothing."""
        raw = engine.update_selected({"AGRI": ["agri-s1"]})
        updated = raw.update_selected_with_relations(
            "FOOD", ["food-s"], filter=lambda indicator_id: indicator_id.startswith("food")
        )

        assert updated.selection.to_dict() == {
            "AGRI": ["agri-s1"],
            "FOOD": ["food-g", "food-s"],
        }

    @staticmethod
    def test_filter_keeps_global_in_one_sector(make_indicator) -> None:
        """A global hidden by the filter is not selected a second time in its main sector."""
        engine = SelectionEngine.build(
            [
                make_indicator(
                    "g",
                    "P07000",
                    level=HierarchyLevel.GLOBAL,
                    sectors={"HEALTH": "7000", "AGRI": "5000"},
                ),
                make_indicator("s", "P07001", sectors={"HEALTH": "7001"}),
            ],
            SECTORS,
            group_paired=True,
        )
        selected = engine.update_selected_with_relations("AGRI", ["g"])
        updated = selected.update_selected_with_relations(
            "HEALTH", ["s"], filter=lambda indicator_id: indicator_id != "g"
        )

        assert updated.selection.to_dict() == {"AGRI": ["g"], "HEALTH": ["s"]}
        assert updated.selection.sectors_of("g") == ["AGRI"]
        assert updated.messages == ()

    @staticmethod
    def test_custom_messages(engine: SelectionEngine) -> None:
        """Custom message texts are used in the engine messages."""
        updated = engine.update_selected_with_relations(
            "FOOD", ["food-s"], messages=SelectionMessages(autoselection="Also selected:")
        )
        assert updated.messages == ("Also selected:", "Food: [F01000] Food baskets distributed (global)")

    @staticmethod
    def test_non_selectable_indicators_are_accepted(engine: SelectionEngine) -> None:
        """`selectable` is informational: restricted indicators can still be selected."""
        updated = engine.update_selected_with_relations("AGRI", ["custom"])
        assert ids(updated.get(only_selected=True)) == ["custom"]

    @staticmethod
    def test_idempotent(engine: SelectionEngine) -> None:
        """Applying the resulting selection again changes nothing."""
        first = engine.update_selected_with_relations("AGRI", ["agri-s2", "cross"])
        again = first.update_selected_with_relations("AGRI", sorted(first.selection.get("AGRI")))

        assert again.selection == first.selection
        assert again.messages == ()


class TestSectors:
    """Tests for sector-level maintenance operations."""

    @staticmethod
    def test_keep_selection_in_sectors(engine: SelectionEngine) -> None:
        """Selections of other sectors are dropped; kept sectors accept ids or sectors."""
        engine = engine.update_selected({"AGRI": ["agri-s1"], "HEALTH": ["health-g"]})
        kept = engine.keep_selection_in_sectors([AGRI, "FOOD"])

        assert kept.selection.to_dict() == {"AGRI": ["agri-s1"], "FOOD": []}
        assert ids(kept.get(only_selected=True)) == ["agri-s1"]

    @staticmethod
    def test_update_super_set(make_engine: Callable[..., SelectionEngine]) -> None:
        """A new superset changes the exposed indicators but keeps the selection."""
        super_set = make_engine().update_selected({"FOOD": ["food-g", "food-s"]})
        narrow = make_engine(group_paired=False, super_set=super_set)
        narrow = narrow.update_selected({"FOOD": ["food-s"]})
        assert ids(narrow.get(only_selected=True)) == ["food-s"]

        narrowed = narrow.update_super_set(super_set.update_selected({"FOOD": ["food-g"]}))

        assert ids(narrowed.get()) == ["food-g"]
        assert narrowed.get(only_selected=True) == []
        assert narrowed.selection == narrow.selection


def test_build_from_sample_catalog() -> None:
    """Engines can be built straight from the catalog definition."""
    engine = SelectionEngine.build(sample_indicators(), SECTORS, group_paired=True)
    assert ids(engine.get(sector_id=FOOD.id)) == ["food-g", "food-s"]


def test_unknown_sector_id_in_patch(engine: SelectionEngine) -> None:
    """Unknown sectors in a patch are stored but never exposed."""
    engine = engine.update_selected({"NOPE": ["food-g"]})
    assert engine.selection.get("NOPE") == frozenset({"food-g"})
    assert engine.get(only_selected=True) == []


@pytest.mark.parametrize("sector_id", ["AGRI", "HEALTH", "FOOD"])
def test_empty_candidates(engine: SelectionEngine, sector_id: str) -> None:
    """Selecting nothing in a sector yields an empty entry for it."""
    updated = engine.update_selected_with_relations(sector_id, [])
    assert updated.selection.to_dict() == {sector_id: []}
